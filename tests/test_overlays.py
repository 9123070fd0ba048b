import matplotlib.pyplot as plt
import numpy as np
import pytest

from figpolish import beautify
from figpolish.viz.overlays import (
    PANEL_LABEL_GID,
    STATS_GID,
    compute_statistics,
    corner,
    format_statistics,
    panel_label_text,
    roman,
)


def _overlay_texts(ax, gid):
    return [t for t in ax.texts if t.get_gid() == gid]


@pytest.mark.parametrize(
    "index, style, expected",
    [(0, "A", "A"), (2, "a", "c"), (1, "a)", "b)"), (3, "I", "IV"), (8, "i", "ix"), (4, "1", "5"), (27, "A", "AB")],
)
def test_panel_label_text(index, style, expected):
    assert panel_label_text(index, style) == expected


def test_roman():
    assert roman(1994) == "MCMXCIV"


def test_corner_anchor():
    x, y, ha, va = corner("northwest_inset", 0.02, 0.03)
    assert (x, y) == pytest.approx((0.02, 0.97))
    assert (ha, va) == ("left", "top")
    x, y, ha, va = corner("southeast_inset", 0.02, 0.03)
    assert (x, y) == pytest.approx((0.98, 0.03))
    assert (ha, va) == ("right", "bottom")


def test_statistics_ignore_non_finite():
    values = compute_statistics([1.0, 2.0, 3.0, np.nan], ["mean", "std", "n", "max"])
    assert values == {"mean": 2.0, "std": 1.0, "n": 3.0, "max": 3.0}
    assert format_statistics(values, ["mean", "std", "n"], 2) == "Mean: 2.00\nStd Dev: 1.00\nN: 3"
    assert compute_statistics([], ["mean", "n"]) == {"n": 0}


def test_panel_labels_added_once_per_panel():
    fig, axs = plt.subplots(1, 3)
    overrides = {"panel_labeling": {"enabled": True, "style": "a)"}}
    beautify(fig, overrides)
    beautify(fig, overrides)
    labels = [_overlay_texts(ax, PANEL_LABEL_GID) for ax in axs]
    assert [len(found) for found in labels] == [1, 1, 1]
    assert [found[0].get_text() for found in labels] == ["a)", "b)", "c)"]

    beautify(fig)
    assert all(not _overlay_texts(ax, PANEL_LABEL_GID) for ax in axs)


def test_single_panel_gets_no_label():
    fig, ax = plt.subplots()
    beautify(fig, panel_labeling={"enabled": True})
    assert not _overlay_texts(ax, PANEL_LABEL_GID)


def test_stats_overlay_uses_first_visible_series():
    fig, ax = plt.subplots()
    ax.plot([0, 1, 2], [1.0, 2.0, 3.0], label="a")
    ax.plot([0, 1, 2], [10.0, 20.0, 30.0], label="b")
    beautify(fig, stats_overlay={"enabled": True, "statistics": ["mean", "n"], "precision": 1})
    (text,) = _overlay_texts(ax, STATS_GID)
    assert text.get_text() == "Mean: 2.0\nN: 3"


def test_stats_overlay_by_gid():
    fig, ax = plt.subplots()
    ax.plot([0, 1], [1.0, 1.0], label="a")
    (b,) = ax.plot([0, 1], [4.0, 6.0], label="b")
    b.set_gid("target")
    beautify(fig, stats_overlay={"enabled": True, "statistics": "mean", "target_gid": "target"})
    (text,) = _overlay_texts(ax, STATS_GID)
    assert text.get_text() == "Mean: 5.00"

    beautify(fig, stats_overlay={"enabled": True, "target_gid": "missing"})
    assert not _overlay_texts(ax, STATS_GID)
