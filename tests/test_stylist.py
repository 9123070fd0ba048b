import logging

import matplotlib.pyplot as plt
import numpy as np
import pytest
from matplotlib import colors as mcolors

from figpolish.config.schema import DEFAULT_MARKERS
from figpolish.viz import stylist
from figpolish.viz.elements import ElementKind
from figpolish.viz.stylist import (
    compute_sizes,
    errorbar_cap_size,
    style_colorbars,
    style_panel,
)

RED, GREEN, BLUE = (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)


def _rgb(c):
    return tuple(float(v) for v in mcolors.to_rgb(c))


def test_sizes_at_unit_scale(cfg):
    sz = compute_sizes(cfg, 1.0)
    assert (sz.font, sz.title, sz.label) == (10, 12, 10)
    assert sz.line_width == pytest.approx(1.5)
    assert sz.axis_line_width == pytest.approx(0.75)
    assert sz.marker_size == pytest.approx(6.0)


def test_sizes_have_floors(cfg):
    sz = compute_sizes(cfg, 0.1)
    assert sz.line_width == 0.75
    assert sz.axis_line_width == 0.5
    assert sz.marker_size == 3.0


def test_palette_cycles_in_creation_order(make_cfg, line_axes):
    cfg = make_cfg(color_palette="custom", custom_color_palette=[RED, GREEN, BLUE])
    fig, ax = line_axes(n=7)
    result = style_panel(ax, cfg, 1.0)
    assert len(result.candidates) == 7
    expected = [RED, GREEN, BLUE, RED, GREEN, BLUE, RED]
    assert [_rgb(line.get_color()) for line in ax.lines] == expected


def test_reverse_order_starts_from_last(make_cfg, line_axes):
    cfg = make_cfg(color_palette="custom", custom_color_palette=[RED, GREEN], legend_reverse_order=True)
    fig, ax = line_axes(n=2)
    result = style_panel(ax, cfg, 1.0)
    assert [el.label for el in result.legend_entries] == ["s1", "s0"]
    assert _rgb(ax.lines[1].get_color()) == RED
    assert _rgb(ax.lines[0].get_color()) == GREEN


def test_marker_and_line_style_cycling_thresholds(cfg, line_axes):
    fig, ax = line_axes(n=2)
    style_panel(ax, cfg, 1.0)
    assert [line.get_marker() for line in ax.lines] == ["None", "None"]
    assert [line.get_linestyle() for line in ax.lines] == ["-", "-"]

    fig, ax = line_axes(n=4)
    style_panel(ax, cfg, 1.0)
    assert [line.get_marker() for line in ax.lines] == list(DEFAULT_MARKERS[:4])
    assert [line.get_linestyle() for line in ax.lines] == ["-", "--", ":", "-."]


def test_cycling_can_be_forced_or_disabled(make_cfg, line_axes):
    fig, ax = line_axes(n=1)
    style_panel(ax, make_cfg(cycle_marker_styles=True), 1.0)
    assert ax.lines[0].get_marker() == DEFAULT_MARKERS[0]

    fig, ax = line_axes(n=6)
    style_panel(ax, make_cfg(cycle_marker_styles=False, cycle_line_styles=False), 1.0)
    assert {line.get_marker() for line in ax.lines} == {"None"}


def test_excluded_elements_untouched(make_cfg):
    cfg = make_cfg(exclude_object_tags=["ref"], color_palette="custom", custom_color_palette=[RED, GREEN, BLUE])
    fig, ax = plt.subplots()
    (ref,) = ax.plot([0, 1], color="black", linewidth=4, label="ref")
    ref.set_gid("ref")
    (a,) = ax.plot([0, 1], label="a")
    (b,) = ax.plot([1, 0], label="b")

    result = style_panel(ax, cfg, 1.0)
    assert _rgb(ref.get_color()) == (0.0, 0.0, 0.0)
    assert ref.get_linewidth() == 4
    # the excluded line does not consume a palette slot
    assert _rgb(a.get_color()) == RED
    assert _rgb(b.get_color()) == GREEN
    assert [el.label for el in result.candidates] == ["a", "b"]


def test_hidden_elements_sized_but_not_colored(make_cfg):
    cfg = make_cfg(color_palette="custom", custom_color_palette=[RED, GREEN, BLUE])
    fig, ax = plt.subplots()
    (guide,) = ax.plot([0, 1], color="black", label="_guide")
    (ghost,) = ax.plot([0, 1], color="black", label="ghost")
    ghost.set_visible(False)
    (a,) = ax.plot([0, 1], label="a")
    (b,) = ax.plot([1, 0], label="b")

    result = style_panel(ax, cfg, 1.0)
    for line in (guide, ghost):
        assert _rgb(line.get_color()) == (0.0, 0.0, 0.0)
        assert line.get_linewidth() == pytest.approx(1.5)
    assert _rgb(a.get_color()) == RED
    assert _rgb(b.get_color()) == GREEN
    assert [el.label for el in result.candidates] == ["a", "b"]


def test_failing_handler_leaves_siblings_styled(make_cfg, monkeypatch, caplog):
    cfg = make_cfg(color_palette="custom", custom_color_palette=[RED, GREEN, BLUE])
    original = stylist._HANDLERS[ElementKind.LINE]

    def flaky(el, a, cfg, sz):
        if el.artist.get_gid() == "bad":
            raise RuntimeError("cannot style")
        original(el, a, cfg, sz)

    monkeypatch.setitem(stylist._HANDLERS, ElementKind.LINE, flaky)
    fig, ax = plt.subplots()
    (first,) = ax.plot([0, 1], label="first")
    (bad,) = ax.plot([0, 1], color="black", linewidth=4, label="bad")
    bad.set_gid("bad")
    (last,) = ax.plot([1, 0], label="last")

    with caplog.at_level(logging.WARNING, logger="figpolish"):
        style_panel(ax, cfg, 1.0)
    assert _rgb(first.get_color()) == RED
    assert _rgb(last.get_color()) == BLUE
    assert first.get_linewidth() == last.get_linewidth() == pytest.approx(1.5)
    assert bad.get_linewidth() == 4
    assert "cannot style" in caplog.text


def test_styling_is_idempotent(cfg, line_axes):
    fig, ax = line_axes(n=4)
    ax.set_title("T")
    ax.set_xlabel("x")

    def snapshot():
        return (
            [(_rgb(l.get_color()), l.get_linewidth(), l.get_marker(), l.get_linestyle()) for l in ax.lines],
            ax.title.get_fontsize(),
            ax.xaxis.label.get_fontsize(),
            ax.margins(),
        )

    style_panel(ax, cfg, 1.3)
    first = snapshot()
    style_panel(ax, cfg, 1.3)
    assert snapshot() == first


def test_axes_text_styling(cfg):
    fig, ax = plt.subplots()
    ax.set_title("Title")
    ax.set_ylabel("y")
    style_panel(ax, cfg, 1.0)
    assert ax.title.get_fontsize() == 12
    assert ax.title.get_fontweight() == "bold"
    assert ax.yaxis.label.get_fontsize() == 10
    assert _rgb(ax.title.get_color()) == (0.15, 0.15, 0.15)
    # empty labels are left alone
    assert ax.xaxis.label.get_text() == ""


def test_box_grid_and_limits(make_cfg):
    fig, ax = plt.subplots()
    ax.plot([0, 1], [0, 1])
    style_panel(ax, make_cfg(axis_box_style="off", grid_density="none", axis_limit_mode="tight"), 1.0)
    assert not ax.spines["top"].get_visible()
    assert not ax.spines["right"].get_visible()
    assert ax.spines["left"].get_visible()
    assert not any(gl.get_visible() for gl in ax.xaxis.get_gridlines())
    assert ax.margins() == (0.0, 0.0)

    style_panel(ax, make_cfg(axes_layer="bottom"), 1.0)
    assert all(s.get_visible() for s in ax.spines.values())
    assert any(gl.get_visible() for gl in ax.xaxis.get_gridlines())
    assert ax.margins() == pytest.approx((0.03, 0.03))
    assert ax.get_axisbelow() is True


def test_scatter_bar_and_histogram(make_cfg, rng):
    cfg = make_cfg(color_palette="custom", custom_color_palette=[RED, GREEN, BLUE])
    fig, ax = plt.subplots()
    pts = ax.scatter([0, 1, 2], [1, 2, 3], label="pts")
    bars = ax.bar([4, 5], [1, 2], label="bars")
    _, _, hist = ax.hist(rng.normal(size=100), bins=5, label="hist")
    style_panel(ax, cfg, 1.0)

    assert _rgb(pts.get_facecolor()[0]) == RED
    assert pts.get_sizes()[0] == pytest.approx(36.0)
    assert _rgb(bars.patches[0].get_facecolor()) == GREEN
    face = hist.patches[0].get_facecolor()
    assert _rgb(face) == BLUE and face[3] == pytest.approx(0.7)


def test_errorbar_cap_size_bases(cfg, make_cfg):
    sz = compute_sizes(cfg, 1.0)
    assert errorbar_cap_size(cfg, sz) == pytest.approx(3.0)
    alt = make_cfg(errorbar_cap_basis="line_width")
    assert errorbar_cap_size(alt, compute_sizes(alt, 1.0)) == pytest.approx(4.5)


def test_errorbar_caps_resized(cfg):
    fig, ax = plt.subplots()
    container = ax.errorbar([0, 1], [1, 2], yerr=0.2, capsize=10, label="e")
    style_panel(ax, cfg, 2.0)
    caplines = container.lines[1]
    assert caplines
    # 6 * 0.5 * 2.0 points, doubled for the cap marker
    assert all(c.get_markersize() == pytest.approx(12.0) for c in caplines)


def test_colorbar_restyled(cfg):
    fig, ax = plt.subplots()
    im = ax.imshow(np.arange(9).reshape(3, 3))
    cb = fig.colorbar(im, ax=ax)
    cb.set_label("value")
    assert style_colorbars(ax, cfg, compute_sizes(cfg, 1.0)) == 1
    assert cb.ax.yaxis.label.get_fontsize() == 10
    assert _rgb(cb.outline.get_edgecolor()) == (0.15, 0.15, 0.15)


def test_three_d_view_preset(make_cfg):
    fig = plt.figure()
    ax = fig.add_subplot(projection="3d")
    ax.plot([0, 1], [0, 1], [0, 1])
    style_panel(ax, make_cfg(view_preset_3d="top"), 1.0)
    assert (ax.elev, ax.azim) == (90.0, -90.0)
