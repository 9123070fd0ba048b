import matplotlib.pyplot as plt
import numpy as np

from figpolish.config import ConfigRecord
from figpolish.viz.elements import (
    ElementKind,
    discover_elements,
    element_excluded,
    is_candidate,
)


def test_kinds_in_creation_order(rng):
    fig, ax = plt.subplots()
    ax.plot([0, 1], [0, 1], label="line")
    ax.bar([1, 2, 3], [3, 1, 2], label="bars")
    ax.scatter([0, 1], [1, 0], label="pts")
    ax.hist(rng.normal(size=200), bins=8, label="hist")
    ax.errorbar([0, 1], [1, 2], yerr=[0.1, 0.2], label="err")

    elements = discover_elements(ax)
    assert [el.kind for el in elements] == [
        ElementKind.LINE,
        ElementKind.BAR,
        ElementKind.SCATTER,
        ElementKind.HISTOGRAM,
        ElementKind.ERRORBAR,
    ]
    assert [el.label for el in elements] == ["line", "bars", "pts", "hist", "err"]


def test_bar_with_error_bars_is_one_element():
    fig, ax = plt.subplots()
    ax.bar([1, 2], [2, 3], yerr=[0.5, 0.5], label="b")
    elements = discover_elements(ax)
    assert len(elements) == 1
    assert elements[0].kind is ElementKind.BAR


def test_surface_kinds():
    fig = plt.figure()
    ax = fig.add_subplot(projection="3d")
    x, y = np.meshgrid(np.linspace(-1, 1, 5), np.linspace(-1, 1, 5))
    ax.plot_surface(x, y, x * y)
    assert [el.kind for el in discover_elements(ax)] == [ElementKind.SURFACE]

    fig, ax = plt.subplots()
    ax.pcolormesh(np.arange(12).reshape(3, 4))
    assert [el.kind for el in discover_elements(ax)] == [ElementKind.SURFACE]


def test_label_conventions():
    fig, ax = plt.subplots()
    ax.plot([0, 1], label="named")
    ax.plot([0, 1])
    ax.plot([0, 1], label="_hidden")
    named, auto, hidden = discover_elements(ax)

    assert named.named and is_candidate(named)
    assert not auto.named and not auto.hidden_from_legend and is_candidate(auto)
    assert hidden.hidden_from_legend and not is_candidate(hidden)


def test_invisible_element_is_not_candidate():
    fig, ax = plt.subplots()
    (line,) = ax.plot([0, 1], label="a")
    el = discover_elements(ax)[0]
    el.visible = False
    assert not line.get_visible()
    assert not is_candidate(el)


def test_visibility_covers_all_owned_artists():
    fig, ax = plt.subplots()
    ax.errorbar([0, 1], [1, 2], yerr=0.1, capsize=3, label="e")
    el = discover_elements(ax)[0]
    el.visible = False
    assert not any(a.get_visible() for a in el.artists)
    assert not el.visible


def test_exclusion_by_tag_type_and_kind():
    fig, ax = plt.subplots()
    (a,) = ax.plot([0, 1], label="a")
    a.set_gid("ref")
    ax.plot([0, 1], label="b")
    ax.scatter([0], [0], label="c")
    ref, line, pts = discover_elements(ax)

    cfg = ConfigRecord(exclude_object_tags=("ref",))
    assert element_excluded(ref, cfg) and not element_excluded(line, cfg)

    cfg = ConfigRecord(exclude_object_types=("Line2D",))
    assert element_excluded(ref, cfg) and element_excluded(line, cfg)
    assert not element_excluded(pts, cfg)

    cfg = ConfigRecord(exclude_object_types=("scatter",))
    assert element_excluded(pts, cfg)
