"""Panel discovery inside a figure tree.

A figure is walked depth first.  At every container level (the figure itself
or a subfigure) panels are split into density groups:

* each gridspec with axes directly owned by the container forms one group,
  sized by the larger of the cells actually used and the declared grid size;
* axes without any gridspec ancestry (``fig.add_axes``) form a second group
  sized by their count.

Subfigures are walked as independent containers, so groups never cross
subfigure boundaries.  Every axes is reported exactly once.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from matplotlib.axes import Axes

from figpolish.utils.logging import logger

# axes labels/gids that mark helper axes rather than data panels
IGNORED_PANEL_TAGS = frozenset({"<colorbar>", "colorbar", "legend", "colormap_preview"})


@dataclass(frozen=True)
class DensityGroup:
    container: Any
    kind: str  # "grid" or "direct"
    density: int


@dataclass(frozen=True)
class PanelEntry:
    panel: Axes
    group: DensityGroup


def panel_tags(ax) -> set:
    return {t for t in (ax.get_label(), ax.get_gid()) if t}


def panel_excluded(ax, cfg) -> bool:
    """Whether ``ax`` is a helper axes or excluded by configuration."""
    tags = panel_tags(ax)
    if tags & IGNORED_PANEL_TAGS or tags & set(cfg.exclude_object_tags):
        return True
    if type(ax).__name__ in cfg.exclude_object_types:
        return True
    if getattr(ax, "name", "") == "polar" and not cfg.apply_to_polaraxes:
        return True
    return False


def direct_axes(container) -> List[Axes]:
    """Axes whose immediate parent is ``container`` (a Figure or SubFigure)."""
    return [ax for ax in container.axes if ax.figure is container]


def grid_of(ax):
    ss = ax.get_subplotspec()
    if ss is None:
        return None
    return ss.get_topmost_subplotspec().get_gridspec()


def _cell(ax):
    # cells of nested subgridspecs are distinct per inner gridspec
    ss = ax.get_subplotspec()
    return (
        id(ss.get_gridspec()),
        ss.rowspan.start, ss.rowspan.stop, ss.colspan.start, ss.colspan.stop,
    )


def _grid_density(gs, panels: Sequence[Axes]) -> int:
    nrows, ncols = gs.get_geometry()
    # twinned axes share a cell and count once
    found = len({_cell(ax) for ax in panels})
    return max(found, nrows * ncols)


def _walk_container(container, cfg, processed: set, out: List[PanelEntry]) -> None:
    candidates = [
        ax for ax in direct_axes(container) if ax not in processed and not panel_excluded(ax, cfg)
    ]

    grids: Dict[int, list] = {}
    grid_objs: Dict[int, Any] = {}
    loose: List[Axes] = []
    for ax in candidates:
        gs = grid_of(ax)
        if gs is None:
            loose.append(ax)
        else:
            grids.setdefault(id(gs), []).append(ax)
            grid_objs[id(gs)] = gs

    for key, panels in grids.items():
        group = DensityGroup(container, "grid", _grid_density(grid_objs[key], panels))
        for ax in panels:
            processed.add(ax)
            out.append(PanelEntry(ax, group))

    loose = [ax for ax in loose if ax not in processed]
    if loose:
        group = DensityGroup(container, "direct", len(loose))
        for ax in loose:
            processed.add(ax)
            out.append(PanelEntry(ax, group))


def enumerate_panels(root, cfg) -> List[PanelEntry]:
    """All styleable panels under ``root`` with their density groups."""
    out: List[PanelEntry] = []
    processed: set = set()
    stack = [root]
    while stack:
        container = stack.pop()
        try:
            _walk_container(container, cfg, processed, out)
            children = list(getattr(container, "subfigs", []))
        except Exception as exc:  # noqa: BLE001
            logger.warning("[walk] skipping container %r: %s", container, exc)
            continue
        # reversed so subfigures are visited in creation order
        stack.extend(reversed(children))
    logger.debug("[walk] %d panel(s) found", len(out))
    return out


def density_for_panel(ax, cfg) -> int:
    """Density of the group ``ax`` would belong to in its own container."""
    container = ax.figure
    gs = grid_of(ax)
    siblings = [
        other for other in direct_axes(container)
        if other is ax or not panel_excluded(other, cfg)
    ]
    if gs is not None:
        return _grid_density(gs, [other for other in siblings if grid_of(other) is gs])
    return max(1, sum(1 for other in siblings if grid_of(other) is None))


def entries_for_axes(axes: Iterable[Axes], cfg) -> List[PanelEntry]:
    """Panel entries for an explicit list of axes, in the given order."""
    out: List[PanelEntry] = []
    seen: set = set()
    groups: Dict[tuple, DensityGroup] = {}
    for ax in axes:
        if ax in seen or panel_excluded(ax, cfg):
            continue
        seen.add(ax)
        gs = grid_of(ax)
        key = (id(ax.figure), id(gs) if gs is not None else None)
        group: Optional[DensityGroup] = groups.get(key)
        if group is None:
            kind = "direct" if gs is None else "grid"
            group = DensityGroup(ax.figure, kind, density_for_panel(ax, cfg))
            groups[key] = group
        out.append(PanelEntry(ax, group))
    return out


__all__ = [
    "DensityGroup",
    "PanelEntry",
    "IGNORED_PANEL_TAGS",
    "enumerate_panels",
    "entries_for_axes",
    "density_for_panel",
    "panel_excluded",
    "direct_axes",
]
