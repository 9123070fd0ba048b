"""Plot elements of a panel as a closed set of kinds.

Every styleable thing inside an axes is wrapped in a :class:`PlotElement`
carrying its :class:`ElementKind`, the primary artist (or container) and all
artists it owns.  Discovery returns elements in creation order; artists that
belong to a matplotlib container (bars, error bars) are reported once, as
part of that container.

Display names follow matplotlib's label convention: automatic labels
(``_child3``, ``_container2``, empty) mean "unnamed but plottable", any other label starting
with an underscore hides the element from the legend and from color cycling.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

import numpy as np
from matplotlib.collections import PathCollection, PolyCollection, QuadMesh
from matplotlib.container import BarContainer, ErrorbarContainer
from matplotlib.lines import Line2D
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

_AUTO_LABEL = re.compile(r"^_(child|container)\d+$")


class ElementKind(str, Enum):
    LINE = "line"
    SCATTER = "scatter"
    BAR = "bar"
    HISTOGRAM = "histogram"
    ERRORBAR = "errorbar"
    SURFACE = "surface"


@dataclass(eq=False)
class PlotElement:
    kind: ElementKind
    artist: Any
    artists: Tuple[Any, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        label = self.artist.get_label()
        label = "" if label is None else str(label)
        if isinstance(self.artist, BarContainer) and (not label or _AUTO_LABEL.match(label)):
            # hist() puts its label on the first patch, not on the container
            patches = self.artist.patches
            inner = patches[0].get_label() if patches else ""
            if inner and not inner.startswith("_"):
                return inner
        return label

    @property
    def named(self) -> bool:
        """Carries a display name suitable for a legend entry."""
        label = self.label
        return bool(label) and not label.startswith("_")

    @property
    def hidden_from_legend(self) -> bool:
        label = self.label
        return label.startswith("_") and not _AUTO_LABEL.match(label)

    @property
    def type_name(self) -> str:
        return type(self.artist).__name__

    @property
    def tags(self) -> set:
        out = set()
        for a in (self.artist, *self.artists):
            get_gid = getattr(a, "get_gid", None)
            gid = get_gid() if get_gid is not None else None
            if gid:
                out.add(gid)
        return out

    @property
    def visible(self) -> bool:
        if not self.artists:
            return bool(self.artist.get_visible())
        return any(a.get_visible() for a in self.artists)

    @visible.setter
    def visible(self, value: bool) -> None:
        for a in self.artists or (self.artist,):
            a.set_visible(bool(value))

    def __repr__(self) -> str:
        return f"PlotElement({self.kind.value}, {self.label!r})"


def _flatten(items) -> List[Any]:
    out: List[Any] = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, (tuple, list)):
            out.extend(_flatten(item))
        else:
            out.append(item)
    return out


def _contiguous(container: BarContainer) -> bool:
    patches = list(container.patches)
    if len(patches) < 2:
        return False
    if getattr(container, "orientation", "vertical") == "horizontal":
        start = np.array([p.get_y() for p in patches])
        size = np.array([p.get_height() for p in patches])
    else:
        start = np.array([p.get_x() for p in patches])
        size = np.array([p.get_width() for p in patches])
    order = np.argsort(start)
    start, size = start[order], size[order]
    return bool(np.allclose(start[:-1] + size[:-1], start[1:], rtol=1e-6, atol=1e-9))


def _wrap_container(container) -> Optional[PlotElement]:
    if isinstance(container, BarContainer):
        owned = list(container.patches)
        if isinstance(container.errorbar, ErrorbarContainer):
            owned += _flatten(container.errorbar.lines)
        kind = ElementKind.HISTOGRAM if _contiguous(container) else ElementKind.BAR
        return PlotElement(kind, container, tuple(owned))
    if isinstance(container, ErrorbarContainer):
        return PlotElement(ElementKind.ERRORBAR, container, tuple(_flatten(container.lines)))
    return None


def _wrap_artist(artist) -> Optional[PlotElement]:
    if isinstance(artist, Line2D):
        return PlotElement(ElementKind.LINE, artist, (artist,))
    if isinstance(artist, PathCollection):
        return PlotElement(ElementKind.SCATTER, artist, (artist,))
    if isinstance(artist, (Poly3DCollection, QuadMesh)):
        return PlotElement(ElementKind.SURFACE, artist, (artist,))
    if isinstance(artist, PolyCollection) and type(artist).__name__ == "PolyQuadMesh":
        return PlotElement(ElementKind.SURFACE, artist, (artist,))
    return None


def discover_elements(ax) -> List[PlotElement]:
    """Plot elements of ``ax`` in creation order."""
    owner = {}
    nested = set()
    for container in ax.containers:
        if isinstance(container, BarContainer) and container.errorbar is not None:
            nested.add(id(container.errorbar))
    for container in ax.containers:
        if id(container) in nested:
            continue
        element = _wrap_container(container)
        if element is None:
            continue
        for artist in element.artists:
            owner[artist] = element

    out: List[PlotElement] = []
    emitted = set()
    for child in ax.get_children():
        element = owner.get(child)
        if element is not None:
            if id(element) not in emitted:
                emitted.add(id(element))
                out.append(element)
            continue
        element = _wrap_artist(child)
        if element is not None:
            out.append(element)
    return out


def element_excluded(element: PlotElement, cfg) -> bool:
    if element.tags & set(cfg.exclude_object_tags):
        return True
    types = set(cfg.exclude_object_types)
    return element.type_name in types or element.kind.value in types


def is_candidate(element: PlotElement) -> bool:
    """Visible, plottable and not explicitly hidden from the legend."""
    return element.visible and not element.hidden_from_legend


__all__ = [
    "ElementKind",
    "PlotElement",
    "discover_elements",
    "element_excluded",
    "is_candidate",
]
