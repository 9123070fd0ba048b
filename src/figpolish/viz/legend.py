"""Legend display rules and the interactive legend.

A panel's legend is either hidden, shown statically, or shown with click
interaction.  Whenever a legend is shown it is rebuilt from scratch out of the
current ordered candidates, so entry order always follows the palette
assignment order of the last styling pass.

Interaction (``pick_event`` on legend handles or labels):

* click with ctrl/cmd on the isolated entry: restore the snapshot;
* click with ctrl/cmd on another entry: snapshot (once), then show only it;
* plain click: leave isolation if active, then toggle the entry and record
  the new visibility in the snapshot.
"""
from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from figpolish.utils.logging import logger
from .elements import PlotElement
from .stylist import PanelSizes, font_family, shade

MODIFIER_KEYS = frozenset({"control", "ctrl", "cmd", "command", "super"})

FADED_ALPHA = 0.3

# location -> (loc, bbox_to_anchor) for legends placed beside the axes
_OUTSIDE = {
    "outside upper right": ("upper left", (1.02, 1.0)),
    "outside right": ("center left", (1.02, 0.5)),
    "outside lower right": ("lower left", (1.02, 0.0)),
    "outside upper left": ("upper right", (-0.15, 1.0)),
    "outside left": ("center right", (-0.15, 0.5)),
    "outside lower left": ("lower right", (-0.15, 0.0)),
    "outside upper center": ("lower center", (0.5, 1.02)),
    "outside lower center": ("upper center", (0.5, -0.15)),
}


class LegendState(str, Enum):
    HIDDEN = "hidden"
    STATIC = "static"
    INTERACTIVE = "interactive"


def should_show(count: int, cfg) -> bool:
    if cfg.legend_location == "none" or count == 0:
        return False
    if cfg.smart_legend_display:
        return count > 1 or cfg.legend_force_single_entry
    return count != 1 or cfg.legend_force_single_entry


def placement(location: str) -> Tuple[str, Optional[Tuple[float, float]]]:
    if location in _OUTSIDE:
        return _OUTSIDE[location]
    return location, None


@dataclass
class LegendInteractionState:
    entries: List[PlotElement]
    snapshot: Optional[List[bool]] = None
    isolated: Optional[int] = None
    history: List[str] = field(default_factory=list)

    def matches(self, elements: Sequence[PlotElement]) -> bool:
        return len(elements) == len(self.entries) and all(
            a.artist is b.artist for a, b in zip(elements, self.entries)
        )


class InteractiveLegend:
    """Click handling for one legend; owns its :class:`LegendInteractionState`."""

    def __init__(self, legend, state: LegendInteractionState, text_color) -> None:
        self.legend = legend
        self.state = state
        self.text_color = tuple(text_color)
        self._cid: Optional[int] = None
        self._canvas = None

    # -- state machine -------------------------------------------------------

    def _restore(self) -> None:
        st = self.state
        if st.snapshot is not None:
            for element, visible in zip(st.entries, st.snapshot):
                element.visible = visible
        st.isolated = None

    def click(self, index: int, modifier: bool = False) -> None:
        st = self.state
        if not 0 <= index < len(st.entries):
            return
        clicked = st.entries[index]
        if modifier:
            if st.isolated == index:
                self._restore()
                st.history.append(f"restore {clicked.label}")
            else:
                if st.snapshot is None:
                    st.snapshot = [el.visible for el in st.entries]
                for i, el in enumerate(st.entries):
                    el.visible = i == index
                st.isolated = index
                st.history.append(f"isolate {clicked.label}")
        else:
            if st.isolated is not None:
                self._restore()
            clicked.visible = not clicked.visible
            if st.snapshot is not None:
                st.snapshot[index] = clicked.visible
            st.history.append(f"toggle {clicked.label}")
        logger.debug("[legend] %s", st.history[-1])
        self.refresh()

    def refresh(self) -> None:
        faded = tuple(0.4 * c + 0.5 for c in self.text_color)
        texts = self.legend.get_texts()
        handles = self.legend.legend_handles
        for i, element in enumerate(self.state.entries):
            visible = element.visible
            if i < len(texts):
                texts[i].set_color(self.text_color if visible else faded)
            if i < len(handles) and handles[i] is not None:
                handles[i].set_alpha(1.0 if visible else FADED_ALPHA)

    # -- event wiring --------------------------------------------------------

    def _index_of(self, artist) -> Optional[int]:
        for group in (self.legend.legend_handles, self.legend.get_texts()):
            for i, candidate in enumerate(group):
                if candidate is artist:
                    return i
        return None

    def _on_pick(self, event) -> None:
        index = self._index_of(event.artist)
        if index is None:
            return
        key = (getattr(event.mouseevent, "key", None) or "").lower()
        modifier = any(part in MODIFIER_KEYS for part in key.split("+"))
        self.click(index, modifier)
        if self._canvas is not None:
            self._canvas.draw_idle()

    def connect(self) -> None:
        for artist in (*self.legend.legend_handles, *self.legend.get_texts()):
            if artist is not None:
                artist.set_picker(5)
        self._canvas = self.legend.axes.figure.canvas
        self._cid = self._canvas.mpl_connect("pick_event", self._on_pick)

    def disconnect(self) -> None:
        if self._canvas is not None and self._cid is not None:
            self._canvas.mpl_disconnect(self._cid)
        self._cid = None


# axes -> interactive legend of that axes
_REGISTRY: "weakref.WeakKeyDictionary" = weakref.WeakKeyDictionary()


def interactive_legend_for(ax) -> Optional[InteractiveLegend]:
    return _REGISTRY.get(ax)


def _drop_interaction(ax) -> Optional[InteractiveLegend]:
    previous = _REGISTRY.pop(ax, None)
    if previous is not None:
        previous.disconnect()
    return previous


def _build(ax, entries: Sequence[PlotElement], cfg, sz: PanelSizes):
    family = font_family(cfg)
    size = max(1, round(sz.font * 0.93))
    loc, anchor = placement(cfg.legend_location)
    kwargs = dict(
        loc=loc,
        prop={"family": family, "size": size},
        frameon=cfg.axis_box_style == "on",
        ncols=cfg.legend_num_columns or 1,
        labelcolor=[cfg.text_color] * len(entries),
    )
    if anchor is not None:
        kwargs["bbox_to_anchor"] = anchor
        kwargs["borderaxespad"] = 0.0
    if cfg.legend_title_string:
        kwargs["title"] = cfg.legend_title_string
        kwargs["title_fontproperties"] = {
            "family": family,
            "size": max(1, round(size * 1.05)),
            "weight": "bold",
        }
    legend = ax.legend([el.artist for el in entries], [el.label for el in entries], **kwargs)
    frame = legend.get_frame()
    frame.set_linewidth(sz.axis_line_width * 0.85)
    frame.set_edgecolor(shade(cfg.axis_color, 0.85))
    if cfg.legend_title_string:
        legend.get_title().set_color(cfg.text_color)
    return legend


def apply_legend(ax, entries: Sequence[PlotElement], cfg, sz: PanelSizes) -> LegendState:
    """Hide, or rebuild and style, the legend of ``ax`` for ``entries``."""
    previous = _drop_interaction(ax)
    old = ax.get_legend()
    if old is not None:
        old.remove()

    if not should_show(len(entries), cfg):
        logger.debug("[legend] hidden (%d entries)", len(entries))
        return LegendState.HIDDEN

    legend = _build(ax, entries, cfg, sz)
    if not cfg.interactive_legend:
        return LegendState.STATIC

    if previous is not None and previous.state.matches(entries):
        state = previous.state
    else:
        state = LegendInteractionState(list(entries))
    interactive = InteractiveLegend(legend, state, cfg.text_color)
    interactive.connect()
    interactive.refresh()
    _REGISTRY[ax] = interactive
    return LegendState.INTERACTIVE


__all__ = [
    "LegendState",
    "LegendInteractionState",
    "InteractiveLegend",
    "apply_legend",
    "should_show",
    "placement",
    "interactive_legend_for",
    "MODIFIER_KEYS",
]
