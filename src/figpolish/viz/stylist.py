"""Per-panel styling.

:func:`style_panel` applies a resolved :class:`~figpolish.config.ConfigRecord`
to one axes, scaled by the density factor of the group the axes belongs to.
Plot elements are visited in creation order (or reversed); each styling
candidate takes the next palette color and, when cycling is active, the next
marker and line style with the same running index.  Styling is dispatched
per :class:`~figpolish.viz.elements.ElementKind` through ``_HANDLERS``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import matplotlib
import numpy as np
from matplotlib import colors as mcolors
from matplotlib.markers import MarkerStyle

from figpolish.utils.logging import logger
from .elements import (
    ElementKind,
    PlotElement,
    discover_elements,
    element_excluded,
    is_candidate,
)

RGB = Tuple[float, float, float]

# gids of texts owned by the overlay module; general-text styling skips them
PANEL_LABEL_GID = "figpolish_panel_label"
STATS_GID = "figpolish_stats_overlay"
OVERLAY_GIDS = frozenset({PANEL_LABEL_GID, STATS_GID})

# 3D camera presets as (elev, azim)
VIEW_PRESETS = {
    "iso": (30.0, -60.0),
    "top": (90.0, -90.0),
    "front": (0.0, -90.0),
    "side_left": (0.0, 180.0),
    "side_right": (0.0, 0.0),
}


@dataclass(frozen=True)
class PanelSizes:
    font: int
    title: int
    label: int
    line_width: float
    axis_line_width: float
    marker_size: float
    scale: float


@dataclass(frozen=True)
class Assignment:
    color: Optional[RGB] = None
    marker: Optional[str] = None
    linestyle: Optional[str] = None


@dataclass
class PanelStyleResult:
    sizes: PanelSizes
    candidates: List[PlotElement]

    @property
    def legend_entries(self) -> List[PlotElement]:
        return [el for el in self.candidates if el.named]


def compute_sizes(cfg, scale: float) -> PanelSizes:
    base = cfg.effective_base_font_size
    return PanelSizes(
        font=max(1, round(base * scale)),
        title=max(1, round(base * cfg.title_scale * scale)),
        label=max(1, round(base * cfg.label_scale * scale)),
        line_width=max(0.75, cfg.plot_line_width * scale),
        axis_line_width=max(0.5, cfg.axis_line_width * scale),
        marker_size=max(3.0, cfg.marker_size * scale),
        scale=float(scale),
    )


def font_family(cfg, name: Optional[str] = None) -> List[str]:
    return [name or cfg.font_name, "sans-serif"]


def shade(color: Sequence[float], k: float) -> RGB:
    return tuple(float(np.clip(c * k, 0.0, 1.0)) for c in color[:3])  # type: ignore[return-value]


def cycling_active(mode, count: int, threshold: int) -> bool:
    if mode is True:
        return True
    return mode == "auto" and count > threshold


def style_text(text, size: int, color, family, weight: Optional[str] = None) -> None:
    if not text.get_text():
        return
    text.set_fontsize(size)
    text.set_color(color)
    text.set_fontfamily(family)
    if weight is not None:
        text.set_fontweight(weight)


# ---------------------------------------------------------------------------
# Element handlers
# ---------------------------------------------------------------------------


def _has_marker(line) -> bool:
    return line.get_marker() not in (None, "", " ", "None", "none")


def _is_none(color) -> bool:
    return isinstance(color, str) and color.lower() == "none"


def _style_line(el: PlotElement, a: Assignment, cfg, sz: PanelSizes) -> None:
    line = el.artist
    line.set_linewidth(sz.line_width)
    line.set_markersize(sz.marker_size)
    if a.color is not None:
        line.set_color(a.color)
    if a.linestyle is not None:
        line.set_linestyle(a.linestyle)
    if a.marker is not None:
        line.set_marker(a.marker)
        if a.color is not None and a.marker != ".":
            line.set_markerfacecolor(a.color)
            line.set_markeredgecolor(shade(a.color, 0.7))
        elif a.color is not None:
            line.set_markeredgecolor(a.color)
            line.set_markerfacecolor("none")
    elif a.color is not None and _has_marker(line):
        if not _is_none(line.get_markerfacecolor()):
            line.set_markerfacecolor(a.color)
        if not _is_none(line.get_markeredgecolor()):
            line.set_markeredgecolor(shade(a.color, 0.7))


def _style_scatter(el: PlotElement, a: Assignment, cfg, sz: PanelSizes) -> None:
    coll = el.artist
    coll.set_sizes([sz.marker_size ** 2])
    coll.set_linewidths([sz.line_width * 0.5])
    if a.color is not None:
        mapped = coll.get_array() is not None
        if not mapped and len(coll.get_facecolor()):
            coll.set_facecolor(a.color)
        if len(coll.get_edgecolor()):
            coll.set_edgecolor(shade(a.color, 0.75))
    if a.marker is not None:
        marker = MarkerStyle(a.marker)
        coll.set_paths([marker.get_path().transformed(marker.get_transform())])


def _style_bar(el: PlotElement, a: Assignment, cfg, sz: PanelSizes) -> None:
    if a.color is not None:
        edge = shade(a.color, 0.7)
        if not any(edge):
            edge = shade(cfg.axis_color, 0.5)
    else:
        edge = shade(cfg.axis_color, 0.7)
    for patch in el.artist.patches:
        patch.set_linewidth(sz.axis_line_width * 0.9)
        if a.color is not None:
            patch.set_facecolor(a.color)
        patch.set_edgecolor(edge)


def _style_histogram(el: PlotElement, a: Assignment, cfg, sz: PanelSizes) -> None:
    for patch in el.artist.patches:
        patch.set_linewidth(sz.axis_line_width * 0.8)
        if a.color is not None:
            patch.set_facecolor((*a.color, 0.7))
            patch.set_edgecolor(shade(a.color, 0.5))
        else:
            face = mcolors.to_rgb(patch.get_facecolor())
            patch.set_facecolor((*face, 0.7))
            patch.set_edgecolor(shade(cfg.axis_color, 0.5))


def errorbar_cap_size(cfg, sz: PanelSizes) -> float:
    """Error-bar ``capsize`` in points.

    The ``marker`` basis scales the *unscaled* marker size by the cap ratio
    and by the density factor; ``line_width`` derives it from the scaled plot
    line width instead.
    """
    if cfg.errorbar_cap_basis == "line_width":
        return sz.line_width * cfg.errorbar_cap_size_scale * 6
    return cfg.marker_size * cfg.errorbar_cap_size_scale * sz.scale


def _style_errorbar(el: PlotElement, a: Assignment, cfg, sz: PanelSizes) -> None:
    data_line, caplines, barlinecols = el.artist.lines
    width = sz.line_width * 0.8
    cap = errorbar_cap_size(cfg, sz)
    if data_line is not None:
        data_line.set_linewidth(width)
        data_line.set_markersize(sz.marker_size * 0.8)
        if a.color is not None:
            data_line.set_color(a.color)
        if a.marker is not None:
            data_line.set_marker(a.marker)
    for capline in caplines:
        capline.set_markersize(2.0 * cap)
        capline.set_markeredgewidth(width)
        if a.color is not None:
            capline.set_color(a.color)
            capline.set_markeredgecolor(a.color)
    for coll in barlinecols:
        coll.set_linewidth(width)
        if a.color is not None:
            coll.set_color(a.color)


def _style_surface(el: PlotElement, a: Assignment, cfg, sz: PanelSizes) -> None:
    el.artist.set_edgecolor(shade(cfg.axis_color, 0.6))
    el.artist.set_linewidth(sz.axis_line_width * 0.7)


_HANDLERS: Dict[ElementKind, Callable[[PlotElement, Assignment, object, PanelSizes], None]] = {
    ElementKind.LINE: _style_line,
    ElementKind.SCATTER: _style_scatter,
    ElementKind.BAR: _style_bar,
    ElementKind.HISTOGRAM: _style_histogram,
    ElementKind.ERRORBAR: _style_errorbar,
    ElementKind.SURFACE: _style_surface,
}


# ---------------------------------------------------------------------------
# Axes-level styling
# ---------------------------------------------------------------------------


def _axis_names(ax) -> Tuple[str, ...]:
    return ("x", "y", "z") if getattr(ax, "name", "") == "3d" else ("x", "y")


def _is_secondary(ax) -> bool:
    return ax.yaxis.get_label_position() == "right" or ax.xaxis.get_label_position() == "top"


def _style_frame(ax, cfg, sz: PanelSizes) -> None:
    family = font_family(cfg)
    for axis in _axis_names(ax):
        ax.tick_params(
            axis=axis,
            which="both",
            direction=cfg.tick_direction,
            width=sz.axis_line_width,
            color=cfg.axis_color,
            labelsize=sz.font,
            labelcolor=cfg.axis_color,
            labelfontfamily=family,
        )
    for spine in ax.spines.values():
        spine.set_linewidth(sz.axis_line_width)
        spine.set_edgecolor(cfg.axis_color)

    if getattr(ax, "name", "") == "3d":
        for axis in (ax.xaxis, ax.yaxis, ax.zaxis):
            axis.line.set_color(cfg.axis_color)
            axis.line.set_linewidth(sz.axis_line_width)
    elif getattr(ax, "name", "") != "polar":
        _apply_box(ax, cfg.axis_box_style)

    ax.set_axisbelow(cfg.axes_layer == "bottom")


def _apply_box(ax, style: str) -> None:
    sides = ("top", "right", "bottom", "left")
    if style == "on":
        for side in sides:
            ax.spines[side].set_visible(True)
        return
    if _is_secondary(ax):
        # a twin draws only its own axis; the parent owns the other spines
        own = "right" if ax.yaxis.get_label_position() == "right" else "top"
        for side in sides:
            ax.spines[side].set_visible(side == own and style == "off")
        if style == "left-bottom":
            (ax.yaxis if own == "right" else ax.xaxis).set_visible(False)
        return
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    if style == "left-bottom":
        ax.xaxis.set_ticks_position("bottom")
        ax.yaxis.set_ticks_position("left")


def _style_grid(ax, cfg, sz: PanelSizes) -> None:
    name = getattr(ax, "name", "")
    if name == "3d":
        ax.grid(cfg.grid_density != "none")
        return
    if cfg.grid_density == "none":
        ax.grid(False, which="both")
        return
    ax.grid(
        True,
        which="major",
        color=cfg.grid_color,
        alpha=cfg.grid_alpha,
        linestyle=cfg.grid_line_style,
        linewidth=sz.axis_line_width,
    )
    if cfg.grid_density == "normal" and name != "polar":
        ax.minorticks_on()
        ax.grid(
            True,
            which="minor",
            color=cfg.grid_color,
            alpha=cfg.minor_grid_alpha,
            linestyle=cfg.minor_grid_line_style,
            linewidth=sz.axis_line_width * 0.75,
        )
    else:
        ax.grid(False, which="minor")


def _style_limits(ax, cfg) -> None:
    if getattr(ax, "name", "") == "polar" or cfg.axis_limit_mode == "auto":
        return
    factor = cfg.expand_axis_limits_factor if cfg.axis_limit_mode == "padded" else 0.0
    ax.margins(factor)


def _style_labels(ax, cfg, sz: PanelSizes) -> None:
    family = font_family(cfg)
    style_text(ax.title, sz.title, cfg.text_color, family, "bold")
    labels = [ax.xaxis.label, ax.yaxis.label]
    if hasattr(ax, "zaxis"):
        labels.append(ax.zaxis.label)
    for text in labels:
        style_text(text, sz.label, cfg.text_color, family, "normal")


def _style_general_text(ax, cfg, sz: PanelSizes) -> None:
    family = font_family(cfg)
    default = matplotlib.rcParams["text.color"]
    for text in ax.texts:
        if text.get_gid() in OVERLAY_GIDS:
            continue
        color = text.get_color()
        if mcolors.same_color(color, default) or np.allclose(mcolors.to_rgb(color), (0.15, 0.15, 0.15)):
            color = cfg.text_color
        style_text(text, sz.font, color, family)


def style_colorbars(ax, cfg, sz: PanelSizes) -> int:
    """Restyle colorbars attached to mappables drawn in ``ax``."""
    seen = set()
    family = font_family(cfg)
    for mappable in (*ax.collections, *ax.images):
        cb = getattr(mappable, "colorbar", None)
        if cb is None or id(cb) in seen:
            continue
        seen.add(id(cb))
        cb.ax.tick_params(
            which="both",
            direction="out",
            labelsize=max(1, round(sz.font * 0.9)),
            width=sz.axis_line_width * 0.85,
            color=cfg.axis_color,
            labelcolor=cfg.axis_color,
            labelfontfamily=family,
        )
        cb.outline.set_linewidth(sz.axis_line_width * 0.85)
        cb.outline.set_edgecolor(cfg.axis_color)
        long_axis = cb.ax.yaxis if cb.orientation == "vertical" else cb.ax.xaxis
        style_text(long_axis.label, sz.label, cfg.text_color, family)
    return len(seen)


def _apply_view(ax, preset: str) -> None:
    if preset == "none" or getattr(ax, "name", "") != "3d":
        return
    elev, azim = VIEW_PRESETS[preset]
    ax.view_init(elev=elev, azim=azim)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def assign_styles(candidates: Sequence[PlotElement], cfg) -> Dict[int, Assignment]:
    """Palette/marker/line-style assignment keyed by ``id(element)``."""
    palette = cfg.active_palette
    count = len(candidates)
    markers = cycling_active(cfg.cycle_marker_styles, count, cfg.marker_cycle_threshold)
    styles = cycling_active(cfg.cycle_line_styles, count, cfg.line_style_cycle_threshold)
    out = {}
    for i, el in enumerate(candidates):
        out[id(el)] = Assignment(
            color=palette[i % len(palette)],
            marker=cfg.marker_styles[i % len(cfg.marker_styles)] if markers else None,
            linestyle=cfg.line_style_order[i % len(cfg.line_style_order)] if styles else None,
        )
    return out


def style_panel(ax, cfg, scale: float) -> PanelStyleResult:
    """Style one axes and its plot elements; returns the ordered candidates."""
    sz = compute_sizes(cfg, scale)
    for step in (_style_frame, _style_grid, _style_labels):
        try:
            step(ax, cfg, sz)
        except Exception as exc:  # noqa: BLE001
            logger.warning("[style] %s failed on %r: %s", step.__name__, ax, exc)
    try:
        _style_limits(ax, cfg)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[style] limits failed on %r: %s", ax, exc)

    elements = [el for el in discover_elements(ax) if not element_excluded(el, cfg)]
    if cfg.legend_reverse_order:
        elements.reverse()
    candidates = [el for el in elements if is_candidate(el)]
    assignments = assign_styles(candidates, cfg)

    for el in elements:
        try:
            _HANDLERS[el.kind](el, assignments.get(id(el), Assignment()), cfg, sz)
        except Exception as exc:  # noqa: BLE001
            logger.warning("[style] %s %r failed: %s", el.kind.value, el.label, exc)

    if cfg.apply_to_general_text:
        _style_general_text(ax, cfg, sz)
    if cfg.apply_to_colorbars:
        try:
            style_colorbars(ax, cfg, sz)
        except Exception as exc:  # noqa: BLE001
            logger.warning("[style] colorbar failed on %r: %s", ax, exc)
    _apply_view(ax, cfg.view_preset_3d)

    logger.debug(
        "[style] %s scale=%.2f elements=%d candidates=%d",
        type(ax).__name__, scale, len(elements), len(candidates),
    )
    return PanelStyleResult(sz, candidates)


__all__ = [
    "PanelSizes",
    "PanelStyleResult",
    "Assignment",
    "compute_sizes",
    "assign_styles",
    "errorbar_cap_size",
    "style_panel",
    "style_colorbars",
    "style_text",
    "font_family",
    "shade",
    "VIEW_PRESETS",
]
