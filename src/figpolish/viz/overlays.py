"""Panel labels and the statistics text box.

Both overlays are plain axes texts tagged with a gid so a later pass can find
and replace them instead of stacking duplicates.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import numpy as np

from figpolish.utils.logging import logger
from .elements import ElementKind, PlotElement, discover_elements
from .stylist import PANEL_LABEL_GID, STATS_GID, PanelSizes, font_family

_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"), (100, "C"), (90, "XC"),
    (50, "L"), (40, "XL"), (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)

_STAT_NAMES = {
    "mean": "Mean",
    "std": "Std Dev",
    "min": "Min",
    "max": "Max",
    "n": "N",
    "median": "Median",
    "sum": "Sum",
}


def roman(n: int) -> str:
    out = []
    for value, numeral in _ROMAN:
        count, n = divmod(n, value)
        out.append(numeral * count)
    return "".join(out)


def _letters(n: int) -> str:
    # 1 -> A, 26 -> Z, 27 -> AA
    out = ""
    while n > 0:
        n, rem = divmod(n - 1, 26)
        out = chr(ord("A") + rem) + out
    return out


def panel_label_text(index: int, style: str) -> str:
    """Label for the panel at zero-based ``index``."""
    n = index + 1
    if style == "A":
        return _letters(n)
    if style == "a":
        return _letters(n).lower()
    if style == "a)":
        return _letters(n).lower() + ")"
    if style == "I":
        return roman(n)
    if style == "i":
        return roman(n).lower()
    return str(n)


def corner(position: str, dx: float, dy: float) -> Tuple[float, float, str, str]:
    """Axes-fraction anchor and alignment for an inset corner."""
    north = position.startswith("north")
    west = "west" in position
    x = dx if west else 1.0 - dx
    y = 1.0 - dy if north else dy
    return x, y, "left" if west else "right", "top" if north else "bottom"


def remove_overlay(ax, gid: str) -> int:
    stale = [t for t in ax.texts if t.get_gid() == gid]
    for text in stale:
        text.remove()
    return len(stale)


def _axes_text(ax, x: float, y: float, s: str, **kwargs):
    # 3D axes take (x, y, z, s) in text(); text2D is the axes-fraction form
    draw = ax.text2D if getattr(ax, "name", "") == "3d" else ax.text
    return draw(x, y, s, transform=ax.transAxes, **kwargs)


def add_panel_label(ax, index: int, cfg, sz: PanelSizes):
    pl = cfg.panel_labeling
    remove_overlay(ax, PANEL_LABEL_GID)
    x, y, ha, va = corner(pl.position, pl.x_offset, pl.y_offset)
    return _axes_text(
        ax, x, y, panel_label_text(index, pl.style),
        ha=ha,
        va=va,
        fontsize=max(1, round(sz.title * pl.font_scale_factor)),
        fontweight=pl.font_weight,
        fontfamily=font_family(cfg, pl.font_name),
        color=pl.text_color or cfg.text_color,
        gid=PANEL_LABEL_GID,
        zorder=10,
    )


def _ydata(element: PlotElement) -> np.ndarray:
    if element.kind is ElementKind.LINE:
        return np.asarray(element.artist.get_ydata(), dtype=float)
    offsets = np.asarray(element.artist.get_offsets(), dtype=float)
    return offsets[:, 1] if offsets.ndim == 2 and offsets.size else np.empty(0)


def stats_source(ax, target_gid: str = "") -> Optional[PlotElement]:
    """The element whose y data feeds the statistics box."""
    candidates = [
        el for el in discover_elements(ax)
        if el.kind in (ElementKind.LINE, ElementKind.SCATTER)
    ]
    if target_gid:
        for el in candidates:
            if target_gid in el.tags:
                return el
        logger.warning("[stats] no element with gid %r", target_gid)
        return None
    for el in candidates:
        if el.visible:
            return el
    return None


def compute_statistics(y, names) -> Dict[str, float]:
    y = np.asarray(y, dtype=float).ravel()
    y = y[np.isfinite(y)]
    funcs = {
        "mean": np.mean,
        "std": lambda v: np.std(v, ddof=1) if v.size > 1 else 0.0,
        "min": np.min,
        "max": np.max,
        "n": lambda v: v.size,
        "median": np.median,
        "sum": np.sum,
    }
    if y.size == 0:
        return {"n": 0} if "n" in names else {}
    return {name: float(funcs[name](y)) for name in names}


def format_statistics(values: Dict[str, float], names, precision: int) -> str:
    lines: List[str] = []
    for name in names:
        if name not in values:
            continue
        if name == "n":
            lines.append(f"N: {int(values[name])}")
        else:
            lines.append(f"{_STAT_NAMES[name]}: {values[name]:.{precision}f}")
    return "\n".join(lines)


def add_stats_overlay(ax, cfg, sz: PanelSizes):
    so = cfg.stats_overlay
    remove_overlay(ax, STATS_GID)
    source = stats_source(ax, so.target_gid)
    if source is None:
        logger.debug("[stats] no line or scatter data on %r", ax)
        return None
    values = compute_statistics(_ydata(source), so.statistics)
    if not values:
        logger.debug("[stats] no finite data for %r", source.label)
        return None

    face = cfg.figure_background_color if so.background_color == "figure" else so.background_color
    edge = cfg.axis_color if so.edge_color == "axes" else so.edge_color
    x, y, ha, va = corner(so.position, 0.03, 0.03)
    return _axes_text(
        ax, x, y, format_statistics(values, so.statistics, so.precision),
        ha=ha,
        va=va,
        fontsize=max(6, round(sz.label * so.font_scale_factor)),
        fontfamily=font_family(cfg, so.font_name),
        color=so.text_color or cfg.text_color,
        gid=STATS_GID,
        zorder=10,
        bbox={
            "boxstyle": "round,pad=0.3",
            "facecolor": face if face is not None else "none",
            "edgecolor": edge if edge is not None else "none",
            "linewidth": sz.axis_line_width * 0.8,
            "alpha": 0.85,
        },
    )


__all__ = [
    "PANEL_LABEL_GID",
    "STATS_GID",
    "panel_label_text",
    "roman",
    "corner",
    "remove_overlay",
    "add_panel_label",
    "stats_source",
    "compute_statistics",
    "format_statistics",
    "add_stats_overlay",
]
