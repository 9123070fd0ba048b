"""Named style presets.

A preset is a function returning a plain dict of :class:`ConfigRecord` field
overrides.  Presets are applied on top of the defaults and below the user's
own overrides, so anything the user passes explicitly always wins.
"""
from __future__ import annotations

from typing import Any, Callable, Dict


def default_preset() -> Dict[str, Any]:
    return {}


def publication() -> Dict[str, Any]:
    """Black-on-white, thin strokes, major grid only."""
    return {
        "font_name": "Arial",
        "base_font_size": 10,
        "plot_line_width": 1.0,
        "axis_to_plot_linewidth_ratio": 0.75,
        "marker_size": 5,
        "color_palette": "lines",
        "grid_density": "major_only",
        "axis_color": (0.0, 0.0, 0.0),
        "text_color": (0.0, 0.0, 0.0),
        "grid_color": (0.5, 0.5, 0.5),
        "figure_background_color": (1.0, 1.0, 1.0),
        "axes_layer": "bottom",
    }


def presentation_dark() -> Dict[str, Any]:
    return {
        "theme": "dark",
        "font_name": "Calibri",
        "base_font_size": 12,
        "global_font_scale_factor": 1.1,
        "plot_line_width": 2.0,
        "marker_size": 7,
        "color_palette": "viridis",
        "figure_background_color": (0.10, 0.10, 0.12),
        "axis_color": (0.9, 0.9, 0.9),
        "text_color": (0.95, 0.95, 0.95),
        "grid_color": (0.6, 0.6, 0.6),
        "grid_alpha": 0.25,
        "minor_grid_alpha": 0.15,
    }


def presentation_light() -> Dict[str, Any]:
    return {
        "theme": "light",
        "font_name": "Calibri",
        "base_font_size": 12,
        "global_font_scale_factor": 1.1,
        "plot_line_width": 1.8,
        "marker_size": 6,
        "color_palette": "set1",
        "figure_background_color": (0.96, 0.96, 0.98),
        "axis_color": (0.15, 0.15, 0.15),
        "text_color": (0.1, 0.1, 0.1),
        "grid_color": (0.25, 0.25, 0.25),
    }


def minimalist() -> Dict[str, Any]:
    """Grayscale, no grid, open left-bottom box and legend outside."""
    return {
        "font_name": "Helvetica",
        "base_font_size": 10,
        "plot_line_width": 1.2,
        "marker_size": 5,
        "color_palette": [(0.2, 0.2, 0.2), (0.5, 0.5, 0.5), (0.7, 0.7, 0.7)],
        "grid_density": "none",
        "axis_box_style": "left-bottom",
        "legend_location": "outside upper right",
        "axis_color": (0.1, 0.1, 0.1),
        "text_color": (0.1, 0.1, 0.1),
        "title_scale": 1.0,
    }


PRESETS: Dict[str, Callable[[], Dict[str, Any]]] = {
    "default": default_preset,
    "publication": publication,
    "presentation_dark": presentation_dark,
    "presentation_light": presentation_light,
    "minimalist": minimalist,
}


def preset_overrides(name: str) -> Dict[str, Any]:
    """Field overrides of the preset ``name``; raises ``KeyError`` if unknown."""
    return PRESETS[name.lower()]()


def preset_names() -> list[str]:
    return list(PRESETS)


__all__ = ["PRESETS", "preset_overrides", "preset_names"]
