"""Configuration schema, presets, palettes and the layered resolver."""

from .schema import ConfigRecord, ExportSettings, PanelLabeling, StatsOverlay
from .layering import ConfigIssue, ConfigValidationError, resolve
from .loader import load_overrides
from .presets import PRESETS, preset_names
from .palettes import PALETTE_NAMES, resolve_palette

__all__ = [
    "ConfigRecord",
    "ExportSettings",
    "PanelLabeling",
    "StatsOverlay",
    "ConfigIssue",
    "ConfigValidationError",
    "resolve",
    "load_overrides",
    "PRESETS",
    "preset_names",
    "PALETTE_NAMES",
    "resolve_palette",
]
