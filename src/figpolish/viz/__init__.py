"""Figure-tree traversal, per-panel styling, legends, overlays and export."""

from .scaling import ScalingTable, scale_factor
from .walker import DensityGroup, PanelEntry, enumerate_panels, entries_for_axes
from .elements import ElementKind, PlotElement, discover_elements
from .stylist import PanelStyleResult, style_panel
from .legend import (
    InteractiveLegend,
    LegendInteractionState,
    LegendState,
    apply_legend,
    interactive_legend_for,
)
from .overlays import add_panel_label, add_stats_overlay
from .export import export_figure
from .backend import current_figure

__all__ = [
    "ScalingTable",
    "scale_factor",
    "DensityGroup",
    "PanelEntry",
    "enumerate_panels",
    "entries_for_axes",
    "ElementKind",
    "PlotElement",
    "discover_elements",
    "PanelStyleResult",
    "style_panel",
    "InteractiveLegend",
    "LegendInteractionState",
    "LegendState",
    "apply_legend",
    "interactive_legend_for",
    "add_panel_label",
    "add_stats_overlay",
    "export_figure",
    "current_figure",
]
