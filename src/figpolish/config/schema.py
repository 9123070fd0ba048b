"""Pydantic models for the resolved figure-styling configuration.

:class:`ConfigRecord` is a fixed schema: every field carries its own
type/range/choice validator so the resolver in :mod:`figpolish.config.layering`
can validate a merged mapping, find the failing fields from the
``ValidationError`` locations and reset just those fields to their defaults.
String choices are matched case-insensitively and colors accept any
matplotlib color specification; both are canonicalised during validation.
"""
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Tuple, Union

import numpy as np
from matplotlib import colors as mcolors
from matplotlib.markers import MarkerStyle
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

from .palettes import PALETTE_NAMES, resolve_palette

RGB = Tuple[float, float, float]

LIGHT_AXIS_COLOR: RGB = (0.15, 0.15, 0.15)
LIGHT_TEXT_COLOR: RGB = (0.15, 0.15, 0.15)
LIGHT_GRID_COLOR: RGB = (0.15, 0.15, 0.15)
LIGHT_BACKGROUND: RGB = (1.0, 1.0, 1.0)

DEFAULT_SCALING_MAP: Dict[int, float] = {
    1: 1.6, 2: 1.5, 3: 1.4, 4: 1.3, 6: 1.15, 8: 1.05,
    9: 1.0, 12: 0.9, 16: 0.8, 20: 0.75, 25: 0.7,
}

DEFAULT_MARKERS = ("o", "s", "d", "^", "v", ">", "<", "p", "h", ".", "x", "+", "*")
STATISTICS = ("mean", "std", "min", "max", "n", "median", "sum")
DEFAULT_LINE_STYLES = ("-", "--", ":", "-.")
LINE_STYLES = frozenset(DEFAULT_LINE_STYLES)

LEGEND_LOCATIONS = (
    "best", "upper right", "upper left", "lower left", "lower right", "right",
    "center left", "center right", "lower center", "upper center", "center",
    "outside upper right", "outside upper left", "outside lower right",
    "outside lower left", "outside right", "outside left",
    "outside upper center", "outside lower center", "none",
)

# compass aliases accepted for legend_location
_COMPASS = {
    "north": "upper center", "south": "lower center",
    "east": "center right", "west": "center left",
    "northeast": "upper right", "northwest": "upper left",
    "southeast": "lower right", "southwest": "lower left",
    "eastoutside": "outside right", "westoutside": "outside left",
    "northeastoutside": "outside upper right",
    "northwestoutside": "outside upper left",
    "southeastoutside": "outside lower right",
    "southwestoutside": "outside lower left",
    "northoutside": "outside upper center",
    "southoutside": "outside lower center",
}


# ---------------------------------------------------------------------------
# Canonicalising validators
# ---------------------------------------------------------------------------


def _lower(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


def _number(v: Any) -> Any:
    # pydantic would coerce "1.5" and True; numeric fields take real numbers only
    if isinstance(v, (str, bool, np.bool_)):
        raise ValueError(f"expected a number, got {v!r}")
    if isinstance(v, np.generic):
        return v.item()
    return v


def _rgb(v: Any) -> Any:
    if isinstance(v, np.ndarray):
        v = v.tolist()
    try:
        return tuple(float(c) for c in mcolors.to_rgb(v))
    except (ValueError, TypeError) as exc:
        raise ValueError(f"not a valid color: {v!r}") from exc


def _rgb_or(keyword: str):
    def check(v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str) and v.strip().lower() == keyword:
            return keyword
        return _rgb(v)

    return check


def _opt_rgb(v: Any) -> Any:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return _rgb(v)


def _str_tuple(v: Any) -> Any:
    if isinstance(v, str):
        return (v,)
    if isinstance(v, np.ndarray):
        return tuple(v.tolist())
    return v


def _pairs(v: Any) -> Any:
    if isinstance(v, Mapping):
        return tuple(v.items())
    return v


def _legend_location(v: Any) -> Any:
    v = _lower(v)
    if isinstance(v, str):
        v = " ".join(v.replace("_", " ").split())
        return _COMPASS.get(v.replace(" ", ""), v)
    return v


Number = Annotated[float, BeforeValidator(_number)]
PositiveFloat = Annotated[float, BeforeValidator(_number), Field(gt=0)]
NonNegFloat = Annotated[float, BeforeValidator(_number), Field(ge=0)]
UnitFloat = Annotated[float, BeforeValidator(_number), Field(ge=0, le=1)]
Color = Annotated[RGB, BeforeValidator(_rgb)]
OptColor = Annotated[Optional[RGB], BeforeValidator(_opt_rgb)]
CycleMode = Annotated[Union[Literal["auto"], bool], BeforeValidator(_lower)]
Corner = Annotated[
    Literal["northwest_inset", "northeast_inset", "southwest_inset", "southeast_inset"],
    BeforeValidator(_lower),
]


def _lit(*choices: str):
    return Annotated[Literal[choices], BeforeValidator(_lower)]  # type: ignore[valid-type]


ExportFormat = _lit("png", "jpeg", "jpg", "tiff", "tif", "pdf", "eps", "svg")
FontWeight = _lit("bold", "normal")
StatName = _lit(*STATISTICS)
Theme = _lit("light", "dark")
CapBasis = _lit("marker", "line_width")
GridDensity = _lit("normal", "major_only", "none")
BoxStyle = _lit("on", "off", "left-bottom")
AxesLayer = _lit("top", "bottom")
TickDirection = _lit("in", "out", "inout")
LimitMode = _lit("padded", "tight", "auto")
ViewPreset = _lit("none", "iso", "top", "front", "side_left", "side_right")
LegendLocation = Annotated[
    Literal[LEGEND_LOCATIONS], BeforeValidator(_legend_location)  # type: ignore[valid-type]
]


# ---------------------------------------------------------------------------
# Sub-records
# ---------------------------------------------------------------------------


class ExportSettings(BaseModel):
    enabled: bool = False
    filename: str = "beautified_figure"
    format: ExportFormat = "png"
    resolution: Annotated[int, BeforeValidator(_number), Field(gt=0)] = 300
    open_exported_file: bool = False
    transparent: bool = False
    bbox_tight: bool = True

    model_config = ConfigDict(extra="forbid", frozen=True)


class PanelLabeling(BaseModel):
    enabled: bool = False
    style: Literal["A", "a", "a)", "I", "i", "1"] = "A"
    position: Corner = "northwest_inset"
    font_scale_factor: PositiveFloat = 1.0
    font_weight: FontWeight = "bold"
    x_offset: Number = 0.02
    y_offset: Number = 0.02
    text_color: OptColor = None
    font_name: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class StatsOverlay(BaseModel):
    enabled: bool = False
    statistics: Annotated[
        Tuple[StatName, ...], BeforeValidator(_str_tuple)
    ] = ("mean", "std")
    position: Corner = "northeast_inset"
    precision: Annotated[int, BeforeValidator(_number), Field(ge=0, le=12)] = 2
    target_gid: str = ""
    font_scale_factor: PositiveFloat = 0.9
    text_color: OptColor = None
    font_name: Optional[str] = None
    background_color: Annotated[
        Union[Literal["figure"], RGB, None], BeforeValidator(_rgb_or("figure"))
    ] = "figure"
    edge_color: Annotated[
        Union[Literal["axes"], RGB, None], BeforeValidator(_rgb_or("axes"))
    ] = "axes"

    model_config = ConfigDict(extra="forbid", frozen=True)


SUB_RECORDS = {
    "export_settings": ExportSettings,
    "panel_labeling": PanelLabeling,
    "stats_overlay": StatsOverlay,
}


# ---------------------------------------------------------------------------
# ConfigRecord
# ---------------------------------------------------------------------------


class ConfigRecord(BaseModel):
    """Fully resolved styling parameters for one :func:`beautify` call."""

    style_preset: str = "default"
    theme: Theme = "light"

    # text
    font_name: str = "DejaVu Sans"
    base_font_size: PositiveFloat = 10.0
    global_font_scale_factor: PositiveFloat = 1.0
    title_scale: PositiveFloat = 1.2
    label_scale: PositiveFloat = 1.0

    # lines and markers
    plot_line_width: PositiveFloat = 1.5
    axis_to_plot_linewidth_ratio: PositiveFloat = 0.5
    marker_size: PositiveFloat = 6.0
    errorbar_cap_size_scale: NonNegFloat = 0.5
    errorbar_cap_basis: CapBasis = "marker"

    # colors
    axis_color: Color = LIGHT_AXIS_COLOR
    figure_background_color: Color = LIGHT_BACKGROUND
    text_color: Color = LIGHT_TEXT_COLOR
    grid_color: Color = LIGHT_GRID_COLOR

    # grid, box and limits
    grid_density: GridDensity = "normal"
    grid_alpha: UnitFloat = 0.15
    grid_line_style: str = "-"
    minor_grid_alpha: UnitFloat = 0.07
    minor_grid_line_style: str = ":"
    axis_box_style: BoxStyle = "on"
    axes_layer: AxesLayer = "top"
    tick_direction: TickDirection = "out"
    axis_limit_mode: LimitMode = "padded"
    expand_axis_limits_factor: Annotated[
        float, BeforeValidator(_number), Field(ge=0, le=0.5)
    ] = 0.03

    # color / marker / line-style cycling
    color_palette: Union[str, Tuple[RGB, ...]] = "default"
    custom_color_palette: Tuple[Color, ...] = ()
    cycle_marker_styles: CycleMode = "auto"
    marker_cycle_threshold: Annotated[int, BeforeValidator(_number), Field(ge=0)] = 3
    marker_styles: Annotated[
        Tuple[str, ...], BeforeValidator(_str_tuple), Field(min_length=1)
    ] = DEFAULT_MARKERS
    line_style_order: Annotated[
        Tuple[str, ...], BeforeValidator(_str_tuple), Field(min_length=1)
    ] = DEFAULT_LINE_STYLES
    cycle_line_styles: CycleMode = "auto"
    line_style_cycle_threshold: Annotated[int, BeforeValidator(_number), Field(ge=0)] = 2

    # legend
    legend_location: LegendLocation = "best"
    smart_legend_display: bool = True
    legend_force_single_entry: bool = False
    legend_title_string: str = ""
    interactive_legend: bool = True
    legend_num_columns: Annotated[int, BeforeValidator(_number), Field(ge=0)] = 0
    legend_reverse_order: bool = False

    # scope
    apply_to_colorbars: bool = True
    apply_to_polaraxes: bool = True
    apply_to_general_text: bool = True
    beautify_suptitle: bool = True
    view_preset_3d: ViewPreset = "none"

    # exclusion
    exclude_object_tags: Annotated[Tuple[str, ...], BeforeValidator(_str_tuple)] = ()
    exclude_object_types: Annotated[Tuple[str, ...], BeforeValidator(_str_tuple)] = ()

    # density scaling
    # (density, factor) control points; a mapping is accepted on input
    scaling_map: Annotated[
        Tuple[Tuple[int, PositiveFloat], ...], BeforeValidator(_pairs)
    ] = tuple(DEFAULT_SCALING_MAP.items())
    min_scale_factor: Annotated[float, BeforeValidator(_number), Field(gt=0, le=1)] = 0.65
    max_scale_factor: Annotated[float, BeforeValidator(_number), Field(ge=1, le=10)] = 1.7

    log_level: Annotated[int, BeforeValidator(_number), Field(ge=0, le=2)] = 1

    export_settings: ExportSettings = ExportSettings()
    panel_labeling: PanelLabeling = PanelLabeling()
    stats_overlay: StatsOverlay = StatsOverlay()

    model_config = ConfigDict(extra="forbid", frozen=True)

    # -- field validators ----------------------------------------------------

    @field_validator("color_palette", mode="before")
    @classmethod
    def _check_palette(cls, v: Any) -> Any:
        if isinstance(v, str):
            name = v.strip().lower()
            if name not in PALETTE_NAMES:
                raise ValueError(f"unknown palette {v!r}")
            return name
        arr = np.asarray(v, dtype=float)
        if arr.ndim != 2 or arr.shape[1] != 3 or arr.shape[0] == 0:
            raise ValueError("palette matrix must have shape (N, 3)")
        if np.any(arr < 0) or np.any(arr > 1):
            raise ValueError("palette values must lie in [0, 1]")
        return tuple(tuple(float(c) for c in row) for row in arr)

    @field_validator("marker_styles")
    @classmethod
    def _check_markers(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        bad = [m for m in v if m not in MarkerStyle.markers]
        if bad:
            raise ValueError(f"unknown marker(s) {bad}")
        return v

    @field_validator("line_style_order")
    @classmethod
    def _check_line_styles(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        bad = [s for s in v if s not in LINE_STYLES]
        if bad:
            raise ValueError(f"unknown line style(s) {bad}")
        return v

    @field_validator("grid_line_style", "minor_grid_line_style")
    @classmethod
    def _check_grid_style(cls, v: str) -> str:
        if v not in LINE_STYLES:
            raise ValueError(f"unknown line style {v!r}")
        return v

    @field_validator("scaling_map")
    @classmethod
    def _check_scaling_map(
        cls, v: Tuple[Tuple[int, float], ...]
    ) -> Tuple[Tuple[int, float], ...]:
        if not v:
            raise ValueError("scaling_map needs at least one control point")
        points = sorted(v)
        keys = [k for k, _ in points]
        if len(set(keys)) != len(keys):
            raise ValueError("scaling_map densities must be unique")
        if keys[0] < 1:
            raise ValueError("scaling_map densities must be >= 1")
        factors = [f for _, f in points]
        if any(b > a for a, b in zip(factors, factors[1:])):
            raise ValueError("scaling_map factors must not increase with density")
        return tuple((k, float(f)) for k, f in points)

    # -- derived fields ------------------------------------------------------

    @computed_field  # type: ignore[prop-decorator]
    @property
    def axis_line_width(self) -> float:
        return self.plot_line_width * self.axis_to_plot_linewidth_ratio

    @computed_field  # type: ignore[prop-decorator]
    @property
    def effective_base_font_size(self) -> float:
        return self.base_font_size * self.global_font_scale_factor

    @computed_field  # type: ignore[prop-decorator]
    @property
    def active_palette(self) -> Tuple[RGB, ...]:
        palette, _ = resolve_palette(self.color_palette, self.custom_color_palette)
        return palette


DERIVED_FIELDS = frozenset({"axis_line_width", "effective_base_font_size", "active_palette"})


__all__ = [
    "ConfigRecord",
    "ExportSettings",
    "PanelLabeling",
    "StatsOverlay",
    "SUB_RECORDS",
    "DERIVED_FIELDS",
    "STATISTICS",
    "LEGEND_LOCATIONS",
    "DEFAULT_SCALING_MAP",
    "LIGHT_AXIS_COLOR",
    "LIGHT_TEXT_COLOR",
    "LIGHT_GRID_COLOR",
    "LIGHT_BACKGROUND",
]
