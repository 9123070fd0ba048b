from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
from pydantic import ValidationError

from figpolish.utils.dict_merge import deep_update
from .palettes import resolve_palette
from .presets import PRESETS, preset_overrides
from .schema import (
    DERIVED_FIELDS,
    LIGHT_AXIS_COLOR,
    LIGHT_BACKGROUND,
    LIGHT_GRID_COLOR,
    LIGHT_TEXT_COLOR,
    STATISTICS,
    SUB_RECORDS,
    ConfigRecord,
)


class ConfigValidationError(ValueError): ...


@dataclass(frozen=True)
class ConfigIssue:
    """One recoverable configuration problem found during resolution."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


_LIGHT_COLORS = {
    "axis_color": LIGHT_AXIS_COLOR,
    "text_color": LIGHT_TEXT_COLOR,
    "grid_color": LIGHT_GRID_COLOR,
    "figure_background_color": LIGHT_BACKGROUND,
}
_DARK_COLORS = {
    "axis_color": (0.85, 0.85, 0.85),
    "text_color": (0.9, 0.9, 0.9),
    "grid_color": (0.7, 0.7, 0.7),
    "figure_background_color": (0.12, 0.12, 0.15),
}

# upper bound on validate/reset rounds; each round fixes at least one field
_MAX_PASSES = 128


def _record_dict(record: ConfigRecord) -> Dict[str, Any]:
    return record.model_dump(exclude=set(DERIVED_FIELDS))


def _merge_user(
    merged: Dict[str, Any], overrides: Mapping[str, Any], issues: List[ConfigIssue]
) -> set:
    """Overlay known user fields onto ``merged`` in place; return the keys set."""
    fields = ConfigRecord.model_fields
    user_set = set()
    for key, value in overrides.items():
        if key == "style_preset":
            continue
        if key in DERIVED_FIELDS:
            issues.append(ConfigIssue(key, "derived parameter cannot be set directly; ignored"))
            continue
        if key not in fields:
            issues.append(ConfigIssue(str(key), "unknown parameter; ignored"))
            continue
        if key in SUB_RECORDS and isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            known = SUB_RECORDS[key].model_fields
            sub = dict(merged[key])
            for sub_key, sub_value in value.items():
                if sub_key not in known:
                    issues.append(ConfigIssue(f"{key}.{sub_key}", "unknown parameter; ignored"))
                    continue
                sub[sub_key] = sub_value
            merged[key] = sub
        else:
            merged[key] = value
        user_set.add(key)
    return user_set


def _drop_unknown_statistics(merged: Dict[str, Any], issues: List[ConfigIssue]) -> None:
    """Skip unknown names in ``stats_overlay.statistics`` instead of resetting the list."""
    so = merged.get("stats_overlay")
    if not isinstance(so, dict):
        return
    names = so.get("statistics")
    if isinstance(names, str):
        names = [names]
    if not isinstance(names, (list, tuple)):
        return
    known = [n for n in names if isinstance(n, str) and n.strip().lower() in STATISTICS]
    unknown = [n for n in names if n not in known]
    # nothing usable left: let validation reset the field
    if unknown and known:
        issues.append(
            ConfigIssue("stats_overlay.statistics", f"unknown statistic(s) {unknown}; skipped")
        )
        merged["stats_overlay"] = {**so, "statistics": tuple(known)}


def _reset(data: Dict[str, Any], base: Dict[str, Any], loc: Tuple, msg: str) -> Optional[ConfigIssue]:
    name = loc[0]
    if name not in base:
        data.pop(name, None)
        return ConfigIssue(str(name), "unknown parameter; ignored")
    if (
        name in SUB_RECORDS
        and len(loc) > 1
        and isinstance(loc[1], str)
        and isinstance(data.get(name), dict)
        and loc[1] in base[name]
    ):
        sub_name = loc[1]
        sub = dict(data[name])
        bad = sub.get(sub_name)
        sub[sub_name] = deepcopy(base[name][sub_name])
        data[name] = sub
        return ConfigIssue(
            f"{name}.{sub_name}",
            f"invalid value {bad!r} ({msg}); using default {sub[sub_name]!r}",
        )
    bad = data.get(name)
    data[name] = deepcopy(base[name])
    return ConfigIssue(str(name), f"invalid value {bad!r} ({msg}); using default {data[name]!r}")


def _validate(merged: Dict[str, Any], base: Dict[str, Any], issues: List[ConfigIssue]) -> ConfigRecord:
    data = dict(merged)
    for _ in range(_MAX_PASSES):
        try:
            return ConfigRecord.model_validate(data)
        except ValidationError as exc:
            seen = set()
            for err in exc.errors():
                loc = tuple(err["loc"])
                if not loc:
                    continue
                key = loc[:2] if loc[0] in SUB_RECORDS else loc[:1]
                if key in seen:
                    continue
                seen.add(key)
                issue = _reset(data, base, loc, err["msg"])
                if issue is not None:
                    issues.append(issue)
    issues.append(ConfigIssue("*", "configuration could not be repaired; using defaults"))
    return ConfigRecord.model_validate(base)


def _apply_theme(record: ConfigRecord, user_set: set) -> ConfigRecord:
    if record.theme == "dark":
        old, new = _LIGHT_COLORS, _DARK_COLORS
    else:
        old, new = _DARK_COLORS, _LIGHT_COLORS
    update = {
        name: new[name]
        for name in new
        if name not in user_set and np.allclose(getattr(record, name), old[name])
    }
    return record.model_copy(update=update) if update else record


def resolve(
    defaults: Optional[ConfigRecord] = None,
    preset_name: Optional[str] = None,
    user_overrides: Optional[Mapping[str, Any]] = None,
) -> Tuple[ConfigRecord, List[ConfigIssue]]:
    """Resolve defaults, a style preset and user overrides into a record.

    Parameters
    ----------
    defaults:
        Baseline record; invalid values are reset to the values found here.
        ``None`` uses the schema defaults.
    preset_name:
        Style preset applied before the user's overrides.  When ``None`` the
        ``style_preset`` entry of ``user_overrides`` is used, if any.
    user_overrides:
        Mapping of field names to values.  Sub-records (``export_settings``,
        ``panel_labeling``, ``stats_overlay``) may be given partially.

    Returns
    -------
    (record, issues)
        The validated, immutable record and the list of problems that were
        repaired along the way.  Resolution never raises for bad input.
    """
    issues: List[ConfigIssue] = []
    base = _record_dict(defaults if defaults is not None else ConfigRecord())

    overrides: Mapping[str, Any]
    if user_overrides is None:
        overrides = {}
    elif isinstance(user_overrides, Mapping):
        overrides = user_overrides
    else:
        issues.append(ConfigIssue("*", f"overrides must be a mapping, got {type(user_overrides).__name__}; ignored"))
        overrides = {}

    if preset_name is None:
        preset_name = overrides.get("style_preset", base.get("style_preset", "default"))
    if not isinstance(preset_name, str) or preset_name.lower() not in PRESETS:
        issues.append(ConfigIssue("style_preset", f"unknown preset {preset_name!r}; using 'default'"))
        preset_name = "default"
    preset_name = preset_name.lower()

    merged = deep_update(base, preset_overrides(preset_name))
    user_set = _merge_user(merged, overrides, issues)
    _drop_unknown_statistics(merged, issues)
    merged["style_preset"] = preset_name

    record = _validate(merged, base, issues)
    record = _apply_theme(record, user_set)

    _, warning = resolve_palette(record.color_palette, record.custom_color_palette)
    if warning:
        issues.append(ConfigIssue("color_palette", warning))
    return record, issues


__all__ = ["ConfigIssue", "ConfigValidationError", "resolve"]
