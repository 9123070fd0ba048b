"""Override-file loader.

Override files are YAML (JSON is accepted too, being a YAML subset) holding a
mapping of :class:`ConfigRecord` field names to values.  Several files may be
layered; later files win, nested sub-records are merged key by key.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from figpolish.utils.dict_merge import deep_update
from .layering import ConfigValidationError

__all__ = ["read_overrides", "load_overrides"]


def read_overrides(path: str | Path) -> Dict[str, Any]:
    """Read one override file; an empty file yields ``{}``."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"override file not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"cannot parse {p}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Top-level YAML at {p} must be a mapping")
    return data


def load_overrides(*paths: str | Path) -> Dict[str, Any]:
    """Merge the override files in ``paths`` in order."""
    out: Dict[str, Any] = {}
    for path in paths:
        out = deep_update(out, read_overrides(path))
    return out
