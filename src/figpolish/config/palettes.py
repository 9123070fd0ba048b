"""Named color palettes.

Every palette is returned as a tuple of RGB triples.  Continuous colormaps are
sampled at ten evenly spaced points; qualitative ones use their listed colors.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence, Tuple

import matplotlib
import numpy as np
from matplotlib import colors as mcolors

RGB = Tuple[float, float, float]

LINES: Tuple[RGB, ...] = (
    (0.0, 0.4470, 0.7410),
    (0.8500, 0.3250, 0.0980),
    (0.9290, 0.6940, 0.1250),
    (0.4940, 0.1840, 0.5560),
    (0.4660, 0.6740, 0.1880),
    (0.3010, 0.7450, 0.9330),
    (0.6350, 0.0780, 0.1840),
)

SAMPLES = 10


def _prop_cycle() -> Tuple[RGB, ...]:
    colors = matplotlib.rcParams["axes.prop_cycle"].by_key().get("color", [])
    out = tuple(tuple(float(c) for c in mcolors.to_rgb(col)) for col in colors)
    return out if len(out) >= 2 else LINES


def _sampled(name: str) -> Callable[[], Tuple[RGB, ...]]:
    def build() -> Tuple[RGB, ...]:
        cmap = matplotlib.colormaps[name]
        return tuple(
            tuple(float(c) for c in cmap(x)[:3]) for x in np.linspace(0.0, 1.0, SAMPLES)
        )

    return build


def _listed(name: str, count: Optional[int] = None) -> Callable[[], Tuple[RGB, ...]]:
    def build() -> Tuple[RGB, ...]:
        colors = matplotlib.colormaps[name].colors
        if count is not None:
            colors = colors[:count]
        return tuple(tuple(float(c) for c in mcolors.to_rgb(col)) for col in colors)

    return build


_BUILDERS: Dict[str, Callable[[], Tuple[RGB, ...]]] = {
    "default": _prop_cycle,
    "lines": lambda: LINES,
    "tab10": _listed("tab10"),
    "viridis": _sampled("viridis"),
    "plasma": _sampled("plasma"),
    "cividis": _sampled("cividis"),
    "turbo": _sampled("turbo"),
    "set1": _listed("Set1", 8),
    "set2": _listed("Set2"),
    "set3": _listed("Set3"),
}

PALETTE_NAMES = frozenset(_BUILDERS) | {"custom"}


def named_palette(name: str) -> Tuple[RGB, ...]:
    """Return the palette registered under ``name`` (``custom`` excluded)."""
    return _BUILDERS[name.lower()]()


def _as_matrix(rows: Sequence) -> Optional[Tuple[RGB, ...]]:
    try:
        arr = np.asarray(rows, dtype=float)
    except (TypeError, ValueError):
        return None
    if arr.ndim != 2 or arr.shape[1] != 3 or arr.shape[0] == 0:
        return None
    if not np.all(np.isfinite(arr)) or np.any(arr < 0) or np.any(arr > 1):
        return None
    return tuple(tuple(float(c) for c in row) for row in arr)


def resolve_palette(
    source, custom: Sequence = ()
) -> Tuple[Tuple[RGB, ...], Optional[str]]:
    """Turn a palette name or an Nx3 matrix into concrete colors.

    Returns ``(palette, warning)``; ``warning`` is ``None`` unless the source
    could not be used and the ``lines`` palette was substituted.
    """
    if isinstance(source, str):
        name = source.lower()
        if name == "custom":
            palette = _as_matrix(custom)
            if palette is None:
                return LINES, (
                    'invalid "custom_color_palette": expected a non-empty Nx3 '
                    'matrix in [0, 1]; using "lines"'
                )
            return palette, None
        if name not in _BUILDERS:
            return LINES, f'unknown color palette "{source}"; using "lines"'
        return named_palette(name), None
    palette = _as_matrix(source)
    if palette is None:
        return LINES, 'invalid color palette matrix; using "lines"'
    return palette, None


__all__ = ["LINES", "PALETTE_NAMES", "named_palette", "resolve_palette"]
