"""Density-adaptive scale factor.

Denser layouts get smaller fonts and strokes.  The factor for a panel count
comes from a sparse table of control points: exact keys return their factor,
values between keys are interpolated, and values outside the table follow a
gentle power law.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Tuple

import numpy as np

# tunable taper of the power-law extrapolation outside the table
EXTRAPOLATION_EXPONENT = 2.5

# interpolated values stay within this band around the bracketing factors
NEIGHBOR_BAND = (0.9, 1.1)


@dataclass(frozen=True)
class ScalingTable:
    densities: Tuple[int, ...]
    factors: Tuple[float, ...]
    min_factor: float = 0.65
    max_factor: float = 1.7

    @classmethod
    def from_mapping(
        cls, table: Mapping[int, float], min_factor: float = 0.65, max_factor: float = 1.7
    ) -> "ScalingTable":
        keys = tuple(sorted(int(k) for k in table))
        return cls(keys, tuple(float(table[k]) for k in keys), float(min_factor), float(max_factor))

    @classmethod
    def from_config(cls, cfg) -> "ScalingTable":
        return cls.from_mapping(dict(cfg.scaling_map), cfg.min_scale_factor, cfg.max_scale_factor)


def scale_factor(density: int, table: ScalingTable) -> float:
    """Scale factor for a density group of ``density`` panels."""
    d = max(1, int(density))
    keys = np.asarray(table.densities, dtype=float)
    vals = np.asarray(table.factors, dtype=float)

    idx = np.flatnonzero(keys == d)
    if idx.size:
        f = float(vals[idx[0]])
    elif d < keys[0]:
        f = float(vals[0] * (keys[0] / d) ** (1.0 / EXTRAPOLATION_EXPONENT))
    elif d > keys[-1]:
        f = float(vals[-1] * (keys[-1] / d) ** (1.0 / EXTRAPOLATION_EXPONENT))
    else:
        hi = int(np.searchsorted(keys, d))
        lo = hi - 1
        f = float(np.interp(d, keys[lo:hi + 1], vals[lo:hi + 1]))
        f_lo, f_hi = vals[lo], vals[hi]
        f = float(np.clip(f, min(f_lo, f_hi) * NEIGHBOR_BAND[0], max(f_lo, f_hi) * NEIGHBOR_BAND[1]))

    return float(np.clip(f, table.min_factor, table.max_factor))


__all__ = ["ScalingTable", "scale_factor", "EXTRAPOLATION_EXPONENT"]
