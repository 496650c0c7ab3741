"""Angle and unit-interval normalization.

Periodicity of the gradient shapes depends on these, so snapping near the
period boundary is explicit rather than left to floating-point luck.
"""

from __future__ import annotations

import math

import numpy as np

from prismatic_core.errors import ConfigurationError

TWO_PI = 2.0 * math.pi
# Remainders this close to the period are treated as landing on it.
SNAP_EPSILON = 1e-9


def wrap_angle(angle: float) -> float:
    """Reduce ``angle`` into ``[0, 2*pi)``; any multiple of 2*pi maps to 0."""
    if not math.isfinite(angle):
        raise ConfigurationError(f"angle must be finite, got {angle!r}")
    a = math.fmod(angle, TWO_PI)
    if a < 0:
        a += TWO_PI
    if a < SNAP_EPSILON or TWO_PI - a < SNAP_EPSILON:
        return 0.0
    return a


def wrap_unit(t):
    """Reduce ``t`` into ``[0, 1)`` (scalar or array)."""
    if np.ndim(t) == 0:
        w = float(t) - math.floor(float(t))
        return 0.0 if w >= 1.0 else w
    t = np.asarray(t, dtype=np.float64)
    w = t - np.floor(t)
    w[w >= 1.0] = 0.0
    return w


def fold_unit(t):
    """Mirror ``t`` into ``[0, 1]``: 0..1 rises, 1..2 falls, and so on."""
    if np.ndim(t) == 0:
        m = float(t) % 2.0
        return 2.0 - m if m > 1.0 else m
    m = np.mod(np.asarray(t, dtype=np.float64), 2.0)
    return np.where(m > 1.0, 2.0 - m, m)


def clamp_unit(t):
    if np.ndim(t) == 0:
        return min(1.0, max(0.0, float(t)))
    return np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)
