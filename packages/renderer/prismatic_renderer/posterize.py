"""Snap continuous progress onto a fixed number of levels."""

from __future__ import annotations

import numpy as np

from prismatic_core.errors import ConfigurationError

from .models import is_count


def validate_levels(levels: int) -> int:
    if not is_count(levels) or levels < 1:
        raise ConfigurationError(f"posterize levels must be an integer >= 1, got {levels!r}")
    return int(levels)


def quantize(t, levels: int):
    """Map ``t`` in ``[0, 1]`` to one of ``levels`` representative values.

    Bin ``k`` covers ``[k / levels, (k + 1) / levels)`` (the last bin also takes
    ``t == 1``) and is represented by ``k / (levels - 1)``, so the first and
    last bins land exactly on the ramp ends. A single level maps everything to
    the ramp midpoint.
    """
    levels = validate_levels(levels)
    values = np.asarray(t, dtype=np.float64)
    if levels == 1:
        out = np.full(values.shape, 0.5)
    else:
        bins = np.minimum(np.floor(np.clip(values, 0.0, 1.0) * levels), levels - 1)
        out = bins / (levels - 1)
    return float(out) if out.ndim == 0 else out
