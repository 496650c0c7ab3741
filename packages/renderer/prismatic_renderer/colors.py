"""Packed ARGB color helpers.

A packed color is a 32-bit unsigned int laid out as ``0xAARRGGBB``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from prismatic_core.errors import ConfigurationError

OPAQUE = 0xFF


def _channel(value: float) -> int:
    return max(0, min(255, int(value)))


def to_packed_color(components: Sequence[float]) -> int:
    """Pack ``(r, g, b)`` or ``(r, g, b, a)`` 0-255 channels into ARGB."""
    if len(components) not in (3, 4):
        raise ConfigurationError(f"expected 3 or 4 color components, got {len(components)}")
    r, g, b = (_channel(c) for c in components[:3])
    a = _channel(components[3]) if len(components) == 4 else OPAQUE
    return (a << 24) | (r << 16) | (g << 8) | b


def from_packed_color(value: int) -> tuple[int, int, int, int]:
    """Inverse of :func:`to_packed_color`; returns ``(r, g, b, a)``."""
    value = int(value) & 0xFFFFFFFF
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF, (value >> 24) & 0xFF


def parse_hex(text: str) -> int:
    raw = text.strip().lstrip("#")
    if len(raw) not in (6, 8):
        raise ConfigurationError(f"expected #RRGGBB or #RRGGBBAA, got {text!r}")
    try:
        channels = [int(raw[i : i + 2], 16) for i in range(0, len(raw), 2)]
    except ValueError as exc:
        raise ConfigurationError(f"invalid hex color {text!r}") from exc
    return to_packed_color(channels)


def to_hex(value: int) -> str:
    r, g, b, a = from_packed_color(value)
    if a == OPAQUE:
        return f"#{r:02X}{g:02X}{b:02X}"
    return f"#{r:02X}{g:02X}{b:02X}{a:02X}"


def unpack_array(packed: np.ndarray) -> np.ndarray:
    """Split packed colors into a ``(..., 4)`` float array of r, g, b, a."""
    packed = np.asarray(packed, dtype=np.uint32)
    out = np.empty(packed.shape + (4,), dtype=np.float64)
    out[..., 0] = (packed >> 16) & 0xFF
    out[..., 1] = (packed >> 8) & 0xFF
    out[..., 2] = packed & 0xFF
    out[..., 3] = (packed >> 24) & 0xFF
    return out


def pack_array(channels: np.ndarray) -> np.ndarray:
    """Inverse of :func:`unpack_array`; channels are rounded half-up and clamped."""
    c = np.clip(np.floor(np.asarray(channels, dtype=np.float64) + 0.5), 0, 255).astype(np.uint32)
    return (c[..., 3] << 24) | (c[..., 0] << 16) | (c[..., 1] << 8) | c[..., 2]
