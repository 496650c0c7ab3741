"""Color ramps: ordered color stops sampled by a progress scalar."""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Iterable, Sequence

import numpy as np

from prismatic_core.errors import ConfigurationError

from .angles import wrap_unit
from .colors import pack_array, parse_hex, unpack_array
from .models import ColorStop


class Easing(str, Enum):
    """Curve applied to the blend fraction between two neighbouring stops."""

    LINEAR = "linear"
    IDENTITY = "identity"
    SMOOTH_STEP = "smooth_step"
    SMOOTHER_STEP = "smoother_step"
    EXPONENTIAL = "exponential"
    CUBIC = "cubic"
    BOUNCE = "bounce"
    CIRCULAR = "circular"
    SINE = "sine"
    PARABOLA = "parabola"
    GAIN1 = "gain1"
    GAIN2 = "gain2"
    EXPIMPULSE = "expimpulse"
    HEARTBEAT = "heartbeat"


def _bounce(f: np.ndarray) -> np.ndarray:
    return np.select(
        [f < 0.36364, f < 0.72727, f < 0.90909],
        [
            7.5625 * f * f,
            7.5625 * (f - 0.545454) ** 2 + 0.75,
            7.5625 * (f - 0.81818) ** 2 + 0.9375,
        ],
        7.5625 * (f - 0.95455) ** 2 + 0.984375,
    )


def _gain(exponent: float) -> Callable[[np.ndarray], np.ndarray]:
    def curve(f: np.ndarray) -> np.ndarray:
        low = 0.5 * np.power(2.0 * f, exponent)
        high = 1.0 - 0.5 * np.power(2.0 * (1.0 - f), exponent)
        return np.where(f < 0.5, low, high)

    return curve


_EASINGS: dict[Easing, Callable[[np.ndarray], np.ndarray]] = {
    Easing.LINEAR: lambda f: f,
    Easing.IDENTITY: lambda f: f * f * (2.0 - f),
    Easing.SMOOTH_STEP: lambda f: 3.0 * f * f - 2.0 * f * f * f,
    Easing.SMOOTHER_STEP: lambda f: f * f * f * (f * (f * 6.0 - 15.0) + 10.0),
    Easing.EXPONENTIAL: lambda f: np.where(f >= 1.0, 1.0, 1.0 - np.power(2.0, -10.0 * f)),
    Easing.CUBIC: lambda f: f * f * f,
    Easing.BOUNCE: _bounce,
    Easing.CIRCULAR: lambda f: np.sqrt((2.0 - f) * f),
    Easing.SINE: lambda f: np.sin(f * (math.pi / 2.0)),
    Easing.PARABOLA: lambda f: np.sqrt(np.clip(4.0 * f * (1.0 - f), 0.0, None)),
    Easing.GAIN1: _gain(0.3),
    Easing.GAIN2: _gain(3.3333),
    Easing.EXPIMPULSE: lambda f: 2.0 * f * np.exp(1.0 - 2.0 * f),
    Easing.HEARTBEAT: lambda f: (np.arctan(np.sin(f * math.pi) * 6.0) + math.pi / 2.0) / math.pi,
}


def _coerce_color(color: int | str) -> int:
    if isinstance(color, str):
        return parse_hex(color)
    return int(color) & 0xFFFFFFFF


def _coerce_stop(stop: ColorStop | Sequence) -> ColorStop:
    if isinstance(stop, ColorStop):
        return stop
    position, color = stop
    return ColorStop(float(position), _coerce_color(color))


class ColorRamp:
    """Immutable, thread-safe sequence of color stops.

    Stops are kept in ascending position order; equal positions are allowed and
    produce a hard edge (a lookup landing exactly on a duplicated position takes
    the last stop at that position). Lookups clamp ``t`` to ``[0, 1]`` and blend
    each ARGB channel linearly (after the optional easing curve) between the
    bracketing pair of stops.
    """

    __slots__ = ("_stops", "_easing", "_offset", "_positions", "_channels")

    def __init__(
        self,
        stops: Iterable[ColorStop | Sequence],
        easing: Easing | str = Easing.LINEAR,
        offset: float = 0.0,
    ) -> None:
        ordered = sorted((_coerce_stop(s) for s in stops), key=lambda s: s.position)
        if not ordered:
            raise ConfigurationError("a color ramp needs at least one color stop")
        if not math.isfinite(offset):
            raise ConfigurationError(f"ramp offset must be finite, got {offset!r}")
        try:
            easing = Easing(easing)
        except ValueError as exc:
            raise ConfigurationError(f"unknown easing {easing!r}") from exc

        self._stops = tuple(ordered)
        self._easing = easing
        self._offset = float(wrap_unit(offset))
        self._positions = np.array([s.position for s in ordered], dtype=np.float64)
        self._channels = unpack_array(np.array([s.color for s in ordered], dtype=np.uint32))
        self._positions.setflags(write=False)
        self._channels.setflags(write=False)

    @classmethod
    def from_colors(cls, *colors: int | str, easing: Easing | str = Easing.LINEAR) -> "ColorRamp":
        """Evenly space ``colors`` over ``[0, 1]``; a single color spans the whole ramp."""
        if not colors:
            raise ConfigurationError("a color ramp needs at least one color")
        packed = [_coerce_color(c) for c in colors]
        if len(packed) == 1:
            packed = packed * 2
        step = len(packed) - 1
        return cls([ColorStop(i / step, c) for i, c in enumerate(packed)], easing=easing)

    @property
    def stops(self) -> tuple[ColorStop, ...]:
        return self._stops

    @property
    def easing(self) -> Easing:
        return self._easing

    @property
    def offset(self) -> float:
        return self._offset

    def __len__(self) -> int:
        return len(self._stops)

    def __iter__(self):
        return iter(self._stops)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColorRamp):
            return NotImplemented
        return (self._stops, self._easing, self._offset) == (other._stops, other._easing, other._offset)

    def __hash__(self) -> int:
        return hash((self._stops, self._easing, self._offset))

    def __repr__(self) -> str:
        stops = ", ".join(f"{s.position:.3f}:#{s.color:08X}" for s in self._stops)
        return f"ColorRamp([{stops}], easing={self._easing.value}, offset={self._offset})"

    def color_at(self, t: float) -> int:
        if math.isnan(t):
            raise ConfigurationError("cannot sample a color ramp at NaN")
        return int(self.colors_at(np.array([t], dtype=np.float64))[0])

    def colors_at(self, t: np.ndarray) -> np.ndarray:
        """Vectorized lookup; returns packed ``uint32`` colors shaped like ``t``."""
        t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)
        if self._offset:
            t = wrap_unit(t + self._offset)

        positions = self._positions
        last = len(positions) - 1
        idx = np.searchsorted(positions, t, side="right")
        lo = np.clip(idx - 1, 0, last)
        hi = np.clip(idx, 0, last)

        span = positions[hi] - positions[lo]
        safe = np.where(span > 0, span, 1.0)
        frac = np.where(span > 0, (t - positions[lo]) / safe, 0.0)
        # A lookup that lands exactly on a stop keeps that stop's color under every curve.
        frac = np.where(frac > 0, np.clip(_EASINGS[self._easing](frac), 0.0, 1.0), 0.0)

        left = self._channels[lo]
        right = self._channels[hi]
        blended = left + (right - left) * frac[..., np.newaxis]
        return pack_array(blended)

    def with_stop(self, position: float, color: int | str) -> "ColorRamp":
        return ColorRamp(self._stops + (ColorStop(position, _coerce_color(color)),), self._easing, self._offset)

    def with_easing(self, easing: Easing | str) -> "ColorRamp":
        return ColorRamp(self._stops, easing, self._offset)

    def with_offset(self, offset: float) -> "ColorRamp":
        """Shift every lookup by ``offset`` (wrapped mod 1); used to animate a ramp."""
        return ColorRamp(self._stops, self._easing, offset)

    def animated(self, amount: float) -> "ColorRamp":
        return self.with_offset(self._offset + amount)

    def reversed(self) -> "ColorRamp":
        flipped = [ColorStop(1.0 - s.position, s.color) for s in reversed(self._stops)]
        return ColorRamp(flipped, self._easing, self._offset)

    def primed(self) -> "ColorRamp":
        """Append the first color at position 1 so periodic shapes loop without a seam."""
        n = len(self._stops)
        scale = (n - 1) / n if n > 1 else 0.0
        squeezed = [ColorStop(s.position * scale, s.color) for s in self._stops]
        squeezed.append(ColorStop(1.0, self._stops[0].color))
        return ColorRamp(squeezed, self._easing, self._offset)
