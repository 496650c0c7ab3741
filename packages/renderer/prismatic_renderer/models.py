"""Typed renderer models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from prismatic_core.errors import BoundsError, ConfigurationError


def is_count(value) -> bool:
    """True for Python and numpy integers; bools are rejected."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


@dataclass(frozen=True)
class ColorStop:
    position: float
    color: int

    def __post_init__(self) -> None:
        if not math.isfinite(self.position) or not 0.0 <= self.position <= 1.0:
            raise ConfigurationError(f"color stop position must be within [0, 1], got {self.position!r}")
        object.__setattr__(self, "color", int(self.color) & 0xFFFFFFFF)


@dataclass(frozen=True)
class RenderRegion:
    buffer_width: int
    buffer_height: int
    offset_x: int = 0
    offset_y: int = 0
    width: int | None = None
    height: int | None = None

    def __post_init__(self) -> None:
        for name in ("buffer_width", "buffer_height", "offset_x", "offset_y", "width", "height"):
            value = getattr(self, name)
            if value is None:
                continue
            if not is_count(value):
                raise BoundsError(f"region {name} must be an integer, got {value!r}")
            object.__setattr__(self, name, int(value))
        if self.buffer_width < 0 or self.buffer_height < 0:
            raise BoundsError(f"buffer size must be non-negative, got {self.buffer_width}x{self.buffer_height}")
        if self.width is None:
            object.__setattr__(self, "width", self.buffer_width - self.offset_x)
        if self.height is None:
            object.__setattr__(self, "height", self.buffer_height - self.offset_y)
        if self.offset_x < 0 or self.offset_y < 0:
            raise BoundsError(f"region offset must be non-negative, got ({self.offset_x}, {self.offset_y})")
        if self.width < 0 or self.height < 0:
            raise BoundsError(f"region size must be non-negative, got {self.width}x{self.height}")
        if self.offset_x + self.width > self.buffer_width:
            raise BoundsError(
                f"region x-span [{self.offset_x}, {self.offset_x + self.width}) exceeds buffer width {self.buffer_width}"
            )
        if self.offset_y + self.height > self.buffer_height:
            raise BoundsError(
                f"region y-span [{self.offset_y}, {self.offset_y + self.height}) exceeds buffer height {self.buffer_height}"
            )

    @classmethod
    def full(cls, buffer_width: int, buffer_height: int) -> "RenderRegion":
        return cls(buffer_width=buffer_width, buffer_height=buffer_height)

    @property
    def midpoint(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


class NoiseType(str, Enum):
    PERLIN = "Perlin"
    SIMPLEX = "Simplex"
    VALUE = "Value"
    CELLULAR = "Cellular"


class FractalType(str, Enum):
    NONE = "None"
    FBM = "FBm"
    RIDGED = "Ridged"
    PING_PONG = "PingPong"


@dataclass(frozen=True)
class NoiseConfig:
    noise_type: NoiseType = NoiseType.SIMPLEX
    fractal_type: FractalType = FractalType.NONE
    octaves: int = 3
    lacunarity: float = 2.0
    gain: float = 0.5
    seed: int = 0
    ping_pong_strength: float = 2.0

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "noise_type", NoiseType(self.noise_type))
            object.__setattr__(self, "fractal_type", FractalType(self.fractal_type))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if not is_count(self.octaves) or self.octaves < 1:
            raise ConfigurationError(f"noise octaves must be an integer >= 1, got {self.octaves!r}")
        object.__setattr__(self, "octaves", int(self.octaves))
        for name in ("lacunarity", "gain", "ping_pong_strength"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"noise {name} must be finite, got {value!r}")
