"""Built-in named ramps and harmonic palette generators."""

from __future__ import annotations

import colorsys
import math
import random

from prismatic_core.errors import ConfigurationError

from .colors import to_packed_color
from .ramp import ColorRamp

DEFAULT_PRESET_NAME = "Neon Slate"

PRESETS: dict[str, tuple[str, ...]] = {
    "Neon Slate": ("#0A0F1D", "#131B33", "#35D9FF", "#8CFFB5"),
    "Solar Drift": ("#1A140E", "#473022", "#FFB347", "#FFD166"),
    "Arctic Pulse": ("#07171F", "#173F52", "#59F3FF", "#EFFFFF"),
    "Monochrome": ("#FFFFFF", "#000000"),
    "Sunset": ("#2D1B69", "#B4317A", "#F2704B", "#FFD56B"),
}

# Saturation/brightness floors and jitter for generated palettes.
_S_MIN = 0.75
_B_MIN = 0.75
_S_VAR = 0.1
_B_VAR = 0.1
_GOLDEN_CONJUGATE = (math.sqrt(5) + 1) / 2 - 1


def list_presets() -> list[str]:
    return sorted(PRESETS.keys())


def get_preset(name: str | None) -> ColorRamp:
    if not name:
        return ColorRamp.from_colors(*PRESETS[DEFAULT_PRESET_NAME])
    if name not in PRESETS:
        raise ConfigurationError(f"unknown preset {name!r}; known: {', '.join(list_presets())}")
    return ColorRamp.from_colors(*PRESETS[name])


def _palette(count: int, increment: float, rng: random.Random) -> list[int]:
    if count < 1:
        raise ConfigurationError(f"palette size must be >= 1, got {count}")
    h = rng.random()
    s = rng.uniform(_S_MIN, 1.0)
    b = rng.uniform(_B_MIN, 1.0)
    out: list[int] = []
    for _ in range(count):
        sat = min(1.0, max(_S_MIN, s + rng.uniform(-_S_VAR, _S_VAR)))
        bri = min(1.0, max(_B_MIN, b + rng.uniform(-_B_VAR, _B_VAR)))
        r, g, bl = colorsys.hsv_to_rgb(h, sat, bri)
        out.append(to_packed_color((round(r * 255), round(g * 255), round(bl * 255))))
        h = (h + increment) % 1.0
    return out


def complementary(seed: int | None = None) -> list[int]:
    return _palette(2, 1 / 2, random.Random(seed))


def triadic(seed: int | None = None) -> list[int]:
    return _palette(3, 1 / 3, random.Random(seed))


def tetradic(seed: int | None = None) -> list[int]:
    return _palette(4, 1 / 4, random.Random(seed))


def golden(count: int, seed: int | None = None) -> list[int]:
    """``count`` hues spread by the golden ratio conjugate."""
    return _palette(count, _GOLDEN_CONJUGATE, random.Random(seed))
