"""Procedural gradient engine: ramps, noise, shapes, and strip-parallel rendering."""

from .buffer import PixelBuffer
from .colors import from_packed_color, parse_hex, to_hex, to_packed_color
from .models import ColorStop, FractalType, NoiseConfig, NoiseType, RenderRegion
from .noise import NoiseField
from .orchestrator import GradientRenderer, partition_strips, render
from .posterize import quantize
from .presets import DEFAULT_PRESET_NAME, get_preset, list_presets
from .ramp import ColorRamp, Easing
from .shapes import (
    Conic,
    Cross,
    Diamond,
    FractalNoise,
    Hourglass,
    Linear,
    LinearPoints,
    Noise,
    Polygon,
    Radial,
    ShapeKernel,
    Spiral,
    Spotlight,
    UniformNoise,
    prepare,
    progress,
)

__all__ = [
    "ColorRamp",
    "ColorStop",
    "Conic",
    "Cross",
    "DEFAULT_PRESET_NAME",
    "Diamond",
    "Easing",
    "FractalNoise",
    "FractalType",
    "GradientRenderer",
    "Hourglass",
    "Linear",
    "LinearPoints",
    "Noise",
    "NoiseConfig",
    "NoiseField",
    "NoiseType",
    "PixelBuffer",
    "Polygon",
    "Radial",
    "RenderRegion",
    "ShapeKernel",
    "Spiral",
    "Spotlight",
    "UniformNoise",
    "from_packed_color",
    "get_preset",
    "list_presets",
    "parse_hex",
    "partition_strips",
    "prepare",
    "progress",
    "quantize",
    "render",
    "to_hex",
    "to_packed_color",
]
