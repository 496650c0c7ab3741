"""Shape parameters and the progress functions that evaluate them.

Each shape family is a frozen dataclass; :func:`prepare` turns one into a
:class:`ShapeKernel` for a concrete render region, precomputing every
per-render constant once. Kernels are pure numpy functions of region-local
pixel coordinates (``x`` in ``[0, width]``, ``y`` in ``[0, height]``, y down,
angles clockwise) and are shared read-only by all strip workers. The renderer
samples each pixel at its center, ``(col + 0.5, row + 0.5)``.

Parameter validation happens at construction, so a degenerate shape never
reaches the pixel loop.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Union

import numpy as np

from prismatic_core.errors import ConfigurationError

from .angles import TWO_PI, fold_unit, wrap_angle, wrap_unit
from .models import FractalType, NoiseConfig, RenderRegion, is_count
from .noise import NoiseField

Point = tuple[float, float]

# Stand-in for an unbounded ratio; anything this large clamps to the last color.
_RATIO_CAP = 1e6


def _finite(owner: str, **values: float | None) -> None:
    for name, value in values.items():
        if value is not None and not math.isfinite(value):
            raise ConfigurationError(f"{owner}.{name} must be finite, got {value!r}")


def _positive(owner: str, **values: float) -> None:
    _finite(owner, **values)
    for name, value in values.items():
        if value <= 0:
            raise ConfigurationError(f"{owner}.{name} must be > 0, got {value!r}")


def _point(owner: str, name: str, value: Point | None) -> Point | None:
    if value is None:
        return None
    x, y = (float(v) for v in value)
    _finite(owner, **{f"{name}_x": x, f"{name}_y": y})
    return x, y


@dataclass(frozen=True)
class Linear:
    """Parallel bands along ``angle``; ``length`` < 1 squashes, > 1 stretches."""

    angle: float = 0.0
    center: Point | None = None
    length: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "angle", wrap_angle(float(self.angle)))
        object.__setattr__(self, "center", _point("Linear", "center", self.center))
        _positive("Linear", length=self.length)


@dataclass(frozen=True)
class LinearPoints:
    """Linear gradient whose first and last colors sit on two control points."""

    start: Point
    end: Point

    def __post_init__(self) -> None:
        start = _point("LinearPoints", "start", self.start)
        end = _point("LinearPoints", "end", self.end)
        if start == end:
            raise ConfigurationError("LinearPoints start and end must differ")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)


@dataclass(frozen=True)
class Radial:
    center: Point | None = None
    zoom: float = 1.0
    inner_radius: float = 0.0
    outer_radius: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _point("Radial", "center", self.center))
        _positive("Radial", zoom=self.zoom)
        _finite("Radial", inner_radius=self.inner_radius, outer_radius=self.outer_radius)
        if self.inner_radius < 0:
            raise ConfigurationError(f"Radial.inner_radius must be >= 0, got {self.inner_radius!r}")
        if self.outer_radius is not None and self.outer_radius * self.zoom <= self.inner_radius:
            raise ConfigurationError(
                f"Radial outer radius ({self.outer_radius * self.zoom}) must exceed inner radius ({self.inner_radius})"
            )

    @classmethod
    def from_points(cls, start: Point, end: Point, zoom: float = 1.0) -> "Radial":
        """Radial gradient centered on ``start`` whose last color is reached at ``end``."""
        start = _point("Radial", "start", start)
        end = _point("Radial", "end", end)
        radius = math.hypot(end[0] - start[0], end[1] - start[1])
        if radius == 0:
            raise ConfigurationError("Radial start and end points must differ")
        return cls(center=start, zoom=zoom, outer_radius=radius)


@dataclass(frozen=True)
class Conic:
    center: Point | None = None
    angle: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "angle", wrap_angle(float(self.angle)))
        object.__setattr__(self, "center", _point("Conic", "center", self.center))


@dataclass(frozen=True)
class Spiral:
    center: Point | None = None
    angle: float = 0.0
    wind_count: float = 1.0
    curviness: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "angle", wrap_angle(float(self.angle)))
        object.__setattr__(self, "center", _point("Spiral", "center", self.center))
        _finite("Spiral", wind_count=self.wind_count)
        _positive("Spiral", curviness=self.curviness)


@dataclass(frozen=True)
class Polygon:
    sides: int
    center: Point | None = None
    angle: float = 0.0
    zoom: float = 1.0

    def __post_init__(self) -> None:
        if not is_count(self.sides) or self.sides < 3:
            raise ConfigurationError(f"Polygon needs at least 3 sides, got {self.sides!r}")
        object.__setattr__(self, "sides", int(self.sides))
        object.__setattr__(self, "angle", wrap_angle(float(self.angle)))
        object.__setattr__(self, "center", _point("Polygon", "center", self.center))
        _positive("Polygon", zoom=self.zoom)


@dataclass(frozen=True)
class Cross:
    """Bands by the smaller axis offset: an upright "+" at ``angle`` 0.

    The smaller offset keeps both arms at progress 0; a larger-offset metric
    would draw nested squares instead of a cross.
    """

    center: Point | None = None
    angle: float = 0.0
    zoom: float = 1.0
    repeats: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "angle", wrap_angle(float(self.angle)))
        object.__setattr__(self, "center", _point(type(self).__name__, "center", self.center))
        _positive(type(self).__name__, zoom=self.zoom, repeats=self.repeats)


@dataclass(frozen=True)
class Diamond(Cross):
    """Bands by manhattan distance from the center."""


@dataclass(frozen=True)
class Noise:
    noise: NoiseConfig = field(default_factory=NoiseConfig)
    scale_x: float = 0.01
    scale_y: float = 0.01
    angle: float = 0.0
    center: Point | None = None

    def __post_init__(self) -> None:
        owner = type(self).__name__
        object.__setattr__(self, "angle", wrap_angle(float(self.angle)))
        object.__setattr__(self, "center", _point(owner, "center", self.center))
        _finite(owner, scale_x=self.scale_x, scale_y=self.scale_y)


@dataclass(frozen=True)
class UniformNoise(Noise):
    """Noise equalized so progress values spread evenly over ``[0, 1]``."""


@dataclass(frozen=True)
class FractalNoise(Noise):
    noise: NoiseConfig = field(default_factory=lambda: NoiseConfig(fractal_type=FractalType.FBM))

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.noise.fractal_type is FractalType.NONE:
            raise ConfigurationError("FractalNoise needs a fractal type other than NONE")


@dataclass(frozen=True)
class Spotlight:
    """Two soft radial falloffs blended by proximity to each focus."""

    focus_a: Point
    focus_b: Point
    radius_a: float | None = None
    radius_b: float | None = None

    def __post_init__(self) -> None:
        a = _point("Spotlight", "focus_a", self.focus_a)
        b = _point("Spotlight", "focus_b", self.focus_b)
        if a == b:
            raise ConfigurationError("Spotlight focal points must be distinct")
        object.__setattr__(self, "focus_a", a)
        object.__setattr__(self, "focus_b", b)
        separation = math.hypot(b[0] - a[0], b[1] - a[1])
        for name in ("radius_a", "radius_b"):
            if getattr(self, name) is None:
                object.__setattr__(self, name, separation)
        _positive("Spotlight", radius_a=self.radius_a, radius_b=self.radius_b)


@dataclass(frozen=True)
class Hourglass:
    center: Point | None = None
    angle: float = 0.0
    zoom: float = 1.0
    pinch: float = 0.0
    roundness: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "angle", wrap_angle(float(self.angle)))
        object.__setattr__(self, "center", _point("Hourglass", "center", self.center))
        _positive("Hourglass", zoom=self.zoom)
        _finite("Hourglass", pinch=self.pinch, roundness=self.roundness)
        if self.roundness < 0:
            raise ConfigurationError(f"Hourglass.roundness must be >= 0, got {self.roundness!r}")


ShapeParams = Union[
    Linear,
    LinearPoints,
    Radial,
    Conic,
    Spiral,
    Polygon,
    Cross,
    Diamond,
    Noise,
    UniformNoise,
    FractalNoise,
    Spotlight,
    Hourglass,
]

Evaluate = Callable[[np.ndarray, np.ndarray], np.ndarray]


@dataclass(frozen=True)
class ShapeKernel:
    """A shape bound to a region. ``periodic`` kernels wrap instead of clamping."""

    name: str
    evaluate: Evaluate
    periodic: bool = False

    def __call__(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        return self.evaluate(x, y)


def _center(center: Point | None, region: RenderRegion) -> Point:
    return center if center is not None else region.midpoint


def _half_diagonal(region: RenderRegion) -> float:
    return max(math.hypot(region.width, region.height) / 2.0, 0.5)


def _half_extent(region: RenderRegion, zoom: float) -> float:
    return max(region.width, region.height, 1) / 2.0 * zoom


def _rotate(x, y, cx, cy, angle):
    """Offsets from the center expressed along the axes rotated by ``angle``."""
    cos, sin = math.cos(angle), math.sin(angle)
    dx = x - cx
    dy = y - cy
    return dx * cos + dy * sin, dy * cos - dx * sin


def _prepare_linear(shape: Linear, region: RenderRegion) -> ShapeKernel:
    cx, cy = _center(shape.center, region)
    cos, sin = math.cos(shape.angle), math.sin(shape.angle)
    extent = (region.width * abs(cos) + region.height * abs(sin)) * shape.length
    if extent <= 0:
        raise ConfigurationError("Linear gradient has no extent inside this region")

    def evaluate(x, y):
        return ((x - cx) * cos + (y - cy) * sin) / extent + 0.5

    return ShapeKernel("linear", evaluate)


def _prepare_linear_points(shape: LinearPoints, region: RenderRegion) -> ShapeKernel:
    sx, sy = shape.start
    dx = shape.end[0] - sx
    dy = shape.end[1] - sy
    inv_len_sq = 1.0 / (dx * dx + dy * dy)

    def evaluate(x, y):
        return ((x - sx) * dx + (y - sy) * dy) * inv_len_sq

    return ShapeKernel("linear", evaluate)


def _prepare_radial(shape: Radial, region: RenderRegion) -> ShapeKernel:
    cx, cy = _center(shape.center, region)
    outer = (shape.outer_radius if shape.outer_radius is not None else _half_diagonal(region)) * shape.zoom
    inner = shape.inner_radius
    if outer <= inner:
        raise ConfigurationError(f"Radial outer radius ({outer}) must exceed inner radius ({inner})")
    span = outer - inner

    def evaluate(x, y):
        return (np.hypot(x - cx, y - cy) - inner) / span

    return ShapeKernel("radial", evaluate)


def _conic_turns(x, y, cx, cy, angle):
    return (np.arctan2(y - cy, x - cx) - angle) / TWO_PI


def _prepare_conic(shape: Conic, region: RenderRegion) -> ShapeKernel:
    cx, cy = _center(shape.center, region)

    def evaluate(x, y):
        return wrap_unit(_conic_turns(x, y, cx, cy, shape.angle))

    return ShapeKernel("conic", evaluate, periodic=True)


def _prepare_spiral(shape: Spiral, region: RenderRegion) -> ShapeKernel:
    cx, cy = _center(shape.center, region)
    reach = _half_diagonal(region)
    exponent = 1.0 / shape.curviness

    def evaluate(x, y):
        radius = np.power(np.hypot(x - cx, y - cy) / reach, exponent)
        return wrap_unit(_conic_turns(x, y, cx, cy, shape.angle) + radius * shape.wind_count)

    return ShapeKernel("spiral", evaluate, periodic=True)


def _prepare_polygon(shape: Polygon, region: RenderRegion) -> ShapeKernel:
    cx, cy = _center(shape.center, region)
    segment = TWO_PI / shape.sides
    apothem = _half_extent(region, shape.zoom)

    def evaluate(x, y):
        dx = x - cx
        dy = y - cy
        # Angle from the nearest edge normal; the boundary sits at apothem / cos(phi).
        phi = np.mod(np.arctan2(dy, dx) - shape.angle, segment) - segment / 2.0
        return np.hypot(dx, dy) * np.cos(phi) / apothem

    return ShapeKernel("polygon", evaluate)


def _banded(name: str, shape: Cross, region: RenderRegion, metric) -> ShapeKernel:
    cx, cy = _center(shape.center, region)
    reach = _half_extent(region, shape.zoom)
    repeats = shape.repeats

    def evaluate(x, y):
        u, v = _rotate(x, y, cx, cy, shape.angle)
        raw = metric(np.abs(u), np.abs(v)) / reach
        if repeats == 1.0:
            return raw
        return fold_unit(raw * repeats)

    return ShapeKernel(name, evaluate)


def _prepare_cross(shape: Cross, region: RenderRegion) -> ShapeKernel:
    return _banded("cross", shape, region, np.minimum)


def _prepare_diamond(shape: Diamond, region: RenderRegion) -> ShapeKernel:
    return _banded("diamond", shape, region, np.add)


def _noise_kernel(name: str, shape: Noise, region: RenderRegion, sampler) -> ShapeKernel:
    cx, cy = _center(shape.center, region)
    cos, sin = math.cos(shape.angle), math.sin(shape.angle)

    def evaluate(x, y):
        dx = x - cx
        dy = y - cy
        rx = dx * cos - dy * sin + cx
        ry = dx * sin + dy * cos + cy
        return sampler(rx * shape.scale_x, ry * shape.scale_y)

    return ShapeKernel(name, evaluate)


def _prepare_noise(shape: Noise, region: RenderRegion) -> ShapeKernel:
    return _noise_kernel("noise", shape, region, NoiseField(shape.noise).sample_normalized)


def _prepare_fractal_noise(shape: FractalNoise, region: RenderRegion) -> ShapeKernel:
    return _noise_kernel("fractal_noise", shape, region, NoiseField(shape.noise).sample_normalized)


def _prepare_uniform_noise(shape: UniformNoise, region: RenderRegion) -> ShapeKernel:
    field_ = NoiseField(shape.noise)
    field_.equalization_table()
    return _noise_kernel("uniform_noise", shape, region, field_.sample_uniform)


def _prepare_spotlight(shape: Spotlight, region: RenderRegion) -> ShapeKernel:
    ax, ay = shape.focus_a
    bx, by = shape.focus_b
    ra, rb = shape.radius_a, shape.radius_b

    def evaluate(x, y):
        da = np.hypot(x - ax, y - ay)
        db = np.hypot(x - bx, y - by)
        # da + db >= |a - b| > 0, so the weights are always defined.
        total = da + db
        falloff_a = np.minimum(da / ra, 1.0)
        falloff_b = np.minimum(db / rb, 1.0)
        return (db * falloff_a + da * falloff_b) / total

    return ShapeKernel("spotlight", evaluate)


def _prepare_hourglass(shape: Hourglass, region: RenderRegion) -> ShapeKernel:
    cx, cy = _center(shape.center, region)
    reach = _half_extent(region, shape.zoom)
    pinch_sq = shape.pinch * shape.pinch
    roundness = shape.roundness
    norm = math.sqrt(1.0 + roundness)

    def evaluate(x, y):
        u, v = _rotate(x, y, cx, cy, shape.angle)
        au = np.abs(u)
        av = np.abs(v)
        diamond = (au + av) / reach
        # Neck narrows toward the centerline (u == 0); across it (v == 0) the ratio is unbounded.
        ratio = np.divide(au, av, out=np.full(au.shape, _RATIO_CAP), where=av > 0)
        ratio = np.where((au == 0) & (av == 0), 0.0, np.minimum(ratio, _RATIO_CAP))
        return np.sqrt(diamond * diamond + pinch_sq) * np.sqrt(ratio * ratio + roundness) / norm

    return ShapeKernel("hourglass", evaluate)


_PREPARERS: dict[type, Callable[[ShapeParams, RenderRegion], ShapeKernel]] = {
    Linear: _prepare_linear,
    LinearPoints: _prepare_linear_points,
    Radial: _prepare_radial,
    Conic: _prepare_conic,
    Spiral: _prepare_spiral,
    Polygon: _prepare_polygon,
    Cross: _prepare_cross,
    Diamond: _prepare_diamond,
    Noise: _prepare_noise,
    UniformNoise: _prepare_uniform_noise,
    FractalNoise: _prepare_fractal_noise,
    Spotlight: _prepare_spotlight,
    Hourglass: _prepare_hourglass,
}


def prepare(shape: ShapeParams, region: RenderRegion) -> ShapeKernel:
    try:
        preparer = _PREPARERS[type(shape)]
    except KeyError:
        raise ConfigurationError(f"unsupported shape {type(shape).__name__}") from None
    return preparer(shape, region)


def progress(x, y, shape: ShapeParams, region: RenderRegion):
    """Raw (unclamped) progress of ``shape`` at region-local ``(x, y)``."""
    xa = np.asarray(x, dtype=np.float64)
    ya = np.asarray(y, dtype=np.float64)
    scalar = xa.ndim == 0 and ya.ndim == 0
    xa, ya = (np.array(a, dtype=np.float64, ndmin=1) for a in np.broadcast_arrays(xa, ya))
    values = np.asarray(prepare(shape, region)(xa, ya), dtype=np.float64)
    return float(values.reshape(-1)[0]) if scalar else values
