"""Strip-parallel gradient rendering into a pixel buffer region."""

from __future__ import annotations

import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path

import numpy as np

from prismatic_core.config import AppConfig, validate_config
from prismatic_core.errors import BoundsError, ConfigurationError
from prismatic_core.logging_setup import configure_logging, get_logger
from prismatic_core.performance import (
    BudgetStatus,
    PerformanceController,
    PerformanceTargets,
    RenderStats,
    default_strip_count,
)

from .angles import wrap_unit
from .buffer import PixelBuffer
from .models import FractalType, NoiseConfig, NoiseType, RenderRegion, is_count
from .posterize import quantize, validate_levels
from .ramp import ColorRamp
from . import shapes
from .shapes import ShapeKernel, ShapeParams

logger = get_logger("render")

# Interleaved gradient noise coefficients.
_IGN_X = 0.06711056
_IGN_Y = 0.00583715
_IGN_Z = 52.9829189


def validate_strip_count(count: int) -> int:
    if not is_count(count) or count <= 0:
        raise ConfigurationError(f"strip count must be a positive integer, got {count!r}")
    return int(count)


def validate_dither(strength: float) -> float:
    strength = float(strength)
    if not math.isfinite(strength) or strength < 0:
        raise ConfigurationError(f"dither strength must be a finite value >= 0, got {strength!r}")
    return strength


def partition_strips(height: int, count: int) -> list[tuple[int, int]]:
    """Split ``height`` rows into contiguous ``[start, stop)`` bands.

    ``count`` is clamped to ``height`` so no band is empty; the last band
    absorbs the remainder of the integer division.
    """
    count = validate_strip_count(count)
    if height <= 0:
        return []
    count = min(count, height)
    rows = height // count
    bands = [(i * rows, (i + 1) * rows) for i in range(count)]
    bands[-1] = (bands[-1][0], height)
    return bands


def _dither(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    inner = x * _IGN_X + y * _IGN_Y
    return np.mod(_IGN_Z * (inner - np.floor(inner)), 1.0) - 0.5


def _render_strip(
    target: np.ndarray,
    rows: tuple[int, int],
    width: int,
    kernel: ShapeKernel,
    ramp: ColorRamp,
    levels: int | None,
    dither: float,
) -> None:
    # Sample at pixel centers.
    ys = np.arange(rows[0], rows[1], dtype=np.float64) + 0.5
    xs = np.arange(width, dtype=np.float64) + 0.5
    x, y = np.meshgrid(xs, ys)

    t = np.broadcast_to(np.asarray(kernel(x, y), dtype=np.float64), x.shape)
    if levels is None and dither:
        t = t + _dither(x, y) * dither
    t = wrap_unit(t) if kernel.periodic else np.clip(t, 0.0, 1.0)
    if levels is not None:
        t = quantize(t, levels)
    target[...] = ramp.colors_at(t)


def render(
    buffer: PixelBuffer,
    region: RenderRegion,
    ramp: ColorRamp,
    shape: ShapeParams,
    strip_count: int | None = None,
    posterize_levels: int | None = None,
    dither_strength: float = 0.0,
    executor: ThreadPoolExecutor | None = None,
) -> RenderStats:
    """Fill ``region`` of ``buffer`` with ``shape`` colored through ``ramp``.

    Every parameter is validated and the shape is bound to the region before
    the first pixel is written. Pixels outside the region are never touched.
    Strips run concurrently, each writing its own row slice; if any strip
    fails, the first failure is raised once all strips have settled.
    """
    strips = validate_strip_count(default_strip_count() if strip_count is None else strip_count)
    levels = None if posterize_levels is None else validate_levels(posterize_levels)
    dither = validate_dither(dither_strength)
    if (region.buffer_width, region.buffer_height) != (buffer.width, buffer.height):
        raise BoundsError(
            f"region targets a {region.buffer_width}x{region.buffer_height} buffer, "
            f"got {buffer.width}x{buffer.height}"
        )

    if region.pixel_count == 0:
        return RenderStats(pixels=0, strips=0, duration_s=0.0)

    kernel = shapes.prepare(shape, region)
    bands = partition_strips(region.height, strips)
    x0, x1 = region.offset_x, region.offset_x + region.width
    views = [buffer.row_view(region.offset_y + a, region.offset_y + b, x0, x1) for a, b in bands]

    logger.debug(
        "render %s %dx%d at (%d, %d) in %d strips",
        kernel.name,
        region.width,
        region.height,
        region.offset_x,
        region.offset_y,
        len(bands),
        extra={"event": "render_start"},
    )
    start = time.perf_counter()

    if len(bands) == 1:
        _render_strip(views[0], bands[0], region.width, kernel, ramp, levels, dither)
    elif executor is not None:
        _run_strips(executor, views, bands, region.width, kernel, ramp, levels, dither)
    else:
        with ThreadPoolExecutor(max_workers=len(bands), thread_name_prefix="prismatic-strip") as pool:
            _run_strips(pool, views, bands, region.width, kernel, ramp, levels, dither)

    stats = RenderStats(pixels=region.pixel_count, strips=len(bands), duration_s=time.perf_counter() - start)
    logger.debug(
        "render %s done in %.1f ms (%.2f MP/s)",
        kernel.name,
        stats.duration_s * 1000.0,
        stats.megapixels_per_s,
        extra={"event": "render_done"},
    )
    return stats


def _run_strips(executor, views, bands, width, kernel, ramp, levels, dither) -> None:
    futures: list[Future] = [
        executor.submit(_render_strip, view, rows, width, kernel, ramp, levels, dither)
        for view, rows in zip(views, bands)
    ]
    wait(futures)
    failures = [(rows, f.exception()) for rows, f in zip(bands, futures) if f.exception() is not None]
    for rows, exc in failures:
        logger.error(
            "strip rows [%d, %d) failed",
            rows[0],
            rows[1],
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"event": "strip_failed"},
        )
    if failures:
        raise failures[0][1]


class GradientRenderer:
    """Stateful front end: a render target, strip settings, and one method per shape.

    Settings apply to every subsequent render. The worker pool is created
    lazily and released by :meth:`close` (or by leaving a ``with`` block).
    With a :class:`PerformanceController` attached, every render is sampled
    against its budget; when no strip count was given explicitly the
    recommended count is adopted for the next render.
    """

    def __init__(
        self,
        buffer: PixelBuffer | None = None,
        strip_count: int | None = None,
        posterize_levels: int | None = None,
        dither_strength: float = 0.0,
        performance: PerformanceController | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._buffer: PixelBuffer | None = None
        self._region: RenderRegion | None = None
        self._strip_count = default_strip_count()
        self._levels: int | None = None
        self._dither = 0.0
        self._executor: ThreadPoolExecutor | None = None
        self._last_stats: RenderStats | None = None
        self._last_budget: BudgetStatus | None = None
        self._performance = performance
        self._auto_strips = strip_count is None
        self.noise_defaults = NoiseConfig()

        if buffer is not None:
            self.set_render_target(buffer)
        if strip_count is not None:
            self.set_strip_count(strip_count)
        if posterize_levels is not None:
            self.posterize(posterize_levels)
        self.set_dither_strength(dither_strength)

    @classmethod
    def from_config(
        cls,
        cfg: AppConfig,
        buffer: PixelBuffer | None = None,
        log_path: Path | None = None,
    ) -> "GradientRenderer":
        """Renderer with render, noise, logging and performance settings applied."""
        validate_config(cfg)
        configure_logging(
            level=cfg.logging.level,
            keep_files=cfg.logging.keep_files,
            console=cfg.logging.console,
            log_path=log_path,
            json_lines=cfg.logging.json,
        )
        perf = PerformanceController(
            PerformanceTargets(
                render_ms_max=cfg.performance.render_ms_max,
                cpu_percent_max=cfg.performance.cpu_percent_max,
                rss_mb_max=cfg.performance.rss_mb_max,
            )
        )
        renderer = cls(
            buffer=buffer,
            strip_count=cfg.render.strip_count,
            posterize_levels=cfg.render.posterize_levels,
            dither_strength=cfg.render.dither_strength,
            performance=perf,
        )
        renderer.noise_defaults = NoiseConfig(
            seed=int(cfg.noise.seed),
            octaves=int(cfg.noise.octaves),
            lacunarity=float(cfg.noise.lacunarity),
            gain=float(cfg.noise.gain),
        )
        return renderer

    def __enter__(self) -> "GradientRenderer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    @property
    def buffer(self) -> PixelBuffer | None:
        return self._buffer

    @property
    def region(self) -> RenderRegion | None:
        return self._region

    @property
    def strip_count(self) -> int:
        return self._strip_count

    @property
    def posterize_levels(self) -> int | None:
        return self._levels

    @property
    def dither_strength(self) -> float:
        return self._dither

    @property
    def last_stats(self) -> RenderStats | None:
        return self._last_stats

    @property
    def last_budget(self) -> BudgetStatus | None:
        return self._last_budget

    def set_render_target(
        self,
        buffer: PixelBuffer,
        offset_x: int = 0,
        offset_y: int = 0,
        width: int | None = None,
        height: int | None = None,
    ) -> RenderRegion:
        region = RenderRegion(buffer.width, buffer.height, offset_x, offset_y, width, height)
        with self._lock:
            self._buffer = buffer
            self._region = region
        return region

    def set_strip_count(self, count: int) -> None:
        count = validate_strip_count(count)
        with self._lock:
            self._auto_strips = False
            self._resize(count)

    def _resize(self, count: int) -> None:
        with self._lock:
            if count != self._strip_count and self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
            self._strip_count = count

    def posterize(self, levels: int) -> None:
        levels = validate_levels(levels)
        with self._lock:
            self._levels = levels

    def clear_posterization(self) -> None:
        with self._lock:
            self._levels = None

    def set_dither_strength(self, strength: float) -> None:
        strength = validate_dither(strength)
        with self._lock:
            self._dither = strength

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._strip_count, thread_name_prefix="prismatic-strip")
        return self._executor

    def render(self, ramp: ColorRamp, shape: ShapeParams) -> RenderStats:
        with self._lock:
            if self._buffer is None or self._region is None:
                raise ConfigurationError("no render target set; call set_render_target() first")
            stats = render(
                self._buffer,
                self._region,
                ramp,
                shape,
                strip_count=self._strip_count,
                posterize_levels=self._levels,
                dither_strength=self._dither,
                executor=self._pool() if self._strip_count > 1 else None,
            )
            self._last_stats = stats
            if self._performance is not None:
                self.apply_budget(self._performance.sample(stats))
            return stats

    def apply_budget(self, budget: BudgetStatus) -> None:
        with self._lock:
            self._last_budget = budget
            if budget.warning:
                logger.warning(
                    "render budget %s: %.1f ms, cpu %.0f%%, rss %.0f MB",
                    budget.warning,
                    budget.render_ms,
                    budget.cpu_percent,
                    budget.rss_mb,
                    extra={"event": "render_budget"},
                )
            if self._auto_strips and budget.recommended_strips != self._strip_count:
                self._resize(budget.recommended_strips)

    def _noise_config(self, noise: NoiseConfig | None, **overrides) -> NoiseConfig:
        if noise is not None:
            return noise
        base = self.noise_defaults
        values = {
            "seed": base.seed,
            "octaves": base.octaves,
            "lacunarity": base.lacunarity,
            "gain": base.gain,
        }
        values.update(overrides)
        return NoiseConfig(**values)

    def linear_gradient(self, ramp: ColorRamp, angle: float = 0.0, center=None, length: float = 1.0) -> RenderStats:
        return self.render(ramp, shapes.Linear(angle=angle, center=center, length=length))

    def linear_gradient_points(self, ramp: ColorRamp, start, end) -> RenderStats:
        return self.render(ramp, shapes.LinearPoints(start=start, end=end))

    def radial_gradient(
        self, ramp: ColorRamp, center=None, zoom: float = 1.0, inner_radius: float = 0.0, outer_radius=None
    ) -> RenderStats:
        return self.render(
            ramp, shapes.Radial(center=center, zoom=zoom, inner_radius=inner_radius, outer_radius=outer_radius)
        )

    def radial_gradient_points(self, ramp: ColorRamp, start, end, zoom: float = 1.0) -> RenderStats:
        return self.render(ramp, shapes.Radial.from_points(start, end, zoom=zoom))

    def conic_gradient(self, ramp: ColorRamp, angle: float = 0.0, center=None) -> RenderStats:
        return self.render(ramp, shapes.Conic(center=center, angle=angle))

    def spiral_gradient(
        self, ramp: ColorRamp, angle: float = 0.0, wind_count: float = 1.0, curviness: float = 1.0, center=None
    ) -> RenderStats:
        return self.render(
            ramp, shapes.Spiral(center=center, angle=angle, wind_count=wind_count, curviness=curviness)
        )

    def polygon_gradient(
        self, ramp: ColorRamp, sides: int, angle: float = 0.0, zoom: float = 1.0, center=None
    ) -> RenderStats:
        return self.render(ramp, shapes.Polygon(sides=sides, center=center, angle=angle, zoom=zoom))

    def cross_gradient(
        self, ramp: ColorRamp, angle: float = 0.0, zoom: float = 1.0, repeats: float = 1.0, center=None
    ) -> RenderStats:
        return self.render(ramp, shapes.Cross(center=center, angle=angle, zoom=zoom, repeats=repeats))

    def diamond_gradient(
        self, ramp: ColorRamp, angle: float = 0.0, zoom: float = 1.0, repeats: float = 1.0, center=None
    ) -> RenderStats:
        return self.render(ramp, shapes.Diamond(center=center, angle=angle, zoom=zoom, repeats=repeats))

    def noise_gradient(
        self,
        ramp: ColorRamp,
        noise_type: NoiseType | str = NoiseType.SIMPLEX,
        scale_x: float = 0.01,
        scale_y: float = 0.01,
        angle: float = 0.0,
        noise: NoiseConfig | None = None,
    ) -> RenderStats:
        config = self._noise_config(noise, noise_type=noise_type)
        return self.render(ramp, shapes.Noise(noise=config, scale_x=scale_x, scale_y=scale_y, angle=angle))

    def uniform_noise_gradient(
        self,
        ramp: ColorRamp,
        noise_type: NoiseType | str = NoiseType.SIMPLEX,
        scale_x: float = 0.01,
        scale_y: float = 0.01,
        angle: float = 0.0,
        noise: NoiseConfig | None = None,
    ) -> RenderStats:
        config = self._noise_config(noise, noise_type=noise_type)
        return self.render(ramp, shapes.UniformNoise(noise=config, scale_x=scale_x, scale_y=scale_y, angle=angle))

    def fractal_noise_gradient(
        self,
        ramp: ColorRamp,
        fractal_type: FractalType | str = FractalType.FBM,
        noise_type: NoiseType | str = NoiseType.SIMPLEX,
        scale_x: float = 0.01,
        scale_y: float = 0.01,
        angle: float = 0.0,
        noise: NoiseConfig | None = None,
    ) -> RenderStats:
        config = self._noise_config(noise, noise_type=noise_type, fractal_type=fractal_type)
        return self.render(ramp, shapes.FractalNoise(noise=config, scale_x=scale_x, scale_y=scale_y, angle=angle))

    def spotlight_gradient(self, ramp: ColorRamp, focus_a, focus_b, radius_a=None, radius_b=None) -> RenderStats:
        return self.render(
            ramp, shapes.Spotlight(focus_a=focus_a, focus_b=focus_b, radius_a=radius_a, radius_b=radius_b)
        )

    def hourglass_gradient(
        self,
        ramp: ColorRamp,
        angle: float = 0.0,
        zoom: float = 1.0,
        pinch: float = 0.0,
        roundness: float = 1.0,
        center=None,
    ) -> RenderStats:
        return self.render(
            ramp, shapes.Hourglass(center=center, angle=angle, zoom=zoom, pinch=pinch, roundness=roundness)
        )
