"""Deterministic 2D procedural noise with optional fractal layering.

Lattice hashing follows the prime-multiply scheme popularised by FastNoise
Lite, evaluated with numpy over whole coordinate grids. All arithmetic on
hashes is done in ``uint32`` so results wrap exactly like 32-bit integers
and are identical across platforms for a given seed.
"""

from __future__ import annotations

import math
import threading

import numpy as np

from .models import FractalType, NoiseConfig, NoiseType

PRIME_X = 501125321
PRIME_Y = 1136930381
_PX = np.uint32(PRIME_X)
_PY = np.uint32(PRIME_Y)
_HASH_MULT = np.uint32(0x27D4EB2D)

_SQRT3 = math.sqrt(3.0)
F2 = 0.5 * (_SQRT3 - 1.0)
G2 = (3.0 - _SQRT3) / 6.0

_SIMPLEX_SCALE = 99.83685446303647
_PERLIN_SCALE = 1.4247691104677813
_CELLULAR_JITTER = 0.43701595

_GRAD_ANGLES = math.pi / 24 + np.arange(24) * (math.pi / 12)
_GRAD_X = np.resize(np.cos(_GRAD_ANGLES), 128)
_GRAD_Y = np.resize(np.sin(_GRAD_ANGLES), 128)

_CELL_ANGLES = np.arange(256) * (math.pi * (3.0 - math.sqrt(5.0)))
_CELL_X = np.cos(_CELL_ANGLES)
_CELL_Y = np.sin(_CELL_ANGLES)

# Histogram-equalization table: quantiles of the field sampled on a fixed grid.
_EQ_GRID = 128
_EQ_SPAN = 96.0
_EQ_LEVELS = 257
_GOLDEN = (math.sqrt(5.0) - 1.0) / 2.0


def _primed(coord: np.ndarray, prime: int) -> np.ndarray:
    return ((coord.astype(np.int64) * prime) & 0xFFFFFFFF).astype(np.uint32)


def _seed(seed: int) -> np.uint32:
    return np.uint32(seed & 0xFFFFFFFF)


def _hash(seed: np.uint32, xp: np.ndarray, yp: np.ndarray) -> np.ndarray:
    return (seed ^ xp ^ yp) * _HASH_MULT


def _grad_coord(seed, xp, yp, xd, yd) -> np.ndarray:
    h = _hash(seed, xp, yp)
    idx = ((h ^ (h >> 15)) & 127).astype(np.intp)
    return xd * _GRAD_X[idx] + yd * _GRAD_Y[idx]


def _val_coord(seed, xp, yp) -> np.ndarray:
    h = _hash(seed, xp, yp)
    h = h * h
    h = h ^ (h << 19)
    return h.view(np.int32) * (1.0 / 2147483648.0)


def _lerp(a, b, t):
    return a + t * (b - a)


def _hermite(t):
    return t * t * (3.0 - 2.0 * t)


def _quintic(t):
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _ping_pong(t: np.ndarray) -> np.ndarray:
    t = t - np.trunc(t * 0.5) * 2.0
    return np.where(t < 1.0, t, 2.0 - t)


def _perlin(seed, x, y):
    x0 = np.floor(x)
    y0 = np.floor(y)
    xd0 = x - x0
    yd0 = y - y0
    xd1 = xd0 - 1.0
    yd1 = yd0 - 1.0
    xs = _quintic(xd0)
    ys = _quintic(yd0)

    xp0 = _primed(x0, PRIME_X)
    yp0 = _primed(y0, PRIME_Y)
    xp1 = xp0 + _PX
    yp1 = yp0 + _PY

    xf0 = _lerp(_grad_coord(seed, xp0, yp0, xd0, yd0), _grad_coord(seed, xp1, yp0, xd1, yd0), xs)
    xf1 = _lerp(_grad_coord(seed, xp0, yp1, xd0, yd1), _grad_coord(seed, xp1, yp1, xd1, yd1), xs)
    return _lerp(xf0, xf1, ys) * _PERLIN_SCALE


def _value(seed, x, y):
    x0 = np.floor(x)
    y0 = np.floor(y)
    xs = _hermite(x - x0)
    ys = _hermite(y - y0)

    xp0 = _primed(x0, PRIME_X)
    yp0 = _primed(y0, PRIME_Y)
    xp1 = xp0 + _PX
    yp1 = yp0 + _PY

    xf0 = _lerp(_val_coord(seed, xp0, yp0), _val_coord(seed, xp1, yp0), xs)
    xf1 = _lerp(_val_coord(seed, xp0, yp1), _val_coord(seed, xp1, yp1), xs)
    return _lerp(xf0, xf1, ys)


def _simplex(seed, x, y):
    # Coordinates arrive already skewed by F2.
    i = np.floor(x)
    j = np.floor(y)
    xi = x - i
    yi = y - j

    t = (xi + yi) * G2
    x0 = xi - t
    y0 = yi - t

    ip = _primed(i, PRIME_X)
    jp = _primed(j, PRIME_Y)

    a = 0.5 - x0 * x0 - y0 * y0
    n0 = np.where(a > 0, (a * a) * (a * a) * _grad_coord(seed, ip, jp, x0, y0), 0.0)

    c = (2.0 * (1.0 - 2.0 * G2) * (1.0 / G2 - 2.0)) * t + ((-2.0 * (1.0 - 2.0 * G2) ** 2) + a)
    x2 = x0 + (2.0 * G2 - 1.0)
    y2 = y0 + (2.0 * G2 - 1.0)
    n2 = np.where(c > 0, (c * c) * (c * c) * _grad_coord(seed, ip + _PX, jp + _PY, x2, y2), 0.0)

    upper = y0 > x0
    x1 = np.where(upper, x0 + G2, x0 + (G2 - 1.0))
    y1 = np.where(upper, y0 + (G2 - 1.0), y0 + G2)
    ip1 = np.where(upper, ip, ip + _PX)
    jp1 = np.where(upper, jp + _PY, jp)
    b = 0.5 - x1 * x1 - y1 * y1
    n1 = np.where(b > 0, (b * b) * (b * b) * _grad_coord(seed, ip1, jp1, x1, y1), 0.0)

    return (n0 + n1 + n2) * _SIMPLEX_SCALE


def _cellular(seed, x, y):
    """Squared-euclidean cellular noise returning ``d0 / d1 - 1`` in ``[-1, 0]``."""
    xr = np.floor(x + 0.5)
    yr = np.floor(y + 0.5)
    d0 = np.full(x.shape, np.inf)
    d1 = np.full(x.shape, np.inf)

    for dx in (-1.0, 0.0, 1.0):
        cx = xr + dx
        xp = _primed(cx, PRIME_X)
        for dy in (-1.0, 0.0, 1.0):
            cy = yr + dy
            h = _hash(seed, xp, _primed(cy, PRIME_Y))
            idx = (h & 255).astype(np.intp)
            vx = (cx - x) + _CELL_X[idx] * _CELLULAR_JITTER
            vy = (cy - y) + _CELL_Y[idx] * _CELLULAR_JITTER
            dist = vx * vx + vy * vy
            d1 = np.maximum(np.minimum(d1, dist), d0)
            d0 = np.minimum(d0, dist)

    ratio = np.divide(d0, d1, out=np.zeros_like(d0), where=d1 > 0)
    return ratio - 1.0


_SINGLE = {
    NoiseType.PERLIN: _perlin,
    NoiseType.SIMPLEX: _simplex,
    NoiseType.VALUE: _value,
    NoiseType.CELLULAR: _cellular,
}


def _as_arrays(x, y) -> tuple[np.ndarray, np.ndarray, bool]:
    xa = np.asarray(x, dtype=np.float64)
    ya = np.asarray(y, dtype=np.float64)
    scalar = xa.ndim == 0 and ya.ndim == 0
    xa, ya = np.broadcast_arrays(xa, ya)
    if scalar:
        return xa.reshape(1), ya.reshape(1), True
    return np.array(xa, dtype=np.float64), np.array(ya, dtype=np.float64), False


class NoiseField:
    """Scalar noise sampled from an immutable :class:`NoiseConfig`.

    ``sample`` returns values in ``[-1, 1]`` (``[-1, 0]`` for non-fractal
    cellular noise, see :attr:`native_range`); ``sample_uniform`` remaps the
    same field through its own cumulative distribution so results spread
    approximately uniformly over ``[0, 1]``.
    """

    def __init__(self, config: NoiseConfig | None = None) -> None:
        self.config = config or NoiseConfig()
        self._single = _SINGLE[self.config.noise_type]
        self._bounding = self._fractal_bounding()
        self._quantiles: np.ndarray | None = None
        self._lock = threading.Lock()

    def _fractal_bounding(self) -> float:
        gain = abs(self.config.gain)
        amp = gain
        amp_fractal = 1.0
        for _ in range(1, self.config.octaves):
            amp_fractal += amp
            amp *= gain
        return 1.0 / amp_fractal

    @property
    def native_range(self) -> tuple[float, float]:
        if self.config.noise_type is NoiseType.CELLULAR and self.config.fractal_type is FractalType.NONE:
            return -1.0, 0.0
        return -1.0, 1.0

    def _fractal(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        cfg = self.config
        seed = cfg.seed
        total = np.zeros_like(x)
        amp = self._bounding

        for _ in range(cfg.octaves):
            noise = self._single(_seed(seed), x, y)
            if cfg.fractal_type is FractalType.FBM:
                total += noise * amp
            elif cfg.fractal_type is FractalType.RIDGED:
                total += (np.abs(noise) * -2.0 + 1.0) * amp
            else:
                bounced = _ping_pong((noise + 1.0) * cfg.ping_pong_strength)
                total += (bounced - 0.5) * 2.0 * amp
            seed += 1
            x = x * cfg.lacunarity
            y = y * cfg.lacunarity
            amp *= cfg.gain

        return total

    def _raw(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        if self.config.noise_type is NoiseType.SIMPLEX:
            skew = (x + y) * F2
            x = x + skew
            y = y + skew
        with np.errstate(over="ignore"):
            if self.config.fractal_type is FractalType.NONE:
                values = self._single(_seed(self.config.seed), x, y)
            else:
                values = self._fractal(x, y)
        lo, hi = self.native_range
        return np.clip(values, lo, hi)

    def sample(self, x, y):
        xs, ys, scalar = _as_arrays(x, y)
        values = self._raw(xs, ys)
        return float(values[0]) if scalar else values

    def sample_normalized(self, x, y):
        """``sample`` linearly remapped from :attr:`native_range` into ``[0, 1]``."""
        xs, ys, scalar = _as_arrays(x, y)
        lo, hi = self.native_range
        values = (self._raw(xs, ys) - lo) / (hi - lo)
        return float(values[0]) if scalar else values

    def equalization_table(self) -> np.ndarray:
        """Quantiles of this field, computed once and shared read-only afterwards."""
        with self._lock:
            if self._quantiles is None:
                axis = (np.arange(_EQ_GRID) + 0.5 * _GOLDEN) * (_EQ_SPAN / _EQ_GRID)
                gx, gy = np.meshgrid(axis, axis + 0.5 * _EQ_SPAN)
                samples = self._raw(gx.ravel(), gy.ravel())
                table = np.quantile(samples, np.linspace(0.0, 1.0, _EQ_LEVELS))
                table.setflags(write=False)
                self._quantiles = table
            return self._quantiles

    def sample_uniform(self, x, y):
        xs, ys, scalar = _as_arrays(x, y)
        table = self.equalization_table()
        values = np.interp(self._raw(xs, ys), table, np.linspace(0.0, 1.0, _EQ_LEVELS))
        return float(values[0]) if scalar else values

