"""Row-major packed-color pixel store and image conversion."""

from __future__ import annotations

import numpy as np
from PIL import Image

from prismatic_core.errors import BoundsError


class PixelBuffer:
    """``height x width`` grid of packed ARGB colors backed by a numpy ``uint32`` array.

    Index ``y * width + x`` of :attr:`pixels` addresses the same pixel as
    ``get(x, y)``. Renderers write through :meth:`row_view`, which hands out
    disjoint row slices without copying.
    """

    def __init__(self, width: int, height: int, fill: int = 0, data: np.ndarray | None = None) -> None:
        if width < 0 or height < 0:
            raise BoundsError(f"buffer size must be non-negative, got {width}x{height}")
        if data is None:
            data = np.full((height, width), int(fill) & 0xFFFFFFFF, dtype=np.uint32)
        else:
            data = np.asarray(data, dtype=np.uint32)
            if data.ndim == 1 and data.size == width * height:
                data = data.reshape(height, width)
            if data.shape != (height, width):
                raise BoundsError(f"pixel data shape {data.shape} does not match {width}x{height}")
        self.width = width
        self.height = height
        self.array = data

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise BoundsError(f"pixel ({x}, {y}) outside {self.width}x{self.height} buffer")

    def get(self, x: int, y: int) -> int:
        self._check(x, y)
        return int(self.array[y, x])

    def set(self, x: int, y: int, color: int) -> None:
        self._check(x, y)
        self.array[y, x] = int(color) & 0xFFFFFFFF

    def fill(self, color: int) -> None:
        self.array.fill(int(color) & 0xFFFFFFFF)

    def row_view(self, y0: int, y1: int, x0: int = 0, x1: int | None = None) -> np.ndarray:
        """Writable view of rows ``[y0, y1)`` and columns ``[x0, x1)``."""
        x1 = self.width if x1 is None else x1
        if not (0 <= y0 <= y1 <= self.height and 0 <= x0 <= x1 <= self.width):
            raise BoundsError(f"rows [{y0}, {y1}) cols [{x0}, {x1}) outside {self.width}x{self.height} buffer")
        return self.array[y0:y1, x0:x1]

    @property
    def pixels(self) -> list[int]:
        """Flat row-major copy of every packed color."""
        return self.array.ravel().tolist()

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, data=self.array.copy())

    def to_image(self) -> Image.Image:
        packed = self.array
        rgba = np.empty((self.height, self.width, 4), dtype=np.uint8)
        rgba[..., 0] = (packed >> 16) & 0xFF
        rgba[..., 1] = (packed >> 8) & 0xFF
        rgba[..., 2] = packed & 0xFF
        rgba[..., 3] = (packed >> 24) & 0xFF
        return Image.fromarray(rgba)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        rgba = np.asarray(image, dtype=np.uint8).astype(np.uint32)
        packed = (rgba[..., 3] << 24) | (rgba[..., 0] << 16) | (rgba[..., 1] << 8) | rgba[..., 2]
        width, height = image.size
        return cls(width, height, data=packed)

