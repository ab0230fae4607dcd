"""
Raster buffer holding the editable RGBA pixel grid.
"""

from typing import Tuple

import numpy as np

RGB = Tuple[int, int, int]


class RasterBuffer:
    """A width x height grid of RGBA pixels with bounds-checked access."""

    def __init__(self, width: int, height: int, pixels: np.ndarray = None):
        if width < 0 or height < 0:
            raise ValueError(f"Invalid raster size {width}x{height}")

        self.width = width
        self.height = height

        if pixels is None:
            pixels = np.zeros((height, width, 4), dtype=np.uint8)
        elif pixels.shape != (height, width, 4):
            raise ValueError(
                f"Pixel array shape {pixels.shape} does not match {width}x{height} RGBA"
            )
        self.pixels = pixels

    @classmethod
    def blank(cls, width: int, height: int) -> "RasterBuffer":
        """Create an opaque black buffer."""
        buffer = cls(width, height)
        buffer.pixels[..., 3] = 255
        return buffer

    @classmethod
    def from_rgba(cls, array: np.ndarray) -> "RasterBuffer":
        """Wrap a copy of an (height, width, 4) uint8 array."""
        array = np.asarray(array, dtype=np.uint8)
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"Expected an RGBA array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width, height, array.copy())

    @property
    def data(self) -> np.ndarray:
        """Flat RGBA view; pixel (x, y) starts at (y * width + x) * 4."""
        return self.pixels.reshape(-1)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_rgb(self, x: int, y: int) -> RGB:
        """Color at (x, y); out-of-bounds reads are black."""
        if not self.in_bounds(x, y):
            return (0, 0, 0)
        r, g, b = self.pixels[y, x, :3]
        return (int(r), int(g), int(b))

    def set_rgb(self, x: int, y: int, rgb: RGB) -> bool:
        """Write an opaque color. Out-of-bounds writes are dropped."""
        if not self.in_bounds(x, y):
            return False
        self.pixels[y, x] = (rgb[0], rgb[1], rgb[2], 255)
        return True

    def fill(self, rgb: RGB) -> None:
        self.pixels[...] = (rgb[0], rgb[1], rgb[2], 255)

    def copy(self) -> "RasterBuffer":
        return RasterBuffer(self.width, self.height, self.pixels.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, RasterBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.pixels, other.pixels)
        )

    def __repr__(self) -> str:
        return f"RasterBuffer({self.width}x{self.height})"
