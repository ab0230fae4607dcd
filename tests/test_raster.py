"""Tests for the raster buffer."""

import pytest
import numpy as np
from river_editor.core import RasterBuffer


class TestRasterBuffer:

    def test_blank_is_opaque_black(self):
        buffer = RasterBuffer.blank(3, 2)
        assert buffer.pixels.shape == (2, 3, 4)
        assert np.all(buffer.pixels[..., :3] == 0)
        assert np.all(buffer.pixels[..., 3] == 255)

    def test_flat_index_layout(self):
        buffer = RasterBuffer.blank(5, 4)
        buffer.set_rgb(3, 2, (1, 2, 3))

        i = (2 * 5 + 3) * 4
        assert list(buffer.data[i:i + 4]) == [1, 2, 3, 255]

    def test_out_of_bounds_write_is_dropped(self):
        buffer = RasterBuffer.blank(2, 2)
        before = buffer.copy()

        assert buffer.set_rgb(2, 0, (0, 0, 255)) is False
        assert buffer.set_rgb(-1, 1, (0, 0, 255)) is False
        assert buffer == before
        assert buffer.get_rgb(5, 5) == (0, 0, 0)

    def test_copy_is_independent(self):
        buffer = RasterBuffer.blank(2, 2)
        clone = buffer.copy()
        buffer.set_rgb(0, 0, (255, 0, 0))

        assert clone.get_rgb(0, 0) == (0, 0, 0)
        assert clone != buffer

    def test_from_rgba_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            RasterBuffer.from_rgba(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            RasterBuffer(3, 3, np.zeros((2, 3, 4), dtype=np.uint8))
