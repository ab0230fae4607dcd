"""Tests for network reconciliation."""

import pytest
import numpy as np
from river_editor.core import (
    RasterBuffer, Role, role_of, role_map,
    reclassify_region, reclassify_all, detect_junction
)
from river_editor.core.roles import ROLE_COLORS


def paint(buffer, role, *points):
    for x, y in points:
        buffer.set_rgb(x, y, role.color)


def random_network(seed, width=16, height=12):
    """Buffer with a random scatter of river colors and some noise colors."""
    rng = np.random.default_rng(seed)
    palette = np.array(list(ROLE_COLORS.values()) + [(40, 40, 40)], dtype=np.uint8)
    weights = [0.5, 0.15, 0.2, 0.1, 0.05]
    choice = rng.choice(len(palette), size=(height, width), p=weights)
    pixels = np.full((height, width, 4), 255, dtype=np.uint8)
    pixels[..., :3] = palette[choice]
    return RasterBuffer.from_rgba(pixels)


class TestReclassifyRegion:
    """Test the incremental area update."""

    def test_isolated_pixel_becomes_source(self):
        buffer = RasterBuffer.blank(3, 3)
        paint(buffer, Role.CHANNEL, (1, 1))

        reclassify_region(buffer, 0, 0, 2, 2)

        assert role_of(buffer, 1, 1) == Role.SOURCE

    def test_line_with_stroke_start(self):
        buffer = RasterBuffer.blank(4, 3)
        paint(buffer, Role.CHANNEL, (0, 1), (1, 1), (2, 1))

        reclassify_region(buffer, 0, 0, 3, 2, stroke_start=(0, 1))

        assert role_of(buffer, 0, 1) == Role.SOURCE
        assert role_of(buffer, 1, 1) == Role.CHANNEL
        # single neighbor but not the stroke start
        assert role_of(buffer, 2, 1) == Role.CHANNEL

    def test_start_with_two_neighbors_is_channel(self):
        buffer = RasterBuffer.blank(3, 1)
        paint(buffer, Role.CHANNEL, (0, 0), (1, 0), (2, 0))

        reclassify_region(buffer, 0, 0, 2, 0, stroke_start=(1, 0))

        assert role_of(buffer, 1, 0) == Role.CHANNEL

    def test_source_with_neighbors_becomes_channel(self):
        buffer = RasterBuffer.blank(3, 1)
        paint(buffer, Role.SOURCE, (0, 0), (1, 0))

        reclassify_region(buffer, 0, 0, 2, 0)

        assert role_of(buffer, 0, 0) == Role.CHANNEL
        assert role_of(buffer, 1, 0) == Role.CHANNEL

    def test_junction_is_never_downgraded(self):
        buffer = RasterBuffer.blank(5, 3)
        paint(buffer, Role.JUNCTION, (0, 0), (2, 1))
        paint(buffer, Role.CHANNEL, (1, 1), (3, 1))

        reclassify_region(buffer, 0, 0, 4, 2, stroke_start=(0, 0))

        assert role_of(buffer, 0, 0) == Role.JUNCTION
        assert role_of(buffer, 2, 1) == Role.JUNCTION

    def test_cells_outside_box_untouched(self):
        buffer = RasterBuffer.blank(8, 8)
        paint(buffer, Role.CHANNEL, (1, 1), (6, 6))

        reclassify_region(buffer, 0, 0, 2, 2)

        assert role_of(buffer, 1, 1) == Role.SOURCE
        assert role_of(buffer, 6, 6) == Role.CHANNEL

    def test_box_is_clamped(self):
        buffer = RasterBuffer.blank(3, 3)
        paint(buffer, Role.CHANNEL, (0, 0), (2, 2))

        examined = reclassify_region(buffer, -10, -10, 10, 10)

        assert examined == 2
        assert role_of(buffer, 0, 0) == Role.SOURCE
        assert role_of(buffer, 2, 2) == Role.SOURCE

    def test_box_fully_outside_grid(self):
        buffer = RasterBuffer.blank(3, 3)
        assert reclassify_region(buffer, 5, 5, 9, 9) == 0

    def test_empty_and_foreign_pixels_untouched(self):
        buffer = RasterBuffer.blank(3, 3)
        buffer.set_rgb(1, 1, (40, 40, 40))
        before = buffer.copy()

        reclassify_region(buffer, 0, 0, 2, 2)

        assert buffer == before


class TestReclassifyAll:
    """Test the global reconciliation pass."""

    def test_plus_shape(self):
        buffer = RasterBuffer.blank(5, 5)
        paint(buffer, Role.CHANNEL, (2, 2), (1, 2), (3, 2), (2, 1), (2, 3))

        reclassify_all(buffer)

        assert role_of(buffer, 2, 2) == Role.JUNCTION
        for arm in [(1, 2), (3, 2), (2, 1), (2, 3)]:
            assert role_of(buffer, *arm) == Role.SOURCE

    def test_t_shape_three_neighbors(self):
        buffer = RasterBuffer.blank(3, 2)
        paint(buffer, Role.CHANNEL, (0, 0), (1, 0), (2, 0), (1, 1))

        reclassify_all(buffer)

        assert role_of(buffer, 1, 0) == Role.JUNCTION

    def test_line(self):
        buffer = RasterBuffer.blank(5, 1)
        paint(buffer, Role.CHANNEL, (0, 0), (1, 0), (2, 0), (3, 0))

        count = reclassify_all(buffer)

        assert count == 4
        assert [role_of(buffer, x, 0) for x in range(5)] == [
            Role.SOURCE, Role.CHANNEL, Role.CHANNEL, Role.SOURCE, Role.EMPTY
        ]

    def test_junction_is_recomputed(self):
        buffer = RasterBuffer.blank(3, 1)
        paint(buffer, Role.CHANNEL, (0, 0), (2, 0))
        paint(buffer, Role.JUNCTION, (1, 0))

        reclassify_all(buffer)

        assert role_of(buffer, 1, 0) == Role.CHANNEL

    def test_foreign_colors_untouched(self):
        buffer = RasterBuffer.blank(3, 1)
        buffer.set_rgb(0, 0, (40, 40, 40))
        paint(buffer, Role.CHANNEL, (1, 0))

        reclassify_all(buffer)

        assert buffer.get_rgb(0, 0) == (40, 40, 40)
        assert role_of(buffer, 1, 0) == Role.SOURCE

    @pytest.mark.parametrize("seed", [1, 2, 3, 4])
    def test_idempotent(self, seed):
        buffer = random_network(seed)

        reclassify_all(buffer)
        once = buffer.copy()
        reclassify_all(buffer)

        assert buffer == once

    @pytest.mark.parametrize("seed", [5, 6])
    def test_river_mask_preserved(self, seed):
        buffer = random_network(seed)
        mask_before = role_map(buffer) != Role.EMPTY

        reclassify_all(buffer)

        assert np.array_equal(role_map(buffer) != Role.EMPTY, mask_before)


class TestDetectJunction:
    """Test junction creation at the end of a stroke."""

    def test_existing_neighbor_creates_junction(self):
        buffer = RasterBuffer.blank(4, 3)
        paint(buffer, Role.CHANNEL, (1, 1), (2, 1))

        assert detect_junction(buffer, 2, 1, painted={(2, 1)}) is True
        assert role_of(buffer, 2, 1) == Role.JUNCTION

    def test_neighbor_from_same_stroke_ignored(self):
        buffer = RasterBuffer.blank(4, 3)
        paint(buffer, Role.CHANNEL, (1, 1), (2, 1))

        assert detect_junction(buffer, 2, 1, painted={(1, 1), (2, 1)}) is False
        assert role_of(buffer, 2, 1) == Role.CHANNEL

    def test_no_neighbors(self):
        buffer = RasterBuffer.blank(3, 3)
        paint(buffer, Role.CHANNEL, (1, 1))

        assert detect_junction(buffer, 1, 1, painted=set()) is False

    def test_out_of_bounds_point(self):
        buffer = RasterBuffer.blank(3, 3)
        paint(buffer, Role.CHANNEL, (0, 0))
        before = buffer.copy()

        assert detect_junction(buffer, -1, 0, painted=set()) is False
        assert buffer == before
