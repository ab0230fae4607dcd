"""
Role classification for river network pixels.

A pixel's role is never stored on its own; it is read back from the
pixel color through a fixed, bijective color table:

- EMPTY:    (0, 0, 0)     background, not part of the network
- SOURCE:   (0, 255, 0)   headwater or isolated end of a branch
- CHANNEL:  (0, 0, 255)   ordinary river segment
- JUNCTION: (255, 0, 0)   confluence of two or more branches

Any color outside the table classifies as EMPTY.
"""

from enum import IntEnum
from typing import Dict

import numpy as np

from .raster import RGB, RasterBuffer


class Role(IntEnum):
    """Semantic role of a pixel in the river network."""

    EMPTY = 0
    SOURCE = 1
    CHANNEL = 2
    JUNCTION = 3

    @property
    def color(self) -> RGB:
        return ROLE_COLORS[self]

    @classmethod
    def from_color(cls, rgb: RGB) -> "Role":
        return COLOR_ROLES.get(tuple(rgb), cls.EMPTY)


ROLE_COLORS: Dict[Role, RGB] = {
    Role.EMPTY: (0, 0, 0),
    Role.SOURCE: (0, 255, 0),
    Role.CHANNEL: (0, 0, 255),
    Role.JUNCTION: (255, 0, 0),
}

COLOR_ROLES: Dict[RGB, Role] = {rgb: role for role, rgb in ROLE_COLORS.items()}

# (dx, dy) of the four cardinal neighbors: up, down, left, right
CARDINAL_OFFSETS = ((0, -1), (0, 1), (-1, 0), (1, 0))


def role_of(buffer: RasterBuffer, x: int, y: int) -> Role:
    """Role of the pixel at (x, y). Out-of-bounds cells are EMPTY."""
    if not buffer.in_bounds(x, y):
        return Role.EMPTY
    return Role.from_color(buffer.get_rgb(x, y))


def is_river(buffer: RasterBuffer, x: int, y: int) -> bool:
    return role_of(buffer, x, y) != Role.EMPTY


def cardinal_neighbor_count(buffer: RasterBuffer, x: int, y: int) -> int:
    """Number of the 4 axis-adjacent cells holding any non-empty role."""
    return sum(1 for dx, dy in CARDINAL_OFFSETS if is_river(buffer, x + dx, y + dy))


def role_map(buffer: RasterBuffer) -> np.ndarray:
    """
    Classify every pixel at once.

    Returns:
        (height, width) int8 array of Role values
    """
    return roles_from_pixels(buffer.pixels)


def roles_from_pixels(pixels: np.ndarray) -> np.ndarray:
    """Role values for an (h, w, 4) RGBA array or window."""
    rgb = pixels[..., :3]
    roles = np.zeros(rgb.shape[:2], dtype=np.int8)
    for role, color in ROLE_COLORS.items():
        if role == Role.EMPTY:
            continue
        roles[np.all(rgb == color, axis=-1)] = role
    return roles


def neighbor_counts(mask: np.ndarray) -> np.ndarray:
    """
    Cardinal neighbor count for every cell of a boolean river mask.

    Cells outside the grid count as empty.
    """
    padded = np.pad(mask.astype(np.uint8), 1)
    return (
        padded[:-2, 1:-1]  # up
        + padded[2:, 1:-1]  # down
        + padded[1:-1, :-2]  # left
        + padded[1:-1, 2:]  # right
    )
