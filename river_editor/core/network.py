"""
Network reconciliation: re-derive pixel roles from connectivity.

Two passes exist and must not be confused:

- ``reclassify_region`` is the incremental update run while a stroke is
  being drawn. It never creates or removes junctions and treats the
  first pixel of the stroke as a headwater.
- ``reclassify_all`` is the global pass. It recomputes every role,
  junctions included, purely from neighbor counts and is idempotent.

Junctions only appear during interactive drawing through
``detect_junction``, which the stroke rasterizer calls once per stroke.
"""

from typing import Optional, Set, Tuple

import numpy as np
import structlog

from .raster import RasterBuffer
from .roles import (
    CARDINAL_OFFSETS,
    ROLE_COLORS,
    Role,
    is_river,
    neighbor_counts,
    role_map,
    roles_from_pixels,
)

logger = structlog.get_logger()

Point = Tuple[int, int]


def _paint_roles(buffer: RasterBuffer, roles: np.ndarray, y0: int = 0, x0: int = 0) -> None:
    """Write role colors for every non-empty entry of a role window."""
    height, width = roles.shape
    window = buffer.pixels[y0:y0 + height, x0:x0 + width]
    for role in (Role.SOURCE, Role.CHANNEL, Role.JUNCTION):
        selected = roles == role
        window[selected, :3] = ROLE_COLORS[role]
        window[selected, 3] = 255


def reclassify_region(
    buffer: RasterBuffer,
    min_x: int,
    min_y: int,
    max_x: int,
    max_y: int,
    stroke_start: Optional[Point] = None,
    painted: Optional[Set[Point]] = None,
) -> int:
    """
    Incrementally re-derive roles inside an inclusive box.

    Policy for each non-empty cell with n cardinal neighbors:
    1. JUNCTION cells are left untouched.
    2. n == 0, or n == 1 on the stroke's start coordinate, becomes SOURCE.
    3. Everything else becomes CHANNEL.

    Args:
        buffer: Buffer to update in place
        min_x, min_y, max_x, max_y: Inclusive box, clamped to the grid
        stroke_start: First point of the active stroke, if any
        painted: Coordinates painted by the active stroke; the policy
            does not consult it

    Returns:
        Number of river cells in the clamped box
    """
    min_x = max(0, min_x)
    min_y = max(0, min_y)
    max_x = min(buffer.width - 1, max_x)
    max_y = min(buffer.height - 1, max_y)
    if min_x > max_x or min_y > max_y:
        return 0

    # one-cell margin so border cells of the box see all their neighbors
    top, left = max(0, min_y - 1), max(0, min_x - 1)
    bottom, right = min(buffer.height, max_y + 2), min(buffer.width, max_x + 2)
    roles = roles_from_pixels(buffer.pixels[top:bottom, left:right])
    counts = neighbor_counts(roles != Role.EMPTY)

    inner = (slice(min_y - top, max_y - top + 1), slice(min_x - left, max_x - left + 1))
    window = roles[inner].copy()
    window_counts = counts[inner]
    river = window != Role.EMPTY
    junction = window == Role.JUNCTION

    source = river & ~junction & (window_counts == 0)
    if stroke_start is not None:
        sx, sy = stroke_start
        if min_x <= sx <= max_x and min_y <= sy <= max_y:
            local_y, local_x = sy - min_y, sx - min_x
            if (
                river[local_y, local_x]
                and not junction[local_y, local_x]
                and window_counts[local_y, local_x] == 1
            ):
                source[local_y, local_x] = True

    window[river & ~junction] = Role.CHANNEL
    window[source] = Role.SOURCE

    _paint_roles(buffer, window, y0=min_y, x0=min_x)
    return int(river.sum())


def reclassify_all(buffer: RasterBuffer) -> int:
    """
    Global reconciliation over the whole grid.

    Every non-empty cell becomes SOURCE (n <= 1), CHANNEL (n == 2) or
    JUNCTION (n >= 3). Roles never change between empty and non-empty,
    so a second pass finds identical neighbor counts and changes nothing.

    Returns:
        Number of river pixels classified
    """
    roles = role_map(buffer)
    river = roles != Role.EMPTY
    counts = neighbor_counts(river)

    updated = np.full(roles.shape, Role.EMPTY, dtype=np.int8)
    updated[river & (counts <= 1)] = Role.SOURCE
    updated[river & (counts == 2)] = Role.CHANNEL
    updated[river & (counts >= 3)] = Role.JUNCTION

    _paint_roles(buffer, updated)

    logger.debug(
        "Reclassified network",
        river_pixels=int(river.sum()),
        sources=int((updated == Role.SOURCE).sum()),
        junctions=int((updated == Role.JUNCTION).sum()),
    )
    return int(river.sum())


def detect_junction(buffer: RasterBuffer, x: int, y: int, painted: Set[Point]) -> bool:
    """
    Promote (x, y) to JUNCTION if it touches a pre-existing branch.

    A neighbor belongs to a pre-existing branch when it is non-empty and
    was not painted by the current stroke.
    """
    if not buffer.in_bounds(x, y):
        return False
    for dx, dy in CARDINAL_OFFSETS:
        nx, ny = x + dx, y + dy
        if is_river(buffer, nx, ny) and (nx, ny) not in painted:
            buffer.set_rgb(x, y, Role.JUNCTION.color)
            logger.debug("Junction created", x=x, y=y, neighbor=(nx, ny))
            return True
    return False
