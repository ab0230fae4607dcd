"""
Stroke rasterizer producing cardinally connected river paths.

Pointer samples are joined by an L-shaped path: one horizontal and one
vertical segment. Consecutive pixels on the path are always axis
adjacent, so a river drawn in one stroke is 4-connected by construction
and neighbor counts can be read as topological degree.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Tuple

import structlog

from .network import detect_junction, reclassify_region
from .raster import RasterBuffer
from .roles import Role

logger = structlog.get_logger()

Point = Tuple[int, int]
# (axis "h" or "v", fixed coordinate, start, end)
Segment = Tuple[str, int, int, int]


class Tool(str, Enum):
    """Drawing tools, each bound to a fixed paint role."""

    RIVER = "river"
    SOURCE = "source"
    JUNCTION = "junction"
    ERASER = "eraser"

    @property
    def role(self) -> Role:
        return TOOL_ROLES[self]

    @property
    def reconciles(self) -> bool:
        """Only the river tool triggers classification side effects."""
        return self is Tool.RIVER

    @classmethod
    def parse(cls, value) -> "Tool":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown tool: {value!r}") from None


TOOL_ROLES = {
    Tool.RIVER: Role.CHANNEL,
    Tool.SOURCE: Role.SOURCE,
    Tool.JUNCTION: Role.JUNCTION,
    Tool.ERASER: Role.EMPTY,
}


@dataclass
class Stroke:
    """State of one pointer-down to pointer-up interaction."""

    tool: Tool
    start: Point
    last: Point
    painted: Set[Point] = field(default_factory=set)


def cardinal_segments(x1: int, y1: int, x2: int, y2: int) -> List[Segment]:
    """
    The two axis-aligned segments joining (x1, y1) to (x2, y2).

    The longer axis is walked first: horizontal then vertical when
    |dx| >= |dy|, vertical then horizontal otherwise. Endpoints are
    inclusive and the corner belongs to both segments.
    """
    if abs(x2 - x1) >= abs(y2 - y1):
        return [("h", y1, x1, x2), ("v", x2, y1, y2)]
    return [("v", x1, y1, y2), ("h", y2, x1, x2)]


def clip_segment(segment: Segment, width: int, height: int) -> Optional[Segment]:
    """
    Restrict a segment to [0, width) x [0, height).

    Returns:
        The clipped segment, walked low to high, or None if it misses
        the grid entirely
    """
    axis, fixed, a, b = segment
    fixed_limit, run_limit = (height, width) if axis == "h" else (width, height)
    if not 0 <= fixed < fixed_limit:
        return None

    low, high = max(min(a, b), 0), min(max(a, b), run_limit - 1)
    if low > high:
        return None
    return (axis, fixed, low, high)


def segment_points(segment: Segment) -> List[Point]:
    axis, fixed, a, b = segment
    step = 1 if b >= a else -1
    if axis == "h":
        return [(c, fixed) for c in range(a, b + step, step)]
    return [(fixed, c) for c in range(a, b + step, step)]


def cardinal_path(x1: int, y1: int, x2: int, y2: int) -> List[Point]:
    """
    Points visited when joining (x1, y1) to (x2, y2) without diagonals.

    Points are ordered from start to end without repeats, so each one is
    axis adjacent to the next.
    """
    first, second = cardinal_segments(x1, y1, x2, y2)
    return segment_points(first) + segment_points(second)[1:]


class StrokeRasterizer:
    """Paints strokes into a buffer and keeps the network classified."""

    def __init__(self, buffer: RasterBuffer):
        self.buffer = buffer
        self.stroke: Optional[Stroke] = None

    @property
    def active(self) -> bool:
        return self.stroke is not None

    def _paint(self, x: int, y: int) -> bool:
        if not self.buffer.set_rgb(x, y, self.stroke.tool.role.color):
            return False
        self.stroke.painted.add((x, y))
        return True

    def _reconcile(self, min_x: int, min_y: int, max_x: int, max_y: int) -> None:
        reclassify_region(
            self.buffer,
            min_x,
            min_y,
            max_x,
            max_y,
            stroke_start=self.stroke.start,
            painted=self.stroke.painted,
        )

    def begin_stroke(self, tool, x0: int, y0: int) -> Stroke:
        """Start a stroke and paint its first pixel."""
        tool = Tool.parse(tool)
        self.stroke = Stroke(tool=tool, start=(x0, y0), last=(x0, y0))
        self._paint(x0, y0)

        if tool.reconciles:
            self._reconcile(x0 - 1, y0 - 1, x0 + 1, y0 + 1)

        logger.debug("Stroke started", tool=tool.value, x=x0, y=y0)
        return self.stroke

    def extend_stroke(self, tool, x: int, y: int) -> int:
        """
        Draw a cardinal path from the previous sample to (x, y).

        Returns:
            Number of in-bounds pixels painted (0 if no stroke is active)
        """
        if self.stroke is None:
            return 0

        tool = Tool.parse(tool)
        self.stroke.tool = tool
        px, py = self.stroke.last

        painted = set()
        for segment in cardinal_segments(px, py, x, y):
            clipped = clip_segment(segment, self.buffer.width, self.buffer.height)
            if clipped is None:
                continue
            for cx, cy in segment_points(clipped):
                if self._paint(cx, cy):
                    painted.add((cx, cy))

        if tool.reconciles:
            self._reconcile(min(px, x) - 1, min(py, y) - 1, max(px, x) + 1, max(py, y) + 1)

        self.stroke.last = (x, y)
        return len(painted)

    def end_stroke(self, tool=None) -> Optional[Stroke]:
        """
        Finish the active stroke.

        Junction detection runs on the final sample only, so a branch
        that merges into an existing river anywhere else along the
        stroke is not marked. Committing history is the caller's job.

        Returns:
            The finished stroke, or None if none was active
        """
        stroke = self.stroke
        if stroke is None:
            return None

        tool = Tool.parse(tool) if tool is not None else stroke.tool
        if tool.reconciles and stroke.last is not None:
            x, y = stroke.last
            detect_junction(self.buffer, x, y, stroke.painted)

        self.stroke = None
        logger.debug("Stroke finished", tool=tool.value, painted=len(stroke.painted))
        return stroke

    def cancel_stroke(self) -> Optional[Stroke]:
        """Drop the active stroke, leaving its partial paint in place."""
        stroke, self.stroke = self.stroke, None
        return stroke
