"""
Editing session: owns the live buffer and wires the editing components.

The session is a small synchronous state machine driven by an external
event source:

    IDLE -> DRAWING -> IDLE   (begin_stroke ... end_stroke / cancel_stroke)
    IDLE -> PANNING -> IDLE   (begin_pan ... end_pan)

Operations invoked before a buffer is loaded, or in a state that does
not accept them, are reported as unavailable (False / None) rather than
raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import structlog

from .bmp import encode_bmp
from .history import DEFAULT_CAPACITY, HistoryManager
from .network import reclassify_all
from .raster import RasterBuffer
from .roles import Role
from .stroke import StrokeRasterizer, Tool

logger = structlog.get_logger()


class SessionState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    PANNING = "panning"


class StrokePhase(str, Enum):
    BEGIN = "begin"
    EXTEND = "extend"
    END = "end"


@dataclass
class StrokeEvent:
    """A pointer sample already mapped to grid coordinates."""

    tool: Tool
    x: int
    y: int
    phase: StrokePhase


class EditorSession:
    """Single-owner editing session over one raster buffer."""

    def __init__(self, history_capacity: int = DEFAULT_CAPACITY):
        self.buffer: Optional[RasterBuffer] = None
        self.history = HistoryManager(history_capacity)
        self.rasterizer: Optional[StrokeRasterizer] = None
        self.state = SessionState.IDLE

    @property
    def loaded(self) -> bool:
        return self.buffer is not None

    def _attach(self, buffer: RasterBuffer) -> None:
        self.buffer = buffer
        self.rasterizer = StrokeRasterizer(buffer)

    def load(self, buffer: RasterBuffer) -> None:
        """Take ownership of a copy of a decoded buffer and start fresh history."""
        self._attach(buffer.copy())
        self.history.reset(self.buffer)
        self.state = SessionState.IDLE
        logger.info("Session loaded", width=buffer.width, height=buffer.height)

    def new_blank(self, width: int, height: int) -> None:
        self.load(RasterBuffer.blank(width, height))

    def _unavailable(self, operation: str, **kw) -> None:
        logger.warning("Operation unavailable", operation=operation, state=self.state.value,
                       loaded=self.loaded, **kw)

    # Stroke handling

    def begin_stroke(self, tool, x: int, y: int) -> bool:
        if not self.loaded or self.state != SessionState.IDLE:
            self._unavailable("begin_stroke")
            return False
        self.rasterizer.begin_stroke(tool, x, y)
        self.state = SessionState.DRAWING
        return True

    def extend_stroke(self, x: int, y: int, tool=None) -> bool:
        if not self.loaded or self.state != SessionState.DRAWING:
            self._unavailable("extend_stroke")
            return False
        self.rasterizer.extend_stroke(tool or self.rasterizer.stroke.tool, x, y)
        return True

    def end_stroke(self) -> bool:
        """Finish the stroke and commit a history snapshot."""
        if not self.loaded or self.state != SessionState.DRAWING:
            self._unavailable("end_stroke")
            return False
        stroke = self.rasterizer.end_stroke()
        self.history.commit(self.buffer)
        self.state = SessionState.IDLE
        logger.info("Stroke committed", tool=stroke.tool.value, painted=len(stroke.painted))
        return True

    def cancel_stroke(self) -> bool:
        """Abandon the stroke without a history commit; partial paint remains."""
        if self.state != SessionState.DRAWING:
            return False
        self.rasterizer.cancel_stroke()
        self.state = SessionState.IDLE
        logger.info("Stroke cancelled")
        return True

    def handle_event(self, event: StrokeEvent) -> bool:
        phase = StrokePhase(event.phase)
        if phase == StrokePhase.BEGIN:
            return self.begin_stroke(event.tool, event.x, event.y)
        if phase == StrokePhase.EXTEND:
            return self.extend_stroke(event.x, event.y, tool=event.tool)
        return self.end_stroke()

    # Panning is a view concern; the session only tracks it to block drawing

    def begin_pan(self) -> bool:
        if self.state != SessionState.IDLE:
            return False
        self.state = SessionState.PANNING
        return True

    def end_pan(self) -> bool:
        if self.state != SessionState.PANNING:
            return False
        self.state = SessionState.IDLE
        return True

    # History

    def undo(self) -> bool:
        if not self.loaded or self.state != SessionState.IDLE:
            return False
        restored = self.history.undo()
        if restored is None:
            return False
        self._attach(restored)
        return True

    def redo(self) -> bool:
        if not self.loaded or self.state != SessionState.IDLE:
            return False
        restored = self.history.redo()
        if restored is None:
            return False
        self._attach(restored)
        return True

    def can_undo(self) -> bool:
        return self.loaded and self.history.can_undo()

    def can_redo(self) -> bool:
        return self.loaded and self.history.can_redo()

    # Bulk operations

    def clear(self) -> bool:
        """Fill the grid with opaque black and commit. Confirmation is the caller's job."""
        if not self.loaded or self.state != SessionState.IDLE:
            self._unavailable("clear")
            return False
        self.buffer.fill(Role.EMPTY.color)
        self.history.commit(self.buffer)
        logger.info("Canvas cleared")
        return True

    def reclassify_all(self) -> Optional[int]:
        if not self.loaded or self.state != SessionState.IDLE:
            self._unavailable("reclassify_all")
            return None
        count = reclassify_all(self.buffer)
        self.history.commit(self.buffer)
        logger.info("Network reconciled", river_pixels=count)
        return count

    def export_bmp(self) -> Optional[bytes]:
        if not self.loaded:
            self._unavailable("export_bmp")
            return None
        return encode_bmp(self.buffer)

    def status(self) -> Dict[str, Any]:
        return {
            "loaded": self.loaded,
            "width": self.buffer.width if self.loaded else None,
            "height": self.buffer.height if self.loaded else None,
            "state": self.state.value,
            "can_undo": self.can_undo(),
            "can_redo": self.can_redo(),
            "history_depth": len(self.history),
        }
