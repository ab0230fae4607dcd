"""
Bounded undo/redo history of full buffer snapshots.
"""

from typing import List, Optional

import structlog

from .raster import RasterBuffer

logger = structlog.get_logger()

DEFAULT_CAPACITY = 50


class HistoryManager:
    """
    Linear undo/redo stack with FIFO eviction.

    Snapshots are independent copies, so later edits to the live buffer
    never reach them. Once the stack is full, each commit evicts the
    oldest entry and the cursor stays put, still pointing at the newest.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self.snapshots: List[RasterBuffer] = []
        self.cursor = -1

    def reset(self, initial: RasterBuffer) -> None:
        self.snapshots = [initial.copy()]
        self.cursor = 0

    def commit(self, buffer: RasterBuffer) -> None:
        """Record a new state, discarding any redo branch."""
        del self.snapshots[self.cursor + 1:]
        self.snapshots.append(buffer.copy())

        if len(self.snapshots) > self.capacity:
            self.snapshots.pop(0)
        else:
            self.cursor += 1

        logger.debug("History committed", cursor=self.cursor, depth=len(self.snapshots))

    def undo(self) -> Optional[RasterBuffer]:
        if not self.can_undo():
            return None
        self.cursor -= 1
        return self.snapshots[self.cursor].copy()

    def redo(self) -> Optional[RasterBuffer]:
        if not self.can_redo():
            return None
        self.cursor += 1
        return self.snapshots[self.cursor].copy()

    def can_undo(self) -> bool:
        return self.cursor > 0

    def can_redo(self) -> bool:
        return self.cursor < len(self.snapshots) - 1

    def current(self) -> Optional[RasterBuffer]:
        """Copy of the snapshot under the cursor, for inspection; undo and redo do not use it."""
        if self.cursor < 0:
            return None
        return self.snapshots[self.cursor].copy()

    def __len__(self) -> int:
        return len(self.snapshots)
