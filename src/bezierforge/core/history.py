"""Undo/redo history over the object collection.

The log holds deep-copied snapshots of the full collection. Saving while
the cursor is behind the newest entry discards the redo branch first. The
log is bounded and evicts oldest entries first.
"""

import time
from dataclasses import dataclass, field

import structlog

from bezierforge.domain import BezierObject

logger = structlog.get_logger("bezierforge.history")


def _snapshot(objects: list[BezierObject]) -> list[BezierObject]:
    return [obj.copy() for obj in objects]


@dataclass
class HistoryEntry:
    """One undoable snapshot.

    Attributes:
        objects: Deep copy of the collection at save time
        timestamp: Wall-clock time of the save
    """

    objects: list[BezierObject]
    timestamp: float = field(default_factory=time.time)


class HistoryManager:
    """Bounded snapshot log with a cursor.

    Restored collections are copied out of the log, so mutating them never
    alters a recorded entry.
    """

    def __init__(self, max_entries: int = 50) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._max_entries = max_entries
        self._entries: list[HistoryEntry] = []
        self._index = -1

    def save(self, objects: list[BezierObject]) -> None:
        """Record a snapshot of the collection.

        Args:
            objects: Current collection, copied before storing
        """
        if self._index < len(self._entries) - 1:
            discarded = len(self._entries) - 1 - self._index
            del self._entries[self._index + 1 :]
            logger.debug("Redo branch discarded", entries=discarded)

        self._entries.append(HistoryEntry(objects=_snapshot(objects)))
        if len(self._entries) > self._max_entries:
            evicted = len(self._entries) - self._max_entries
            del self._entries[:evicted]
        self._index = len(self._entries) - 1

    def undo(self) -> list[BezierObject] | None:
        """Step back one entry.

        Returns:
            Copy of the previous collection, or None at the oldest entry
        """
        if not self.can_undo:
            return None
        self._index -= 1
        return _snapshot(self._entries[self._index].objects)

    def redo(self) -> list[BezierObject] | None:
        """Step forward one entry.

        Returns:
            Copy of the next collection, or None at the newest entry
        """
        if not self.can_redo:
            return None
        self._index += 1
        return _snapshot(self._entries[self._index].objects)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
        self._index = -1

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    @property
    def current(self) -> HistoryEntry | None:
        """Entry under the cursor, None when empty."""
        return self._entries[self._index] if self._entries else None

    @property
    def index(self) -> int:
        """Cursor position, -1 when empty."""
        return self._index

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def entries(self) -> list[HistoryEntry]:
        """Recorded entries, oldest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
