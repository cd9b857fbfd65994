# clipkeep/storage/history_store.py
"""
Bounded, deduplicated, most-recently-used-first clipboard history.

Pure collection logic: no file access, no clock, no locking. The owning
HistoryEngine serializes access.
"""

import logging
from typing import Iterable, Optional

from clipkeep.models.types import ClipboardSnapshot

# Module logger
logger = logging.getLogger(__name__)

MAX_HISTORY_SIZE = 50


class HistoryStore:
    """
    In-memory clipboard history.

    Invariants held after every mutation:
    - at most ``capacity`` entries
    - no two entries with equal content
    - index 0 is the most recently observed entry
    """

    def __init__(self, capacity: int = MAX_HISTORY_SIZE):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: list[ClipboardSnapshot] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, content: object) -> bool:
        return self._index_of(content) is not None

    def _index_of(self, content: object) -> Optional[int]:
        # Linear scan is fine at this capacity
        for i, entry in enumerate(self._entries):
            if entry.content == content:
                return i
        return None

    def insert(self, snapshot: ClipboardSnapshot) -> bool:
        """
        Record a snapshot.

        Existing content is moved to the front with the new timestamp; new
        content is prepended and the least recent entry is evicted if the
        store is over capacity.

        Returns:
            True if ordering, content or a timestamp changed.
        """
        index = self._index_of(snapshot.content)
        if index is not None:
            existing = self._entries[index]
            if index == 0 and existing.captured_at == snapshot.captured_at:
                return False
            del self._entries[index]
            self._entries.insert(0, snapshot)
            return True

        self._entries.insert(0, snapshot)
        if len(self._entries) > self.capacity:
            evicted = self._entries.pop()
            logger.debug("Evicted oldest entry (len=%d)", len(evicted.content))
        return True

    def entries(self) -> list[ClipboardSnapshot]:
        """Return a copy of the entries, most recent first"""
        return list(self._entries)

    def latest(self) -> Optional[ClipboardSnapshot]:
        return self._entries[0] if self._entries else None

    def get(self, index: int) -> Optional[ClipboardSnapshot]:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def remove(self, content: str) -> bool:
        """Remove the entry with matching content. Returns False if absent."""
        index = self._index_of(content)
        if index is None:
            return False
        del self._entries[index]
        return True

    def clear(self) -> int:
        """Remove all entries. Returns the number removed."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def search(self, query: str, limit: int = 20) -> list[ClipboardSnapshot]:
        """Case-insensitive substring search, most recent first"""
        needle = query.casefold()
        matches = [e for e in self._entries if needle in e.content.casefold()]
        return matches[:max(0, limit)]

    def restore(self, snapshots: Iterable[ClipboardSnapshot]) -> None:
        """
        Replace all entries with a persisted sequence.

        The sequence is expected most-recent first. Duplicates keep their
        first (most recent) occurrence, empty contents are dropped and the
        result is truncated to capacity.
        """
        restored: list[ClipboardSnapshot] = []
        seen: set[str] = set()
        dropped = 0
        for snapshot in snapshots:
            if not snapshot.content or snapshot.content in seen:
                dropped += 1
                continue
            seen.add(snapshot.content)
            restored.append(snapshot)

        if len(restored) > self.capacity:
            dropped += len(restored) - self.capacity
            del restored[self.capacity:]

        if dropped:
            logger.warning(
                "Restored history was repaired: dropped %d duplicate, empty or excess entries",
                dropped,
            )
        self._entries = restored
