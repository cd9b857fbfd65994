# clipkeep/services/clipboard_watcher.py
"""
Clipboard change detection by polling.

The watcher holds only the last observed content; each poll() compares the
current clipboard text against it. It owns no thread: the caller decides
the cadence.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from clipkeep.models.types import ClipboardSnapshot
from clipkeep.services.clipboard_utils import ClipboardBackend

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTENT_CHARS = 1_000_000


class ClipboardWatcher:
    """Turn clipboard reads into snapshots of changed, non-empty text."""

    def __init__(
        self,
        clipboard: ClipboardBackend,
        *,
        latest: Optional[Callable[[], Optional[str]]] = None,
        clock: Callable[[], float] = time.time,
        ignore_blank: bool = False,
        max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS,
    ) -> None:
        """
        Args:
            clipboard: backend providing read_text()
            latest: returns the content of the most recent history entry;
                matching reads are suppressed
            clock: timestamp source for captured_at
            ignore_blank: treat whitespace-only text as empty
            max_content_chars: longer text is skipped
        """
        self._clipboard = clipboard
        self._latest = latest
        self._clock = clock
        self._ignore_blank = ignore_blank
        self._max_content_chars = max_content_chars
        self._last_seen: Optional[str] = None

    @property
    def last_seen(self) -> Optional[str]:
        return self._last_seen

    def reset(self) -> None:
        self._last_seen = None

    def prime(self, content: str) -> None:
        """Mark content as already observed (used after our own clipboard writes)."""
        self._last_seen = content

    def poll(self) -> Optional[ClipboardSnapshot]:
        """Read the clipboard once.

        Returns a snapshot only when the text differs from the last observed
        value, is non-empty, and is not already the most recent entry.
        """
        try:
            text = self._clipboard.read_text()
        except Exception as exc:
            # Transient: retried on the next tick, last_seen untouched
            logger.debug("Clipboard read failed: %s", exc)
            return None

        if text is None:
            return None

        changed = text != self._last_seen
        self._last_seen = text
        if not changed:
            return None

        if not text or (self._ignore_blank and not text.strip()):
            return None

        if len(text) > self._max_content_chars:
            logger.debug(
                "Clipboard text too large to record (len=%d, max=%d)",
                len(text),
                self._max_content_chars,
            )
            return None

        if self._latest is not None and self._latest() == text:
            logger.debug("Clipboard text matches most recent entry, skipped")
            return None

        logger.debug("Detected clipboard change (len=%d)", len(text))
        return ClipboardSnapshot(content=text, captured_at=self._clock())
