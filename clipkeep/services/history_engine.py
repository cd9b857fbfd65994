# clipkeep/services/history_engine.py
"""
History engine: owns the clipboard history and drives the poll loop.

Lifecycle: STOPPED -> STARTING -> RUNNING -> STOPPING -> STOPPED.

Threads:
- clipkeep_poll: calls on_tick() every poll interval
- clipkeep_save: debounced checkpoint writes
- callers (UI/tray): list(), select(), remove(), ...

Every HistoryStore call happens inside self._lock and no I/O is done while
holding it. Saves copy the entries under the lock and write outside it.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from clipkeep.config.settings import (
    DEFAULT_POLL_INTERVAL_SEC,
    DEFAULT_SAVE_DEBOUNCE_SEC,
    AppSettings,
)
from clipkeep.models.types import ClipboardSnapshot, EngineState
from clipkeep.services.clipboard_utils import ClipboardBackend, get_default_clipboard
from clipkeep.services.clipboard_watcher import DEFAULT_MAX_CONTENT_CHARS, ClipboardWatcher
from clipkeep.services.debounce import DebouncedCall
from clipkeep.services.exceptions import ClipboardWriteError, EngineStateError
from clipkeep.storage.history_file import HistoryFile
from clipkeep.storage.history_store import MAX_HISTORY_SIZE, HistoryStore

logger = logging.getLogger(__name__)

SHUTDOWN_JOIN_TIMEOUT_SEC = 2.0


class HistoryEngine:
    """Clipboard history service consumed by the UI and hotkey layers."""

    def __init__(
        self,
        clipboard: ClipboardBackend,
        history_file: Optional[HistoryFile] = None,
        *,
        poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC,
        save_debounce_sec: float = DEFAULT_SAVE_DEBOUNCE_SEC,
        ignore_blank: bool = False,
        max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS,
        clock: Callable[[], float] = time.time,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._clipboard = clipboard
        self._file = history_file if history_file is not None else HistoryFile()
        self._poll_interval_sec = poll_interval_sec
        self._clock = clock
        self._on_change = on_change

        self._store = HistoryStore(MAX_HISTORY_SIZE)
        self._lock = threading.Lock()
        # Serializes watcher polls with self-writes from select()
        self._tick_lock = threading.Lock()
        self._state_lock = threading.Lock()
        # Orders snapshot+write pairs so the newest copy is written last
        self._save_lock = threading.Lock()
        self._state = EngineState.STOPPED

        self._watcher = ClipboardWatcher(
            clipboard,
            latest=self._latest_content,
            clock=clock,
            ignore_blank=ignore_blank,
            max_content_chars=max_content_chars,
        )
        self._saver = DebouncedCall(self._save_now, save_debounce_sec, name="clipkeep_save")
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        clipboard: Optional[ClipboardBackend] = None,
        **kwargs,
    ) -> "HistoryEngine":
        return cls(
            clipboard if clipboard is not None else get_default_clipboard(),
            HistoryFile(settings.get_history_path()),
            poll_interval_sec=settings.poll_interval_sec,
            save_debounce_sec=settings.save_debounce_sec,
            ignore_blank=settings.ignore_blank_content,
            max_content_chars=settings.max_content_chars,
            **kwargs,
        )

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is EngineState.RUNNING

    @property
    def history_path(self):
        return self._file.path

    def set_on_change(self, callback: Optional[Callable[[], None]]) -> None:
        self._on_change = callback

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Restore persisted history and start the poll loop."""
        with self._state_lock:
            if self._state is not EngineState.STOPPED:
                logger.warning("History engine already %s", self._state.value)
                return
            self._state = EngineState.STARTING

            entries = self._file.load()
            with self._lock:
                self._store.restore(entries)
                count = len(self._store)
            self._watcher.reset()

            self._stop_event.clear()
            self._state = EngineState.RUNNING
            self._thread = threading.Thread(
                target=self._poll_loop,
                daemon=True,
                name="clipkeep_poll",
            )
            self._thread.start()
        logger.info(
            "History engine started (%d entries, poll=%.2fs)", count, self._poll_interval_sec
        )

    def shutdown(self) -> None:
        """Stop polling and write a final checkpoint."""
        with self._state_lock:
            if self._state is not EngineState.RUNNING:
                logger.debug("History engine shutdown ignored (state=%s)", self._state.value)
                return
            self._state = EngineState.STOPPING
            try:
                self._stop_event.set()

                if self._thread:
                    self._thread.join(timeout=SHUTDOWN_JOIN_TIMEOUT_SEC)
                    if self._thread.is_alive():
                        logger.debug("Poll thread did not stop in time")
                    self._thread = None

                self._saver.cancel()
                self._save_now()
            finally:
                self._state = EngineState.STOPPED
        logger.info("History engine stopped")

    def _poll_loop(self) -> None:
        while not self._stop_event.wait(self._poll_interval_sec):
            try:
                self.on_tick()
            except Exception as exc:
                logger.warning("Clipboard poll tick failed: %s", exc)

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def on_tick(self) -> bool:
        """Poll the clipboard once. Returns True if history changed."""
        if self._state is not EngineState.RUNNING:
            return False
        with self._tick_lock:
            snapshot = self._watcher.poll()
            if snapshot is None:
                return False
            with self._lock:
                changed = self._store.insert(snapshot)
        if changed:
            self._saver.trigger()
            self._notify_change()
        return changed

    def _latest_content(self) -> Optional[str]:
        with self._lock:
            latest = self._store.latest()
        return latest.content if latest is not None else None

    # ------------------------------------------------------------------
    # Query / selection API
    # ------------------------------------------------------------------

    def _require_running(self, operation: str) -> None:
        if self._state is not EngineState.RUNNING:
            raise EngineStateError(
                f"{operation}() requires a running engine (state={self._state.value})"
            )

    def list(self) -> list[ClipboardSnapshot]:
        """Current history, most recent first."""
        self._require_running("list")
        with self._lock:
            return self._store.entries()[:MAX_HISTORY_SIZE]

    def search(self, query: str, limit: int = 20) -> list[ClipboardSnapshot]:
        self._require_running("search")
        with self._lock:
            return self._store.search(query, limit)

    def select(self, content: str) -> bool:
        """
        Write content back to the clipboard and move it to the front.

        The watcher is primed with the content so the next poll does not
        count our own write as a new copy.

        Returns:
            False if the content is empty or the clipboard write failed.
        """
        self._require_running("select")
        if not content:
            logger.debug("Ignoring selection of empty content")
            return False

        with self._tick_lock:
            try:
                self._clipboard.write_text(content)
            except ClipboardWriteError as e:
                logger.warning("Failed to write selection to clipboard: %s", e)
                return False
            self._watcher.prime(content)
            with self._lock:
                changed = self._store.insert(
                    ClipboardSnapshot(content=content, captured_at=self._clock())
                )

        logger.info("Set clipboard content from history (len=%d)", len(content))
        if changed:
            self._saver.trigger()
            self._notify_change()
        return True

    def select_index(self, index: int) -> bool:
        """Select the entry at a list() row index."""
        self._require_running("select_index")
        with self._lock:
            entry = self._store.get(index)
        if entry is None:
            logger.debug("No history entry at index %d", index)
            return False
        return self.select(entry.content)

    def remove(self, content: str) -> bool:
        self._require_running("remove")
        with self._lock:
            removed = self._store.remove(content)
        if removed:
            self._saver.trigger()
            self._notify_change()
        return removed

    def clear(self) -> int:
        self._require_running("clear")
        with self._lock:
            count = self._store.clear()
        if count:
            logger.info("Cleared %d history entries", count)
            self._saver.trigger()
            self._notify_change()
        return count

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def flush(self) -> bool:
        """Write the current history now, dropping any pending debounced save."""
        self._saver.cancel()
        return self._save_now()

    def _save_now(self) -> bool:
        with self._save_lock:
            with self._lock:
                entries = self._store.entries()
            return self._file.save(entries)

    def _notify_change(self) -> None:
        callback = self._on_change
        if callback is None:
            return
        try:
            callback()
        except Exception as exc:
            logger.debug("History change callback failed: %s", exc)
