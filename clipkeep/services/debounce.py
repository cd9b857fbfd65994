# clipkeep/services/debounce.py
"""Coalesce bursts of triggers into one deferred call."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DebouncedCall:
    """
    Run ``func`` at most once per ``delay_sec`` window.

    trigger() arms a timer if none is pending; further triggers inside the
    window are absorbed by the pending run. flush() runs immediately.
    """

    def __init__(self, func: Callable[[], object], delay_sec: float, *, name: str = "debounce") -> None:
        self._func = func
        self._delay_sec = max(0.0, float(delay_sec))
        self._name = name
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                return
            timer = threading.Timer(self._delay_sec, self._fire)
            timer.daemon = True
            timer.name = self._name
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        with self._lock:
            timer = self._timer
            self._timer = None
        if timer is not None:
            timer.cancel()

    def flush(self) -> None:
        """Cancel any pending run and call func now on this thread."""
        self.cancel()
        self._run()

    def _fire(self) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                # Cancelled after this timer already started firing
                return
            self._timer = None
        self._run()

    def _run(self) -> None:
        try:
            self._func()
        except Exception as exc:
            logger.warning("%s callback failed: %s", self._name, exc)
