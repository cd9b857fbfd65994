# clipkeep/services/clipboard_utils.py
"""
Clipboard text backends used by the watcher and by history selection.

A backend exposes two calls:
- read_text() -> Optional[str]: None when the clipboard holds no text;
  raises TransientReadFailure when the clipboard cannot be read right now.
- write_text(text): raises ClipboardWriteError on failure.

This module does NOT register hotkeys or simulate paste keystrokes.
"""

from __future__ import annotations

import ctypes
import logging
import sys
import threading
import time
from typing import Optional, Protocol

import pyperclip

from clipkeep.services.exceptions import ClipboardWriteError, TransientReadFailure

logger = logging.getLogger(__name__)

_IS_WINDOWS = hasattr(ctypes, "WinDLL") and sys.platform == "win32"


class ClipboardBackend(Protocol):
    def read_text(self) -> Optional[str]: ...

    def write_text(self, text: str) -> None: ...


class MemoryClipboard:
    """In-process clipboard for tests and headless runs."""

    def __init__(self, text: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self._text = text
        self.fail_reads = False
        self.fail_writes = False
        self.write_count = 0

    def read_text(self) -> Optional[str]:
        with self._lock:
            if self.fail_reads:
                raise TransientReadFailure("clipboard busy")
            return self._text

    def write_text(self, text: str) -> None:
        with self._lock:
            if self.fail_writes:
                raise ClipboardWriteError("clipboard locked by another process")
            self._text = text
            self.write_count += 1

    def set_external(self, text: Optional[str]) -> None:
        """Simulate another application changing the clipboard."""
        with self._lock:
            self._text = text


class PyperclipClipboard:
    """Cross-platform backend on top of pyperclip (pbcopy, xclip, wl-clipboard...)."""

    def read_text(self) -> Optional[str]:
        try:
            text = pyperclip.paste()
        except pyperclip.PyperclipException as e:
            raise TransientReadFailure(str(e)) from e
        if not isinstance(text, str):
            return None
        return text

    def write_text(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardWriteError(str(e)) from e
        logger.debug("Set clipboard text via pyperclip (len=%d)", len(text))


if not _IS_WINDOWS:

    class Win32Clipboard:
        """Placeholder that prevents Windows-only clipboard code from loading."""

        def __init__(self, *_: object, **__: object) -> None:
            raise OSError("Win32Clipboard is only available on Windows platforms.")

        def read_text(self) -> Optional[str]:  # pragma: no cover
            return None

        def write_text(self, text: str) -> None:  # pragma: no cover
            _ = text
else:
    import ctypes.wintypes

    CF_UNICODETEXT = 13
    GMEM_MOVEABLE = 0x0002
    GMEM_ZEROINIT = 0x0040

    # Keep retries short: reads run on every poll tick
    OPEN_RETRY_COUNT = 3
    OPEN_RETRY_DELAY_SEC = 0.02

    _user32 = ctypes.WinDLL("user32", use_last_error=True)
    _kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)

    _user32.OpenClipboard.argtypes = [ctypes.wintypes.HWND]
    _user32.OpenClipboard.restype = ctypes.wintypes.BOOL
    _user32.CloseClipboard.argtypes = []
    _user32.CloseClipboard.restype = ctypes.wintypes.BOOL
    _user32.EmptyClipboard.argtypes = []
    _user32.EmptyClipboard.restype = ctypes.wintypes.BOOL
    _user32.IsClipboardFormatAvailable.argtypes = [ctypes.wintypes.UINT]
    _user32.IsClipboardFormatAvailable.restype = ctypes.wintypes.BOOL
    _user32.GetClipboardData.argtypes = [ctypes.wintypes.UINT]
    _user32.GetClipboardData.restype = ctypes.wintypes.HANDLE
    _user32.SetClipboardData.argtypes = [ctypes.wintypes.UINT, ctypes.wintypes.HANDLE]
    _user32.SetClipboardData.restype = ctypes.wintypes.HANDLE

    _kernel32.GlobalAlloc.argtypes = [ctypes.wintypes.UINT, ctypes.c_size_t]
    _kernel32.GlobalAlloc.restype = ctypes.wintypes.HGLOBAL
    _kernel32.GlobalLock.argtypes = [ctypes.wintypes.HGLOBAL]
    _kernel32.GlobalLock.restype = ctypes.wintypes.LPVOID
    _kernel32.GlobalUnlock.argtypes = [ctypes.wintypes.HGLOBAL]
    _kernel32.GlobalUnlock.restype = ctypes.wintypes.BOOL
    _kernel32.GlobalSize.argtypes = [ctypes.wintypes.HGLOBAL]
    _kernel32.GlobalSize.restype = ctypes.c_size_t
    _kernel32.GlobalFree.argtypes = [ctypes.wintypes.HGLOBAL]
    _kernel32.GlobalFree.restype = ctypes.wintypes.HGLOBAL

    def _open_clipboard() -> bool:
        for attempt in range(OPEN_RETRY_COUNT):
            if attempt:
                time.sleep(OPEN_RETRY_DELAY_SEC)
            if _user32.OpenClipboard(None):
                return True
        return False

    class Win32Clipboard:
        """CF_UNICODETEXT clipboard access through user32/kernel32."""

        def read_text(self) -> Optional[str]:
            if not _open_clipboard():
                raise TransientReadFailure(
                    f"OpenClipboard failed (error: {ctypes.get_last_error()})"
                )
            try:
                if not _user32.IsClipboardFormatAvailable(CF_UNICODETEXT):
                    return None

                handle = _user32.GetClipboardData(CF_UNICODETEXT)
                if not handle:
                    raise TransientReadFailure(
                        f"GetClipboardData returned null (error: {ctypes.get_last_error()})"
                    )

                ptr = _kernel32.GlobalLock(handle)
                if not ptr:
                    raise TransientReadFailure(
                        f"GlobalLock failed (error: {ctypes.get_last_error()})"
                    )
                try:
                    size = _kernel32.GlobalSize(handle)
                    if size == 0:
                        return None
                    text = ctypes.wstring_at(ptr, size // 2)
                    if "\x00" in text:
                        text = text.split("\x00")[0]
                    return text
                finally:
                    _kernel32.GlobalUnlock(handle)
            finally:
                _user32.CloseClipboard()

        def write_text(self, text: str) -> None:
            encoded = (text + "\0").encode("utf-16-le")
            size = len(encoded)
            h_mem = _kernel32.GlobalAlloc(GMEM_MOVEABLE | GMEM_ZEROINIT, size)
            if not h_mem:
                raise ClipboardWriteError(
                    f"GlobalAlloc failed (error: {ctypes.get_last_error()})"
                )

            ptr = _kernel32.GlobalLock(h_mem)
            if not ptr:
                error_code = ctypes.get_last_error()
                _kernel32.GlobalFree(h_mem)
                raise ClipboardWriteError(f"GlobalLock failed (error: {error_code})")
            try:
                ctypes.memmove(ptr, encoded, size)
            finally:
                _kernel32.GlobalUnlock(h_mem)

            if not _open_clipboard():
                error_code = ctypes.get_last_error()
                _kernel32.GlobalFree(h_mem)
                raise ClipboardWriteError(f"OpenClipboard failed (error: {error_code})")
            try:
                if not _user32.EmptyClipboard() or not _user32.SetClipboardData(
                    CF_UNICODETEXT, h_mem
                ):
                    error_code = ctypes.get_last_error()
                    # Ownership only transfers on a successful SetClipboardData
                    _kernel32.GlobalFree(h_mem)
                    raise ClipboardWriteError(
                        f"SetClipboardData failed (error: {error_code})"
                    )
            finally:
                _user32.CloseClipboard()
            logger.debug("Successfully set clipboard text (len=%d)", len(text))


def get_default_clipboard() -> ClipboardBackend:
    """Pick the native backend for this platform."""
    if _IS_WINDOWS:
        return Win32Clipboard()
    return PyperclipClipboard()
