# clipkeep/services/exceptions.py
"""
Shared exception types for the history engine and its collaborators.

Only EngineStateError and ClipboardWriteError ever reach callers; the other
failure kinds are recovered inside the component where they occur.
"""


class ClipKeepError(Exception):
    """Base class for ClipKeep errors."""

    pass


class TransientReadFailure(ClipKeepError):
    """Raised by a clipboard backend when the clipboard is unreadable this tick."""

    pass


class ClipboardWriteError(ClipKeepError):
    """Raised by a clipboard backend when text could not be written."""

    pass


class PersistenceWriteFailure(ClipKeepError):
    """Raised when a history checkpoint could not be written."""

    pass


class PersistenceLoadCorruption(ClipKeepError):
    """Raised when a history checkpoint exists but cannot be decoded."""

    pass


class EngineStateError(ClipKeepError):
    """Raised when the engine API is used outside the RUNNING state."""

    pass
