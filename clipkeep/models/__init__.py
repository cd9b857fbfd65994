"""
Data models for ClipKeep.
"""

from .types import (
    ClipboardSnapshot,
    EngineState,
)

__all__ = [
    'ClipboardSnapshot',
    'EngineState',
]
