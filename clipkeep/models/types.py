# clipkeep/models/types.py
"""
Core data types for ClipKeep.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

PREVIEW_MAX_CHARS = 100


class EngineState(Enum):
    """History engine lifecycle state"""
    STOPPED = "stopped"
    STARTING = "starting"      # Loading persisted history
    RUNNING = "running"        # Poll loop active
    STOPPING = "stopping"      # Final flush in progress


@dataclass(frozen=True)
class ClipboardSnapshot:
    """
    A captured clipboard text value plus its capture time.

    Two snapshots represent the same history entry iff their content is
    exactly equal. No whitespace or case normalization is applied.
    """
    content: str
    captured_at: float  # Epoch seconds

    @property
    def preview(self) -> str:
        """Single-line text for list rendering (does not affect stored content)"""
        text = " ".join(self.content.split())
        if len(text) > PREVIEW_MAX_CHARS:
            return text[:PREVIEW_MAX_CHARS] + "..."
        return text

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "captured_at": self.captured_at}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Optional["ClipboardSnapshot"]:
        """Build a snapshot from a persisted record, or None if malformed.

        Accepts the legacy ``timestamp`` key in place of ``captured_at``.
        """
        if not isinstance(data, dict):
            return None
        content = data.get("content")
        if not isinstance(content, str):
            return None
        raw_time = data.get("captured_at", data.get("timestamp", 0.0))
        try:
            captured_at = float(raw_time)
        except (TypeError, ValueError):
            captured_at = 0.0
        return cls(content=content, captured_at=captured_at)
