# clipkeep/storage/history_file.py
"""
JSON checkpoint file for clipboard history.

Each save rewrites the whole history through a temp file in the same
directory followed by os.replace(), so an interrupted write leaves the
previous checkpoint intact.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Iterable, Optional

from clipkeep.config.settings import get_app_dir
from clipkeep.models.types import ClipboardSnapshot
from clipkeep.services.exceptions import (
    PersistenceLoadCorruption,
    PersistenceWriteFailure,
)

# Module logger
logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
CORRUPT_SUFFIX = ".corrupt"


def get_default_history_path() -> Path:
    """Get default history file path in the user's data directory"""
    data_dir = get_app_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / 'history.json'


class HistoryFile:
    """
    Durable checkpoint/restore of clipboard history.

    Holds no reference to the live store: save() receives a materialized
    sequence and load() returns a fresh list.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else get_default_history_path()
        self._lock = threading.Lock()

    def save(self, entries: Iterable[ClipboardSnapshot]) -> bool:
        """
        Write the full history atomically.

        Returns False (after logging) when the write failed; the previous
        checkpoint is left untouched in that case.
        """
        payload = {
            "version": SCHEMA_VERSION,
            "entries": [entry.to_dict() for entry in entries],
        }
        with self._lock:
            try:
                self._write_atomic(json.dumps(payload, indent=1))
            except PersistenceWriteFailure as e:
                logger.warning("Failed to save clipboard history: %s", e)
                return False
        logger.debug("Saved %d history entries to %s", len(payload["entries"]), self.path)
        return True

    def _write_atomic(self, text: str) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, ValueError) as e:
            raise PersistenceWriteFailure(f"{self.path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def load(self) -> list[ClipboardSnapshot]:
        """
        Read the last checkpoint.

        Returns an empty list if there is no checkpoint or it cannot be
        decoded. A corrupt file is moved aside so it is not overwritten.
        """
        with self._lock:
            if not self.path.exists():
                logger.info("No existing clipboard history found")
                return []
            try:
                entries = self._read()
            except PersistenceLoadCorruption as e:
                logger.warning("Clipboard history is unreadable, starting empty: %s", e)
                self._quarantine()
                return []
            except OSError as e:
                logger.warning("Failed to read clipboard history: %s", e)
                return []
        logger.info("Loaded %d history entries from %s", len(entries), self.path)
        return entries

    def _read(self) -> list[ClipboardSnapshot]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError and UnicodeDecodeError are ValueErrors;
            # pathological nesting exhausts the parser stack
            raise PersistenceLoadCorruption(f"{type(e).__name__}: {e}") from e

        if isinstance(data, list):
            # Legacy format: bare list of {content, timestamp}
            records = data
        elif isinstance(data, dict):
            version = data.get("version")
            if not isinstance(version, int) or version > SCHEMA_VERSION:
                raise PersistenceLoadCorruption(f"unsupported schema version: {version!r}")
            records = data.get("entries")
            if not isinstance(records, list):
                raise PersistenceLoadCorruption("'entries' is missing or not a list")
        else:
            raise PersistenceLoadCorruption(f"unexpected top-level type {type(data).__name__}")

        entries = []
        for record in records:
            snapshot = ClipboardSnapshot.from_dict(record)
            if snapshot is None:
                logger.debug("Skipping malformed history record (%s)", type(record).__name__)
                continue
            entries.append(snapshot)
        return entries

    def _quarantine(self) -> None:
        target = self.path.with_name(self.path.name + CORRUPT_SUFFIX)
        try:
            os.replace(self.path, target)
            logger.info("Moved unreadable history file to %s", target)
        except OSError as e:
            logger.debug("Failed to move unreadable history file: %s", e)
