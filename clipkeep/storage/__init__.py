# clipkeep/storage/__init__.py
"""
Storage module for ClipKeep.
Holds the in-memory history and its on-disk checkpoint.
"""

from clipkeep.storage.history_store import HistoryStore, MAX_HISTORY_SIZE
from clipkeep.storage.history_file import HistoryFile, get_default_history_path

__all__ = ['HistoryStore', 'MAX_HISTORY_SIZE', 'HistoryFile', 'get_default_history_path']
