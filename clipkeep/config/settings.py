# clipkeep/config/settings.py
"""
Application settings management for ClipKeep.

Settings live in a single JSON file under the per-user data directory
(~/.clipkeep/settings.json, relocatable with CLIPKEEP_HOME).

Cache:
- _settings_cache: keyed by path, stores (mtime, AppSettings)
- load() returns the cached instance while the file's mtime is unchanged
- save() refreshes the cache
"""

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

# Module logger
logger = logging.getLogger(__name__)

APP_DIR_ENV = "CLIPKEEP_HOME"

# Settings cache: path -> (mtime, AppSettings)
_settings_cache: dict[str, tuple[float, "AppSettings"]] = {}
_settings_cache_lock = threading.Lock()

DEFAULT_POLL_INTERVAL_SEC = 0.3
DEFAULT_SAVE_DEBOUNCE_SEC = 1.0


def get_app_dir() -> Path:
    """Per-user data directory (not created here)"""
    override = os.environ.get(APP_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".clipkeep"


@dataclass
class AppSettings:
    """Application settings"""

    # Watcher
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC   # Clipboard poll cadence
    ignore_blank_content: bool = False     # Treat whitespace-only copies as empty
    max_content_chars: int = 1_000_000     # Larger copies are not recorded

    # Persistence
    save_debounce_sec: float = DEFAULT_SAVE_DEBOUNCE_SEC   # Coalescing window for saves
    history_path: Optional[str] = None     # None = ~/.clipkeep/history.json

    # UI
    show_tray_icon: bool = True

    @classmethod
    def load(cls, path: Path, use_cache: bool = True) -> "AppSettings":
        """Load settings from a JSON file, falling back to defaults.

        Unknown keys are ignored and malformed files are logged, so a broken
        settings file never prevents startup.

        Args:
            path: settings file path
            use_cache: return the cached instance if the file is unchanged
        """
        cache_key = str(path.resolve())
        mtime = path.stat().st_mtime if path.exists() else 0.0

        if use_cache:
            with _settings_cache_lock:
                cached = _settings_cache.get(cache_key)
                if cached is not None and cached[0] == mtime:
                    logger.debug("Using cached settings for: %s", path)
                    return cached[1]

        data = {}
        if path.exists():
            try:
                with open(path, 'r', encoding='utf-8-sig') as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    data = loaded
                    logger.debug("Loaded settings from: %s", path)
                else:
                    logger.warning("Ignoring settings file with non-object content: %s", path)
            except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
                logger.warning("Failed to load settings: %s", e)

        known_fields = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        try:
            settings = cls(**filtered_data)
        except TypeError as e:
            logger.warning("Invalid settings, using defaults: %s", e)
            settings = cls()
        settings._validate()

        with _settings_cache_lock:
            _settings_cache[cache_key] = (mtime, settings)

        return settings

    def _validate(self) -> None:
        """Clamp values into usable ranges. Invalid values are reset with warnings."""
        if not isinstance(self.poll_interval_sec, (int, float)) or isinstance(self.poll_interval_sec, bool):
            logger.warning("poll_interval_sec is not a number, resetting to %.2f", DEFAULT_POLL_INTERVAL_SEC)
            self.poll_interval_sec = DEFAULT_POLL_INTERVAL_SEC
        elif self.poll_interval_sec < 0.05:
            logger.warning("poll_interval_sec too small (%.3f), using 0.05", self.poll_interval_sec)
            self.poll_interval_sec = 0.05
        elif self.poll_interval_sec > 5.0:
            logger.warning("poll_interval_sec too large (%.3f), using 5.0", self.poll_interval_sec)
            self.poll_interval_sec = 5.0

        if not isinstance(self.save_debounce_sec, (int, float)) or isinstance(self.save_debounce_sec, bool):
            logger.warning("save_debounce_sec is not a number, resetting to %.2f", DEFAULT_SAVE_DEBOUNCE_SEC)
            self.save_debounce_sec = DEFAULT_SAVE_DEBOUNCE_SEC
        elif self.save_debounce_sec < 0:
            self.save_debounce_sec = 0.0
        elif self.save_debounce_sec > 30.0:
            logger.warning("save_debounce_sec too large (%.1f), using 30", self.save_debounce_sec)
            self.save_debounce_sec = 30.0

        if not isinstance(self.max_content_chars, int) or self.max_content_chars < 1:
            logger.warning("max_content_chars invalid (%r), resetting to 1000000", self.max_content_chars)
            self.max_content_chars = 1_000_000

        if self.history_path is not None and not isinstance(self.history_path, str):
            logger.warning("history_path must be a string, ignoring %r", self.history_path)
            self.history_path = None

    def get_history_path(self) -> Optional[Path]:
        """Configured history file path, or None for the default location"""
        if self.history_path:
            return Path(self.history_path).expanduser()
        return None

    def save(self, path: Path) -> None:
        """Save settings to JSON and refresh the cache."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(asdict(self), f, indent=2, ensure_ascii=False)

        logger.debug("Saved settings to: %s", path)

        cache_key = str(path.resolve())
        with _settings_cache_lock:
            _settings_cache[cache_key] = (path.stat().st_mtime, self)


def get_default_settings_path() -> Path:
    """Get default settings file path"""
    return get_app_dir() / "settings.json"


def invalidate_settings_cache(path: Optional[Path] = None) -> None:
    """Invalidate settings cache.

    Args:
        path: clear only this path's entry; None clears everything
    """
    with _settings_cache_lock:
        if path is None:
            _settings_cache.clear()
            logger.debug("Cleared all settings cache")
        else:
            cache_key = str(path.resolve())
            if cache_key in _settings_cache:
                del _settings_cache[cache_key]
                logger.debug("Cleared settings cache for: %s", path)
