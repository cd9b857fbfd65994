# tests/test_settings.py
"""
Tests for AppSettings loading, validation and caching.
"""

import json

import pytest

from clipkeep.config.settings import (
    AppSettings,
    get_app_dir,
    get_default_settings_path,
    invalidate_settings_cache,
)


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "config" / "settings.json"


def write_settings(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


class TestAppSettings:

    def test_defaults_when_file_missing(self, settings_path):
        settings = AppSettings.load(settings_path)
        assert settings.poll_interval_sec == 0.3
        assert settings.save_debounce_sec == 1.0
        assert settings.history_path is None
        assert settings.ignore_blank_content is False
        assert settings.get_history_path() is None

    def test_known_keys_loaded_unknown_ignored(self, settings_path):
        write_settings(settings_path, {
            "poll_interval_sec": 0.5,
            "ignore_blank_content": True,
            "window_width": 800,
        })
        settings = AppSettings.load(settings_path)
        assert settings.poll_interval_sec == 0.5
        assert settings.ignore_blank_content is True
        assert not hasattr(settings, "window_width")

    def test_malformed_file_falls_back_to_defaults(self, settings_path):
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text("{oops", encoding="utf-8")
        assert AppSettings.load(settings_path) == AppSettings()

    def test_non_object_file_falls_back_to_defaults(self, settings_path):
        write_settings(settings_path, [1, 2, 3])
        assert AppSettings.load(settings_path) == AppSettings()

    @pytest.mark.parametrize("value,expected", [(0.001, 0.05), (99, 5.0), ("fast", 0.3)])
    def test_poll_interval_is_clamped(self, settings_path, value, expected):
        write_settings(settings_path, {"poll_interval_sec": value})
        assert AppSettings.load(settings_path, use_cache=False).poll_interval_sec == expected

    def test_invalid_max_content_chars_is_reset(self, settings_path):
        write_settings(settings_path, {"max_content_chars": -4})
        assert AppSettings.load(settings_path).max_content_chars == 1_000_000

    def test_history_path_expands_user(self, settings_path):
        write_settings(settings_path, {"history_path": "~/clips.json"})
        path = AppSettings.load(settings_path).get_history_path()
        assert path.name == "clips.json"
        assert "~" not in str(path)

    def test_save_and_reload(self, settings_path):
        settings = AppSettings(poll_interval_sec=1.5, show_tray_icon=False)
        settings.save(settings_path)
        invalidate_settings_cache()
        loaded = AppSettings.load(settings_path)
        assert loaded.poll_interval_sec == 1.5
        assert loaded.show_tray_icon is False

    def test_cache_returns_same_instance(self, settings_path):
        write_settings(settings_path, {"poll_interval_sec": 0.4})
        assert AppSettings.load(settings_path) is AppSettings.load(settings_path)

    def test_app_dir_override(self, clipkeep_home):
        assert get_app_dir() == clipkeep_home
        assert get_default_settings_path() == clipkeep_home / "settings.json"
