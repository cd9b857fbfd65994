from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Ensure the project root is importable when running `pytest` via its entrypoint
# (e.g., `pip install -e .[test] && pytest`), where `sys.path[0]` may not be the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def clipkeep_home(tmp_path, monkeypatch):
    """Redirect the per-user data directory so tests never touch ~/.clipkeep"""
    from clipkeep.config.settings import APP_DIR_ENV, invalidate_settings_cache

    home = tmp_path / "clipkeep_home"
    monkeypatch.setenv(APP_DIR_ENV, str(home))
    invalidate_settings_cache()
    yield home
    invalidate_settings_cache()


class FakeClock:
    """Monotonically increasing clock for deterministic timestamps"""

    def __init__(self, start: float = 1000.0, step: float = 1.0):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture
def clock():
    return FakeClock()
