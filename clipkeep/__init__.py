# clipkeep/__init__.py
"""
ClipKeep - Clipboard History Utility

Watches the clipboard in the background and keeps a bounded, deduplicated
history of copied text that can be written back on demand.
"""

from pathlib import Path


def _get_version() -> str:
    """
    Read the version from pyproject.toml so source checkouts report the
    same version as installed builds.
    """
    try:
        import tomllib  # Python 3.11+ standard library

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
            return data.get("project", {}).get("version", "0.0.0")
    except Exception:
        pass

    try:
        from importlib.metadata import version

        return version("clipkeep")
    except Exception:
        return "0.1.0"


__version__ = _get_version()
__app_name__ = "ClipKeep"
