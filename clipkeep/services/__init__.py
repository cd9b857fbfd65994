# clipkeep/services/__init__.py
"""
Service layer for ClipKeep.

Services are lazy-loaded so that importing the package does not pull in
clipboard backends. Use explicit imports like:
    from clipkeep.services.history_engine import HistoryEngine
"""

# Lazy-loaded services via __getattr__
_LAZY_IMPORTS = {
    'HistoryEngine': 'history_engine',
    'ClipboardWatcher': 'clipboard_watcher',
    'DebouncedCall': 'debounce',
    'MemoryClipboard': 'clipboard_utils',
    'PyperclipClipboard': 'clipboard_utils',
    'get_default_clipboard': 'clipboard_utils',
}

# Submodules that can be accessed via __getattr__ (for patching support)
_SUBMODULES = {'history_engine', 'clipboard_watcher', 'clipboard_utils', 'debounce', 'exceptions'}


def __getattr__(name: str):
    """Lazy-load service modules on first access."""
    import importlib
    # Support accessing submodules directly (for unittest.mock.patch)
    if name in _SUBMODULES:
        return importlib.import_module(f'.{name}', __package__)
    if name in _LAZY_IMPORTS:
        module_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(f'.{module_name}', __package__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'HistoryEngine',
    'ClipboardWatcher',
    'DebouncedCall',
    'MemoryClipboard',
    'PyperclipClipboard',
    'get_default_clipboard',
]
