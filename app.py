#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
ClipKeep - Clipboard History Utility

Entry point for the background clipboard history process.
"""

import argparse
import logging
import os
import signal
import sys
import threading
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from clipkeep.config.settings import AppSettings, get_app_dir, get_default_settings_path


def setup_logging(debug: bool = False):
    """Configure logging to console and file.

    Log file location: ~/.clipkeep/logs/clipkeep.log (append mode, UTF-8)

    Returns:
        tuple: (console_handler, file_handler) to keep references alive
    """
    logs_dir = get_app_dir() / "logs"
    log_file_path = logs_dir / "clipkeep.log"

    # Create console handler first (always works)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    ))

    # Try to create log directory
    file_handler = None
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # Fall back to console-only logging if log directory cannot be created
        print(f"[WARNING] Failed to create log directory {logs_dir}: {e}", file=sys.stderr)
        logs_dir = None

    if logs_dir is not None:
        try:
            file_handler = logging.FileHandler(
                log_file_path,
                mode='a',
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
        except OSError as e:
            print(f"[WARNING] Failed to create log file {log_file_path}: {e}", file=sys.stderr)
            file_handler = None

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    # Remove existing handlers that might interfere
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)
    if file_handler:
        root_logger.addHandler(file_handler)

    # Suppress verbose logging from third-party libraries
    for name in ['PIL', 'pystray']:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("ClipKeep starting...")
    logger.info("=" * 60)
    logger.info("Executable: %s", sys.executable)
    logger.debug("sys.argv: %s", sys.argv)

    if file_handler:
        logger.info("Log file: %s", log_file_path)
    else:
        logger.warning("File logging disabled - console only")

    return (console_handler, file_handler)


# Global reference to keep log handlers alive (prevents garbage collection)
_global_log_handlers = None
_single_instance_mutex = None


def _ensure_single_instance() -> bool:
    """Return True if this is the primary instance (Windows only)."""
    if sys.platform != "win32":
        return True
    if os.environ.get("CLIPKEEP_ALLOW_MULTI_INSTANCE") == "1":
        return True
    try:
        import ctypes
        from ctypes import wintypes

        kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        kernel32.CreateMutexW.argtypes = [wintypes.LPVOID, wintypes.BOOL, wintypes.LPCWSTR]
        kernel32.CreateMutexW.restype = wintypes.HANDLE

        handle = kernel32.CreateMutexW(None, False, "Local\\ClipKeepSingleton")
        if not handle:
            return True
        if ctypes.get_last_error() == 183:  # ERROR_ALREADY_EXISTS
            kernel32.CloseHandle(handle)
            return False
        global _single_instance_mutex
        _single_instance_mutex = handle
    except Exception:
        return True
    return True


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clipkeep",
        description="Keep a history of copied text in the background.",
    )
    parser.add_argument("--list", action="store_true",
                        help="print the saved history and exit")
    parser.add_argument("--clear", action="store_true",
                        help="erase the saved history and exit")
    parser.add_argument("--no-tray", action="store_true",
                        help="run without the system tray icon")
    parser.add_argument("--debug", action="store_true",
                        help="log debug messages to the console")
    return parser


def _print_history(settings: AppSettings) -> int:
    from clipkeep.storage.history_file import HistoryFile
    from clipkeep.storage.history_store import HistoryStore

    store = HistoryStore()
    store.restore(HistoryFile(settings.get_history_path()).load())
    for index, entry in enumerate(store.entries()):
        print(f"{index:2d}  {entry.preview}")
    return 0


def _clear_history(settings: AppSettings) -> int:
    from clipkeep.storage.history_file import HistoryFile

    if not HistoryFile(settings.get_history_path()).save([]):
        return 1
    print("History cleared.")
    return 0


def run(settings: AppSettings, *, show_tray: bool = True) -> int:
    """Run the history engine until SIGINT/SIGTERM or tray Exit."""
    from clipkeep.services.history_engine import HistoryEngine

    logger = logging.getLogger(__name__)
    stop_event = threading.Event()

    def _request_stop(*_: object) -> None:
        stop_event.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    engine = HistoryEngine.from_settings(settings)
    logger.info("History file: %s", engine.history_path)

    tray = None
    if show_tray:
        from clipkeep.ui.tray import TrayIcon

        tray = TrayIcon(engine, on_exit=stop_event.set)
        engine.set_on_change(tray.refresh)

    engine.start()
    if tray is not None:
        tray.start()

    try:
        while not stop_event.wait(0.5):
            pass
    finally:
        if tray is not None:
            tray.stop()
        engine.shutdown()
    return 0


def main(argv=None) -> int:
    """Main entry point"""
    args = _build_parser().parse_args(argv)

    global _global_log_handlers
    _global_log_handlers = setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    settings = AppSettings.load(get_default_settings_path())

    if args.list:
        return _print_history(settings)
    if args.clear:
        return _clear_history(settings)

    if not _ensure_single_instance():
        logger.warning("ClipKeep is already running")
        return 1

    try:
        return run(settings, show_tray=settings.show_tray_icon and not args.no_tray)
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        raise


if __name__ == '__main__':
    sys.exit(main())
