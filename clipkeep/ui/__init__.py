"""
UI integrations for ClipKeep (system tray).

The tray is imported lazily because pystray needs a desktop session.
"""
