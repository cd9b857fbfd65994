# clipkeep/ui/tray.py
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from clipkeep.services.history_engine import HistoryEngine

logger = logging.getLogger(__name__)

TRAY_RECENT_COUNT = 10
ICON_SIZE = 64


def _build_icon_image():
    from PIL import Image, ImageDraw

    image = Image.new("RGBA", (ICON_SIZE, ICON_SIZE), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    # Clipboard board + clip
    draw.rounded_rectangle((10, 8, 54, 60), radius=6, fill=(52, 101, 164, 255))
    draw.rectangle((22, 4, 42, 14), fill=(200, 200, 200, 255))
    for y in (24, 34, 44):
        draw.line((18, y, 46, y), fill=(255, 255, 255, 255), width=3)
    return image


class TrayIcon:
    """
    System tray entry for the background process.

    Shows the entry count, the most recent entries (clicking one selects
    it) and Clear/Exit actions.
    """

    def __init__(
        self,
        engine: "HistoryEngine",
        *,
        on_exit: Optional[Callable[[], None]] = None,
    ) -> None:
        self._engine = engine
        self._on_exit_callback = on_exit
        self._icon = None
        self._status_text = "ClipKeep"

    @property
    def is_running(self) -> bool:
        return self._icon is not None

    def start(self) -> None:
        if self._icon is not None:
            return
        try:
            import pystray
        except Exception as exc:
            logger.debug("Tray icon unavailable: %s", exc)
            return
        try:
            image = _build_icon_image()
        except Exception as exc:
            logger.debug("Tray icon image failed: %s", exc)
            return

        def _status_label(_item) -> str:
            return self._status_text

        menu = pystray.Menu(
            pystray.MenuItem(_status_label, lambda *_: None, enabled=False),
            pystray.MenuItem("Recent", pystray.Menu(self._recent_items)),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Clear history", self._on_clear),
            pystray.MenuItem("Exit", self._on_exit),
        )
        self._icon = pystray.Icon("ClipKeep", image, "ClipKeep", menu)
        self.refresh()
        try:
            self._icon.run_detached()
        except Exception as exc:
            logger.debug("Tray icon start failed: %s", exc)
            self._icon = None

    def stop(self) -> None:
        icon = self._icon
        self._icon = None
        if icon is None:
            return
        try:
            icon.stop()
        except Exception as exc:
            logger.debug("Tray icon stop failed: %s", exc)

    def refresh(self) -> None:
        """Update the status label; call after history changes."""
        self._status_text = self._get_status_text()
        if self._icon is None:
            return
        self._icon.title = f"ClipKeep - {self._status_text}"
        try:
            self._icon.update_menu()
        except Exception:
            pass

    def _get_status_text(self) -> str:
        if not self._engine.is_running:
            return "History: stopped"
        try:
            count = len(self._engine.list())
        except Exception as exc:
            logger.debug("Tray status read failed: %s", exc)
            return "History: unknown"
        return f"History: {count} entries"

    def _recent_items(self):
        import pystray

        if not self._engine.is_running:
            return [pystray.MenuItem("(stopped)", lambda *_: None, enabled=False)]
        try:
            entries = self._engine.list()[:TRAY_RECENT_COUNT]
        except Exception as exc:
            logger.debug("Tray recent read failed: %s", exc)
            entries = []
        if not entries:
            return [pystray.MenuItem("(empty)", lambda *_: None, enabled=False)]

        items = []
        for entry in entries:
            label = entry.preview[:48] or "(blank)"
            items.append(pystray.MenuItem(label, self._make_select_action(entry.content)))
        return items

    def _make_select_action(self, content: str):
        # Bound to the content shown, not the row; history may shift before the click
        def _action(_icon, _item) -> None:
            try:
                self._engine.select(content)
            except Exception as exc:
                logger.debug("Tray select failed: %s", exc)

        return _action

    def _on_clear(self, _icon, _item) -> None:
        try:
            self._engine.clear()
        except Exception as exc:
            logger.debug("Tray clear failed: %s", exc)

    def _on_exit(self, _icon, _item) -> None:
        callback = self._on_exit_callback
        if callback is not None:
            callback()
