"""System tray integration."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QIcon, QPixmap
from PySide6.QtWidgets import QMenu, QSystemTrayIcon

ICON_PATHS = [
    Path(__file__).resolve().parent.parent / "resources" / "icon.png",
    Path(__file__).resolve().parent.parent / "resources" / "icon.ico",
]


def _load_icon() -> QIcon:
    for path in ICON_PATHS:
        if path.exists():
            return QIcon(str(path))
    icon = QIcon.fromTheme("clock")
    if not icon.isNull():
        return icon
    pixmap = QPixmap(32, 32)
    pixmap.fill(Qt.magenta)
    return QIcon(pixmap)


def create_tray_icon(*, window) -> QSystemTrayIcon:
    """Create the tray icon with its context menu."""

    tray_icon = QSystemTrayIcon(_load_icon(), parent=window)
    tray_icon.setToolTip(window.windowTitle())

    menu = QMenu(window)

    open_action = QAction("Open window", menu)
    stop_action = QAction("Stop all timers", menu)
    quit_action = QAction("Quit", menu)

    open_action.triggered.connect(window.show_from_tray)
    stop_action.triggered.connect(window.stop_all_tracking)
    quit_action.triggered.connect(window.exit_from_tray)

    menu.addAction(open_action)
    menu.addAction(stop_action)
    menu.addSeparator()
    menu.addAction(quit_action)

    def handle_activated(reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.DoubleClick:
            window.show_from_tray()

    tray_icon.activated.connect(handle_activated)
    tray_icon.setContextMenu(menu)
    return tray_icon


__all__ = ["create_tray_icon"]
