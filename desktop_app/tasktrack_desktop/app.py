"""Entry point of the desktop application."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication, QMessageBox, QSystemTrayIcon

from tasktrack import services
from tasktrack.config import settings
from tasktrack.errors import SnapshotError
from tasktrack.logging_setup import setup_logging
from tasktrack.state import TrackerState

from .config import load_config
from .widgets.tasks import TaskWindow
from .widgets.tray import create_tray_icon

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the Qt application."""

    setup_logging(log_dir=settings.log_dir, console_level=settings.log_level.upper())
    app = QApplication(sys.argv)
    app.setApplicationName(settings.app_name)
    app.setQuitOnLastWindowClosed(False)
    config = load_config()

    state = TrackerState.from_settings(settings)
    window = TaskWindow(
        state,
        refresh_interval_ms=config.refresh_interval_ms,
        minimize_to_tray=config.minimize_to_tray,
    )
    if QSystemTrayIcon.isSystemTrayAvailable():
        window.tray_icon = create_tray_icon(window=window)
        window.tray_icon.show()
    else:
        app.setQuitOnLastWindowClosed(True)

    for load, label in ((services.load_tasks, "tasks"), (services.load_notes, "notes")):
        try:
            load(state)
        except SnapshotError as exc:  # pragma: no cover - UI feedback
            logger.error("Loading %s failed: %s", label, exc)
            QMessageBox.warning(window, "Load failed", f"Could not load {label}: {exc}")

    window.refresh_all()
    window.show()
    app.aboutToQuit.connect(window.shutdown)

    sys.exit(app.exec())


__all__ = ["main"]
