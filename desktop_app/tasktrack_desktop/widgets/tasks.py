"""Main window with the active and completed task lists."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from PySide6.QtCore import QDate, QEvent, Qt, QTimer
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (QAbstractItemView, QApplication, QDateEdit, QFormLayout, QGroupBox,
                               QHBoxLayout, QHeaderView, QInputDialog, QLabel, QLineEdit,
                               QMainWindow, QMessageBox, QProgressBar, QPushButton, QSpinBox,
                               QTableWidget, QTableWidgetItem, QTabWidget, QVBoxLayout, QWidget)

from tasktrack import services
from tasktrack.errors import SnapshotError, TaskTrackError
from tasktrack.models import Task
from tasktrack.state import TrackerState
from tasktrack.utils import summary_text

from .notes import NotesEditor

logger = logging.getLogger(__name__)

TRACKING_COLOR = "#0f9d58"
COLUMNS = ("Title", "Memo", "Due", "Progress", "Work time")
WORK_COLUMN = 4


class TaskWindow(QMainWindow):
    """Main window of the desktop application."""

    def __init__(self, state: TrackerState, *, refresh_interval_ms: int = 1000,
                 minimize_to_tray: bool = True, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.state = state
        self.minimize_to_tray = minimize_to_tray
        self.tray_icon = None
        self._allow_exit = False
        self._tray_tip_shown = False
        self._shut_down = False
        self.setWindowTitle("TaskTrack")
        self.resize(960, 640)

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Title")
        self.memo_input = QLineEdit()
        self.memo_input.setPlaceholderText("Memo")
        self.due_input = QDateEdit(QDate.currentDate())
        self.due_input.setCalendarPopup(True)
        self.progress_input = QSpinBox()
        self.progress_input.setRange(0, 100)
        self.progress_input.setSuffix(" %")
        self.add_button = QPushButton("Add")
        self.add_button.clicked.connect(self._handle_add)
        self.title_input.returnPressed.connect(self._handle_add)

        self.active_table = self._build_table()
        self.completed_table = self._build_table()

        self.summary_label = QLabel("No tasks")
        self.overall_progress = QProgressBar()
        self.overall_progress.setRange(0, 100)

        self.notes_editor = NotesEditor(state)
        self.tabs = QTabWidget()

        self._build_ui()
        self.state.on_save_error = self._show_save_error

        self.timer = QTimer(self)
        self.timer.timeout.connect(self.refresh_tracking_display)
        self.timer.start(refresh_interval_ms)

    # ------------------------------------------------------------------
    def _build_table(self) -> QTableWidget:
        table = QTableWidget(0, len(COLUMNS))
        table.setHorizontalHeaderLabels(list(COLUMNS))
        table.setSelectionBehavior(QAbstractItemView.SelectRows)
        table.setSelectionMode(QAbstractItemView.SingleSelection)
        table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        table.verticalHeader().setVisible(False)
        return table

    def _build_ui(self) -> None:
        input_group = QGroupBox("New task")
        form = QFormLayout(input_group)
        form.addRow("Title", self.title_input)
        form.addRow("Memo", self.memo_input)
        row = QHBoxLayout()
        row.addWidget(QLabel("Due"))
        row.addWidget(self.due_input)
        row.addWidget(QLabel("Progress"))
        row.addWidget(self.progress_input)
        row.addStretch(1)
        row.addWidget(self.add_button)
        form.addRow(row)

        active_page = self._build_page(self.active_table, [
            ("Start/Stop", self._handle_toggle_tracking),
            ("Set progress", self._handle_set_progress),
            ("Edit", self._handle_edit),
            ("Complete", self._handle_complete),
            ("Delete", self._handle_delete),
        ])
        completed_page = self._build_page(self.completed_table, [
            ("Restore", self._handle_restore),
            ("Edit", self._handle_edit),
            ("Delete", self._handle_delete),
        ])
        self.tabs.addTab(active_page, "Tasks")
        self.tabs.addTab(completed_page, "Completed")
        self.tabs.addTab(self.notes_editor, "Notes")

        summary_row = QHBoxLayout()
        summary_row.addWidget(self.summary_label)
        summary_row.addWidget(self.overall_progress, stretch=1)

        central_widget = QWidget()
        layout = QVBoxLayout(central_widget)
        layout.addWidget(input_group)
        layout.addWidget(self.tabs, stretch=1)
        layout.addLayout(summary_row)
        self.setCentralWidget(central_widget)

    def _build_page(self, table: QTableWidget,
                    actions: Sequence[tuple[str, Callable[[], None]]]) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.addWidget(table)
        button_row = QHBoxLayout()
        for label, handler in actions:
            button = QPushButton(label)
            button.clicked.connect(handler)
            button_row.addWidget(button)
        button_row.addStretch(1)
        layout.addLayout(button_row)
        return page

    # ------------------------------------------------------------------
    def refresh_all(self) -> None:
        now = self.state.now()
        self._fill_table(self.active_table, self.state.partition.active, now)
        self._fill_table(self.completed_table, self.state.partition.completed, now)
        self._refresh_summary()
        self.notes_editor.refresh()

    def _fill_table(self, table: QTableWidget, tasks: Sequence[Task], now) -> None:
        selected = self._selected_id(table)
        table.setRowCount(len(tasks))
        for row, task in enumerate(tasks):
            values = (
                task.title,
                task.memo,
                task.due_date.isoformat() if task.due_date else "",
                f"{task.progress} %",
                task.work_display(now),
            )
            for column, value in enumerate(values):
                item = QTableWidgetItem(value)
                item.setData(Qt.UserRole, task.task_id)
                if task.is_tracking:
                    item.setForeground(QBrush(QColor(TRACKING_COLOR)))
                table.setItem(row, column, item)
            if task.task_id == selected:
                table.selectRow(row)

    def _refresh_summary(self) -> None:
        summary = services.summary(self.state)
        self.summary_label.setText(summary_text(summary))
        self.overall_progress.setValue(summary.average_progress)
        self.tabs.setTabText(0, f"Tasks ({summary.active})")
        self.tabs.setTabText(1, f"Completed ({summary.completed})")

    def refresh_tracking_display(self) -> None:
        displays = services.tracking_displays(self.state)
        if not displays:
            return
        for row in range(self.active_table.rowCount()):
            item = self.active_table.item(row, WORK_COLUMN)
            if item is None:
                continue
            display = displays.get(item.data(Qt.UserRole))
            if display is not None:
                item.setText(display)

    # ------------------------------------------------------------------
    @staticmethod
    def _selected_id(table: QTableWidget) -> Optional[str]:
        item = table.currentItem()
        if item is None:
            return None
        return item.data(Qt.UserRole)

    def _current_table(self) -> QTableWidget:
        return self.completed_table if self.tabs.currentIndex() == 1 else self.active_table

    def _run(self, action: Callable[[], object], title: str = "TaskTrack") -> None:
        try:
            action()
        except TaskTrackError as exc:
            QMessageBox.warning(self, title, str(exc))
        self.refresh_all()

    def _with_selection(self, callback: Callable[[str], object]) -> None:
        task_id = self._selected_id(self._current_table())
        if task_id is None:
            return
        self._run(lambda: callback(task_id))

    def _handle_add(self) -> None:
        def add() -> None:
            services.add_task(
                self.state,
                self.title_input.text(),
                self.memo_input.text(),
                self.due_input.date().toPython(),
                self.progress_input.value(),
            )
            self.title_input.clear()
            self.memo_input.clear()
            self.progress_input.setValue(0)
            self.due_input.setDate(QDate.currentDate())

        self._run(add, "Add task")
        self.title_input.setFocus()

    def _handle_toggle_tracking(self) -> None:
        self._with_selection(lambda task_id: services.toggle_tracking(self.state, task_id))

    def _handle_complete(self) -> None:
        self._with_selection(lambda task_id: services.complete_task(self.state, task_id))

    def _handle_restore(self) -> None:
        self._with_selection(lambda task_id: services.restore_task(self.state, task_id))

    def _handle_delete(self) -> None:
        table = self._current_table()
        task_id = self._selected_id(table)
        if task_id is None:
            return
        answer = QMessageBox.question(self, "Delete task", "Delete this task?")
        if answer != QMessageBox.Yes:
            return
        self._run(lambda: services.delete_task(self.state, task_id))

    def _handle_set_progress(self) -> None:
        task_id = self._selected_id(self.active_table)
        task = self.state.partition.get(task_id) if task_id else None
        if task is None:
            return
        value, ok = QInputDialog.getInt(self, "Progress", "Progress (%)", task.progress, 0, 100)
        if not ok:
            return
        self._run(lambda: services.edit_task(self.state, task.task_id, progress=value))

    def _handle_edit(self) -> None:
        task_id = self._selected_id(self._current_table())
        task = self.state.partition.get(task_id) if task_id else None
        if task is None:
            return
        title, ok = QInputDialog.getText(self, "Edit task", "Title", text=task.title)
        if not ok:
            return
        memo, ok = QInputDialog.getMultiLineText(self, "Edit task", "Memo", task.memo)
        if not ok:
            return
        self._run(lambda: services.edit_task(self.state, task.task_id, title=title, memo=memo))

    # ------------------------------------------------------------------
    def stop_all_tracking(self) -> None:
        self._run(lambda: services.stop_all_tracking(self.state))

    def hide_to_tray(self) -> None:
        self._flush()
        self.hide()
        if self.tray_icon is not None and not self._tray_tip_shown:
            self.tray_icon.showMessage("TaskTrack", "Still running in the background.")
            self._tray_tip_shown = True

    def show_from_tray(self) -> None:
        self.show()
        self.setWindowState(self.windowState() & ~Qt.WindowMinimized)
        self.activateWindow()

    def exit_from_tray(self) -> None:
        self._allow_exit = True
        self.close()
        QApplication.quit()

    def shutdown(self) -> None:
        """Stop running timers and write the final snapshots once."""
        if self._shut_down:
            return
        self._shut_down = True
        self.timer.stop()
        self.notes_editor.commit_draft()
        try:
            services.shutdown(self.state)
        except SnapshotError as exc:
            logger.error("Final save failed: %s", exc)
        if self.tray_icon is not None:
            self.tray_icon.hide()

    def _flush(self) -> None:
        self.notes_editor.commit_draft()
        try:
            services.flush(self.state)
        except SnapshotError as exc:
            self._show_save_error(exc)

    def _show_save_error(self, exc: SnapshotError) -> None:
        QMessageBox.warning(self, "Save failed", str(exc))

    def closeEvent(self, event) -> None:
        if not self._allow_exit and self.minimize_to_tray and self.tray_icon is not None:
            event.ignore()
            self.hide_to_tray()
            return
        self.shutdown()
        event.accept()

    def changeEvent(self, event) -> None:
        if (event.type() == QEvent.WindowStateChange and self.isMinimized()
                and self.minimize_to_tray and self.tray_icon is not None):
            QTimer.singleShot(0, self.hide_to_tray)
        super().changeEvent(event)


__all__ = ["TaskWindow"]
