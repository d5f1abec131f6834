"""Plain notes editor."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (QComboBox, QFormLayout, QHBoxLayout, QLineEdit, QListWidget,
                               QListWidgetItem, QMessageBox, QPushButton, QSplitter,
                               QTextEdit, QVBoxLayout, QWidget)

from tasktrack import services
from tasktrack.errors import TaskTrackError
from tasktrack.state import TrackerState


class NotesEditor(QWidget):
    """List of notes with an editor for the selected one."""

    def __init__(self, state: TrackerState, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.state = state
        self._current_id: Optional[str] = None
        self._dirty = False

        self.list_widget = QListWidget()
        self.list_widget.currentItemChanged.connect(self._handle_selection_changed)

        self.title_input = QLineEdit()
        self.folder_input = QComboBox()
        self.folder_input.setEditable(True)
        self.content_input = QTextEdit()
        self.content_input.setAcceptRichText(False)

        self.title_input.textEdited.connect(self._mark_dirty)
        self.folder_input.editTextChanged.connect(self._mark_dirty)
        self.content_input.textChanged.connect(self._mark_dirty)

        self.new_button = QPushButton("New")
        self.save_button = QPushButton("Save")
        self.delete_button = QPushButton("Delete")
        self.new_button.clicked.connect(self._handle_new)
        self.save_button.clicked.connect(self._handle_save)
        self.delete_button.clicked.connect(self._handle_delete)

        editor = QWidget()
        form = QFormLayout(editor)
        form.addRow("Folder", self.folder_input)
        form.addRow("Title", self.title_input)
        form.addRow(self.content_input)

        splitter = QSplitter()
        splitter.addWidget(self.list_widget)
        splitter.addWidget(editor)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)

        button_row = QHBoxLayout()
        button_row.addWidget(self.new_button)
        button_row.addWidget(self.save_button)
        button_row.addWidget(self.delete_button)
        button_row.addStretch(1)

        layout = QVBoxLayout(self)
        layout.addWidget(splitter)
        layout.addLayout(button_row)

    # ------------------------------------------------------------------
    def refresh(self) -> None:
        """Rebuild the note list and the folder choices."""

        self.list_widget.blockSignals(True)
        self.list_widget.clear()
        for note in sorted(self.state.notes, key=lambda n: (n.folder, n.title.lower())):
            label = f"{note.folder}/{note.title}" if note.folder else note.title
            item = QListWidgetItem(label)
            item.setData(Qt.UserRole, note.note_id)
            self.list_widget.addItem(item)
            if note.note_id == self._current_id:
                self.list_widget.setCurrentItem(item)
        self.list_widget.blockSignals(False)

        folder_text = self.folder_input.currentText()
        self.folder_input.blockSignals(True)
        self.folder_input.clear()
        self.folder_input.addItems([""] + services.list_note_folders(self.state))
        self.folder_input.setEditText(folder_text)
        self.folder_input.blockSignals(False)

    def commit_draft(self) -> None:
        """Save pending edits of the open note, if any."""

        if not self._dirty:
            return
        if self._current_id is None and not self.title_input.text().strip():
            return
        self._handle_save()

    # ------------------------------------------------------------------
    def _mark_dirty(self, *_args) -> None:
        self._dirty = True

    def _load_into_editor(self, note_id: Optional[str]) -> None:
        self._current_id = note_id
        widgets = (self.title_input, self.folder_input, self.content_input)
        for widget in widgets:
            widget.blockSignals(True)
        if note_id is None:
            self.title_input.clear()
            self.folder_input.setEditText("")
            self.content_input.clear()
        else:
            note = services.get_note(self.state, note_id)
            self.title_input.setText(note.title)
            self.folder_input.setEditText(note.folder)
            self.content_input.setPlainText(note.content)
        for widget in widgets:
            widget.blockSignals(False)
        self._dirty = False

    def _handle_selection_changed(self, current: Optional[QListWidgetItem], _previous=None) -> None:
        note_id = current.data(Qt.UserRole) if current else None
        if self._dirty:
            self.commit_draft()
            self._current_id = note_id
            self.refresh()
        self._load_into_editor(note_id)

    def _handle_new(self) -> None:
        self.commit_draft()
        self.list_widget.clearSelection()
        self._load_into_editor(None)
        self.title_input.setFocus()

    def _handle_save(self) -> None:
        title = self.title_input.text()
        folder = self.folder_input.currentText()
        content = self.content_input.toPlainText()
        try:
            if self._current_id is None:
                note = services.add_note(self.state, title, content, folder)
                self._current_id = note.note_id
            else:
                services.update_note(self.state, self._current_id, title=title, content=content, folder=folder)
        except TaskTrackError as exc:
            QMessageBox.warning(self, "Notes", str(exc))
            return
        self._dirty = False
        self.refresh()

    def _handle_delete(self) -> None:
        if self._current_id is None:
            return
        answer = QMessageBox.question(self, "Delete note", "Delete this note?")
        if answer != QMessageBox.Yes:
            return
        try:
            services.delete_note(self.state, self._current_id)
        except TaskTrackError as exc:
            QMessageBox.warning(self, "Notes", str(exc))
            return
        self._load_into_editor(None)
        self.refresh()


__all__ = ["NotesEditor"]
