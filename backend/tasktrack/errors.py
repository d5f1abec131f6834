from __future__ import annotations


class TaskTrackError(Exception):
    pass


class ValidationError(TaskTrackError):
    pass


class StateError(TaskTrackError):
    pass


class TaskNotFoundError(TaskTrackError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"task '{task_id}' not found")


class NoteNotFoundError(TaskTrackError):
    def __init__(self, note_id: str):
        self.note_id = note_id
        super().__init__(f"note '{note_id}' not found")


class SnapshotError(TaskTrackError):
    """Reading or writing a snapshot failed."""


class SnapshotFormatError(SnapshotError):
    """Snapshot bytes do not parse as the expected structure."""


class SnapshotIOError(SnapshotError):
    """The snapshot file could not be read or written."""

    def __init__(self, message: str, *, path=None):
        super().__init__(message)
        self.path = path
