from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, List, Optional

from .errors import NoteNotFoundError, StateError, TaskNotFoundError, ValidationError
from .models import Note, Task, parse_due_date
from .partition import PartitionSummary
from .snapshot import deserialize_notes, deserialize_tasks
from .state import TrackerState
from .utils import folder_ancestors, normalize_folder_path, normalize_text

logger = logging.getLogger(__name__)

UNSET: Any = object()


def _resolve_now(state: TrackerState, now: Optional[dt.datetime]) -> dt.datetime:
    return now if now is not None else state.now()


def get_task(state: TrackerState, task_id: str) -> Task:
    task = state.partition.get(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


# ── tasks ────────────────────────────────────────────────────────────────────


def add_task(
    state: TrackerState,
    title: str,
    memo: str = "",
    due_date: Optional[dt.date] = None,
    progress: int = 0,
    *,
    now: Optional[dt.datetime] = None,
) -> Task:
    task = Task.create(title, memo, due_date, progress, now=_resolve_now(state, now))
    state.partition.add_task(task)
    logger.info("Added task %s (%s)", task.task_id, task.title)
    return task


def edit_task(
    state: TrackerState,
    task_id: str,
    *,
    title: Any = UNSET,
    memo: Any = UNSET,
    due_date: Any = UNSET,
    progress: Any = UNSET,
    is_completed: Any = UNSET,
    now: Optional[dt.datetime] = None,
) -> Task:
    """Apply field edits; completion changes move the task like the buttons do."""
    task = get_task(state, task_id)
    if title is not UNSET and not normalize_text(title):
        raise ValidationError("Title must not be empty")
    if due_date is not UNSET and due_date is not None:
        due_date = parse_due_date(due_date)
    current = _resolve_now(state, now)
    with state.partition.defer():
        if title is not UNSET:
            task.title = title
        if memo is not UNSET:
            task.memo = memo
        if due_date is not UNSET and due_date is not None:
            task.due_date = due_date
        if progress is not UNSET and progress is not None:
            task.set_progress(progress, current)
        if is_completed is not UNSET and is_completed is not None:
            task.set_completed(is_completed, current)
    return task


def delete_task(state: TrackerState, task_id: str, *, now: Optional[dt.datetime] = None) -> None:
    task = get_task(state, task_id)
    state.partition.delete(task, _resolve_now(state, now))
    logger.info("Deleted task %s", task_id)


def start_tracking(state: TrackerState, task_id: str, *, now: Optional[dt.datetime] = None) -> Task:
    task = get_task(state, task_id)
    if task.is_completed:
        raise StateError("Completed tasks cannot be tracked")
    with state.partition.defer():
        task.start_tracking(_resolve_now(state, now))
    logger.debug("Tracking started for %s", task_id)
    return task


def stop_tracking(state: TrackerState, task_id: str, *, now: Optional[dt.datetime] = None) -> Task:
    task = get_task(state, task_id)
    with state.partition.defer():
        task.stop_tracking(_resolve_now(state, now))
    logger.debug("Tracking stopped for %s", task_id)
    return task


def toggle_tracking(state: TrackerState, task_id: str, *, now: Optional[dt.datetime] = None) -> Task:
    task = get_task(state, task_id)
    if task.is_tracking:
        return stop_tracking(state, task_id, now=now)
    return start_tracking(state, task_id, now=now)


def complete_task(state: TrackerState, task_id: str, *, now: Optional[dt.datetime] = None) -> Task:
    task = get_task(state, task_id)
    state.partition.complete(task, _resolve_now(state, now))
    return task


def restore_task(state: TrackerState, task_id: str, *, now: Optional[dt.datetime] = None) -> Task:
    task = get_task(state, task_id)
    state.partition.restore(task, _resolve_now(state, now))
    return task


def tracking_displays(state: TrackerState, now: Optional[dt.datetime] = None) -> Dict[str, str]:
    """Display strings for every tracking task. Read-only, safe for a timer tick."""
    current = _resolve_now(state, now)
    return {task.task_id: task.work_display(current) for task in state.partition.tracking_tasks()}


def summary(state: TrackerState) -> PartitionSummary:
    return state.partition.summary()


# ── persistence ──────────────────────────────────────────────────────────────


def load_tasks(state: TrackerState, *, now: Optional[dt.datetime] = None) -> int:
    """Replace the task collections with the stored snapshot.

    Raises ``SnapshotIOError``/``SnapshotFormatError``; the current
    collections stay untouched when either is raised.
    """
    if state.store is None:
        return 0
    data = state.store.read_tasks()
    if data is None:
        logger.info("No task snapshot at %s", state.store.tasks_path)
        return 0
    tasks = deserialize_tasks(data, _resolve_now(state, now))
    with state.suppress_save():
        state.partition.clear()
        for task in tasks:
            state.partition.add_task(task)
    logger.info("Loaded %d task(s) from %s", len(tasks), state.store.tasks_path)
    return len(tasks)


def load_notes(state: TrackerState) -> int:
    if state.store is None:
        return 0
    data = state.store.read_notes()
    if data is None:
        return 0
    state.notes = deserialize_notes(data)
    logger.info("Loaded %d note(s) from %s", len(state.notes), state.store.notes_path)
    return len(state.notes)


def save_tasks(state: TrackerState) -> None:
    state.write_tasks()


def save_notes(state: TrackerState) -> None:
    state.write_notes()


def flush(state: TrackerState) -> None:
    """Write everything out before the application may become inactive."""
    save_tasks(state)
    save_notes(state)


def stop_all_tracking(state: TrackerState, *, now: Optional[dt.datetime] = None) -> int:
    current = _resolve_now(state, now)
    tracking = state.partition.tracking_tasks()
    with state.partition.defer():
        for task in tracking:
            task.stop_tracking(current)
    return len(tracking)


def shutdown(state: TrackerState, *, now: Optional[dt.datetime] = None) -> None:
    """Close every open session and write the final snapshots."""
    with state.suppress_save():
        stopped = stop_all_tracking(state, now=now)
    if stopped:
        logger.info("Stopped %d tracking session(s) on shutdown", stopped)
    flush(state)


# ── notes ────────────────────────────────────────────────────────────────────


def get_note(state: TrackerState, note_id: str) -> Note:
    for note in state.notes:
        if note.note_id == note_id:
            return note
    raise NoteNotFoundError(note_id)


def add_note(state: TrackerState, title: str, content: str = "", folder: str = "") -> Note:
    if not normalize_text(title):
        raise ValidationError("Title must not be empty")
    note = Note(title=title, content=content, folder=folder)
    state.notes.append(note)
    state.autosave_notes()
    return note


def update_note(
    state: TrackerState,
    note_id: str,
    *,
    title: Any = UNSET,
    content: Any = UNSET,
    folder: Any = UNSET,
) -> Note:
    note = get_note(state, note_id)
    if title is not UNSET:
        if not normalize_text(title):
            raise ValidationError("Title must not be empty")
        note.title = normalize_text(title)
    if content is not UNSET:
        note.content = content or ""
    if folder is not UNSET:
        note.folder = normalize_folder_path(folder)
    state.autosave_notes()
    return note


def delete_note(state: TrackerState, note_id: str) -> None:
    note = get_note(state, note_id)
    state.notes.remove(note)
    state.autosave_notes()


def list_note_folders(state: TrackerState) -> List[str]:
    return folder_ancestors(note.folder for note in state.notes)


__all__ = [
    "add_note",
    "add_task",
    "complete_task",
    "delete_note",
    "delete_task",
    "edit_task",
    "flush",
    "get_note",
    "get_task",
    "list_note_folders",
    "load_notes",
    "load_tasks",
    "restore_task",
    "save_notes",
    "save_tasks",
    "shutdown",
    "start_tracking",
    "stop_all_tracking",
    "stop_tracking",
    "summary",
    "toggle_tracking",
    "tracking_displays",
]
