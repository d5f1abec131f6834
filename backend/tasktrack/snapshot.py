"""Snapshot codec: task and note collections to JSON bytes and back."""

from __future__ import annotations

import datetime as dt
from itertools import chain
from typing import Iterable, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import SnapshotFormatError
from .models import Note, Task
from .schemas import NoteRecord, TaskRecord

_TASK_RECORDS = TypeAdapter(Optional[List[TaskRecord]])
_NOTE_RECORDS = TypeAdapter(Optional[List[NoteRecord]])


def serialize_tasks(active: Iterable[Task], completed: Iterable[Task]) -> bytes:
    """Active tasks first, then completed ones, each in collection order."""
    records = [TaskRecord.from_task(task) for task in chain(active, completed)]
    return _TASK_RECORDS.dump_json(records, indent=2)


def deserialize_tasks(data: bytes, now: dt.datetime) -> List[Task]:
    """Parse snapshot bytes into normalised tasks.

    Either every record loads or :class:`SnapshotFormatError` is raised;
    soft issues inside a record are repaired by ``Task.normalize``.
    """
    try:
        records = _TASK_RECORDS.validate_json(data) or []
    except PydanticValidationError as exc:
        raise SnapshotFormatError(f"Invalid task snapshot: {exc.error_count()} error(s)") from exc
    tasks: List[Task] = []
    for record in records:
        task = record.to_task()
        task.normalize(now)
        tasks.append(task)
    return tasks


def serialize_notes(notes: Iterable[Note]) -> bytes:
    records = [NoteRecord.from_note(note) for note in notes]
    return _NOTE_RECORDS.dump_json(records, indent=2)


def deserialize_notes(data: bytes) -> List[Note]:
    try:
        records = _NOTE_RECORDS.validate_json(data) or []
    except PydanticValidationError as exc:
        raise SnapshotFormatError(f"Invalid note snapshot: {exc.error_count()} error(s)") from exc
    notes: List[Note] = []
    for record in records:
        note = record.to_note()
        note.normalize()
        notes.append(note)
    return notes


__all__ = ["deserialize_notes", "deserialize_tasks", "serialize_notes", "serialize_tasks"]
