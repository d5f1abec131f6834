from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_pascal

from .models import Note, Task


def _date_part(value: Any) -> Any:
    # Earlier snapshots stored dates as full local timestamps.
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    if isinstance(value, dt.datetime):
        return value.date()
    return value


class SnapshotRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="ignore")


class TaskRecord(SnapshotRecord):
    """Persisted form of a task. Tracking state is never part of it."""

    title: Optional[str] = ""
    memo: Optional[str] = ""
    due_date: Optional[dt.date] = None
    progress: int = 0
    is_completed: bool = False
    work_seconds: int = 0
    daily_work_seconds: int = 0
    daily_work_date: Optional[dt.date] = None

    @field_validator("due_date", "daily_work_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        return _date_part(value)

    @classmethod
    def from_task(cls, task: Task) -> "TaskRecord":
        return cls(
            title=task.title,
            memo=task.memo,
            due_date=task.due_date,
            progress=task.progress,
            is_completed=task.is_completed,
            work_seconds=task.work_seconds,
            daily_work_seconds=task.daily_work_seconds,
            daily_work_date=task.daily_work_date,
        )

    def to_task(self) -> Task:
        return Task(
            title=self.title or "",
            memo=self.memo or "",
            due_date=self.due_date,
            progress=self.progress,
            is_completed=self.is_completed,
            work_seconds=self.work_seconds,
            daily_work_seconds=self.daily_work_seconds,
            daily_work_date=self.daily_work_date,
        )


class NoteRecord(SnapshotRecord):
    title: Optional[str] = ""
    content: Optional[str] = ""
    folder: Optional[str] = ""

    @classmethod
    def from_note(cls, note: Note) -> "NoteRecord":
        return cls(title=note.title, content=note.content, folder=note.folder)

    def to_note(self) -> Note:
        return Note(title=self.title or "", content=self.content or "", folder=self.folder or "")


__all__ = ["NoteRecord", "TaskRecord"]
