from __future__ import annotations

import datetime as dt
import uuid
from typing import Callable, List, Optional, Tuple

from .errors import ValidationError
from .utils import (clamp, coerce_date, format_duration, normalize_folder_path, normalize_text, seconds_between,
                    seconds_on_day)

UNTITLED = "(untitled)"
MIN_PROGRESS = 0
MAX_PROGRESS = 100
# Progress a task falls back to when it leaves the completed state at 100%.
RESTORED_PROGRESS = 99

ChangeSlot = Callable[["Task", str], None]


def _new_id() -> str:
    return uuid.uuid4().hex


class ChangeSignal:
    """Minimal signal carrying ``(task, field_name)`` change notifications."""

    def __init__(self) -> None:
        self._slots: List[ChangeSlot] = []

    def connect(self, slot: ChangeSlot) -> None:
        if slot not in self._slots:
            self._slots.append(slot)

    def disconnect(self, slot: ChangeSlot) -> None:
        if slot in self._slots:
            self._slots.remove(slot)

    def emit(self, task: "Task", field: str) -> None:
        for slot in list(self._slots):
            slot(task, field)

    def __len__(self) -> int:
        return len(self._slots)


def apply_progress(value: int) -> Tuple[int, bool]:
    """Transition for a progress edit: returns ``(progress, is_completed)``."""
    progress = clamp(int(value), MIN_PROGRESS, MAX_PROGRESS)
    return progress, progress >= MAX_PROGRESS


def apply_completed(flag: bool, progress: int) -> Tuple[int, bool]:
    """Transition for a completion edit: returns ``(progress, is_completed)``."""
    progress = clamp(int(progress), MIN_PROGRESS, MAX_PROGRESS)
    if flag:
        return MAX_PROGRESS, True
    if progress >= MAX_PROGRESS:
        return RESTORED_PROGRESS, False
    return progress, False


def parse_due_date(value) -> dt.date:
    """Coerce user input to a due date, raising ``ValidationError`` on anything else."""
    try:
        return coerce_date(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid due date: {value!r}") from exc


class Task:
    """A single unit of work with progress and tracked work time.

    Every operation depending on the clock takes ``now`` explicitly. The
    caller's day is ``now.date()``; the daily counter follows it lazily.
    Counters only grow on ``stop_tracking``; the elapsed queries are pure.
    """

    def __init__(
        self,
        title: str = "",
        memo: str = "",
        due_date: Optional[dt.date] = None,
        progress: int = 0,
        is_completed: bool = False,
        work_seconds: int = 0,
        daily_work_seconds: int = 0,
        daily_work_date: Optional[dt.date] = None,
        task_id: Optional[str] = None,
    ) -> None:
        self.task_id = task_id or _new_id()
        self._title = normalize_text(title)
        self._memo = normalize_text(memo)
        self._due_date = due_date
        self._progress = progress
        self._is_completed = is_completed
        self._work_seconds = work_seconds
        self._daily_work_seconds = daily_work_seconds
        self._daily_work_date = daily_work_date
        self._tracking_started_at: Optional[dt.datetime] = None
        self.changed = ChangeSignal()

    @classmethod
    def create(
        cls,
        title: str,
        memo: str = "",
        due_date: Optional[dt.date] = None,
        progress: int = 0,
        *,
        now: dt.datetime,
    ) -> "Task":
        """Build a task from user input; a blank title is rejected."""
        if not normalize_text(title):
            raise ValidationError("Title must not be empty")
        task = cls(
            title=title,
            memo=memo,
            due_date=parse_due_date(due_date) if due_date else now.date(),
            daily_work_date=now.date(),
        )
        task._progress, task._is_completed = apply_progress(progress)
        return task

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.task_id}, title={self._title!r}, progress={self._progress})"

    # ------------------------------------------------------------------
    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self._set_field("title", normalize_text(value) or UNTITLED)

    @property
    def memo(self) -> str:
        return self._memo

    @memo.setter
    def memo(self, value: str) -> None:
        self._set_field("memo", normalize_text(value))

    @property
    def due_date(self) -> Optional[dt.date]:
        return self._due_date

    @due_date.setter
    def due_date(self, value: dt.date) -> None:
        self._set_field("due_date", parse_due_date(value))

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def is_completed(self) -> bool:
        return self._is_completed

    @property
    def work_seconds(self) -> int:
        return self._work_seconds

    @property
    def daily_work_seconds(self) -> int:
        return self._daily_work_seconds

    @property
    def daily_work_date(self) -> Optional[dt.date]:
        return self._daily_work_date

    @property
    def tracking_started_at(self) -> Optional[dt.datetime]:
        return self._tracking_started_at

    @property
    def is_tracking(self) -> bool:
        return self._tracking_started_at is not None

    # ------------------------------------------------------------------
    def set_progress(self, value: int, now: dt.datetime) -> None:
        progress, completed = apply_progress(value)
        self._commit_completion(progress, completed, now)

    def set_completed(self, flag: bool, now: dt.datetime) -> None:
        progress, completed = apply_completed(bool(flag), self._progress)
        self._commit_completion(progress, completed, now)

    def _commit_completion(self, progress: int, completed: bool, now: dt.datetime) -> None:
        changed: List[str] = []
        if progress != self._progress:
            self._progress = progress
            changed.append("progress")
        if completed != self._is_completed:
            self._is_completed = completed
            changed.append("is_completed")
        if completed:
            self.stop_tracking(now)
        for field in changed:
            self.changed.emit(self, field)

    # ------------------------------------------------------------------
    def start_tracking(self, now: dt.datetime) -> None:
        """Open a session at ``now``.

        No-op while already tracking. Completed tasks never track, so this is
        a no-op for them too; ``services.start_tracking`` reports that case
        as ``StateError``.
        """
        if self.is_tracking or self._is_completed:
            return
        self._roll_daily(now)
        self._tracking_started_at = now
        self.changed.emit(self, "tracking")

    def stop_tracking(self, now: dt.datetime) -> None:
        if self._tracking_started_at is None:
            return
        self._roll_daily(now)
        started_at = self._tracking_started_at
        self._work_seconds += seconds_between(started_at, now)
        self._daily_work_seconds += seconds_on_day(started_at, now)
        self._tracking_started_at = None
        self.changed.emit(self, "work_seconds")
        self.changed.emit(self, "daily_work_seconds")
        self.changed.emit(self, "tracking")

    def total_elapsed_seconds(self, now: dt.datetime) -> int:
        if self._tracking_started_at is None:
            return self._work_seconds
        return self._work_seconds + seconds_between(self._tracking_started_at, now)

    def daily_elapsed_seconds(self, now: dt.datetime) -> int:
        base = self._daily_work_seconds if self._daily_work_date == now.date() else 0
        if self._tracking_started_at is None:
            return base
        return base + seconds_on_day(self._tracking_started_at, now)

    def work_display(self, now: dt.datetime) -> str:
        daily = format_duration(self.daily_elapsed_seconds(now))
        total = format_duration(self.total_elapsed_seconds(now))
        return f"{daily} ({total})"

    def _roll_daily(self, now: dt.datetime) -> None:
        today = now.date()
        if self._daily_work_date == today:
            return
        self._daily_work_date = today
        self._daily_work_seconds = 0
        self.changed.emit(self, "daily_work_date")
        self.changed.emit(self, "daily_work_seconds")

    # ------------------------------------------------------------------
    def normalize(self, now: dt.datetime) -> None:
        """Repair state restored from a snapshot.

        Idempotent and silent: clamps numbers, trims strings, defaults the
        title, forces tracking idle and resets a stale daily counter.
        Progress decides the completion flag.
        """
        today = now.date()
        self._title = normalize_text(self._title) or UNTITLED
        self._memo = normalize_text(self._memo)
        if isinstance(self._due_date, dt.datetime):
            self._due_date = self._due_date.date()
        self._due_date = self._due_date or today
        self._progress, self._is_completed = apply_progress(self._progress)
        self._work_seconds = max(int(self._work_seconds), 0)
        self._daily_work_seconds = max(int(self._daily_work_seconds), 0)
        if self._daily_work_date != today:
            self._daily_work_date = today
            self._daily_work_seconds = 0
        self._tracking_started_at = None

    def _set_field(self, name: str, value) -> None:
        attr = f"_{name}"
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        self.changed.emit(self, name)


class Note:
    """Plain note grouped by a slash separated folder path."""

    def __init__(self, title: str = "", content: str = "", folder: str = "",
                 note_id: Optional[str] = None) -> None:
        self.note_id = note_id or _new_id()
        self.title = normalize_text(title)
        self.content = content or ""
        self.folder = normalize_folder_path(folder)

    def normalize(self) -> None:
        self.title = normalize_text(self.title) or UNTITLED
        self.content = self.content or ""
        self.folder = normalize_folder_path(self.folder)

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Note(id={self.note_id}, title={self.title!r}, folder={self.folder!r})"


__all__ = [
    "ChangeSignal",
    "MAX_PROGRESS",
    "MIN_PROGRESS",
    "Note",
    "RESTORED_PROGRESS",
    "Task",
    "UNTITLED",
    "apply_completed",
    "apply_progress",
    "parse_due_date",
]
