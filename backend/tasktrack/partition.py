"""Active/completed partition of the task set.

A task lives in exactly one of the two ordered collections, matching its
``is_completed`` flag. Moves happen either through ``complete``/``restore``
or reactively when a task reports an ``is_completed`` change on its own.
"""

from __future__ import annotations

import datetime as dt
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .models import Task

logger = logging.getLogger(__name__)

ACTIVE = "active"
COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class PartitionSummary:
    total: int = 0
    completed: int = 0
    active: int = 0
    average_progress: int = 0


class TaskPartition:
    def __init__(self, on_change: Optional[Callable[[], None]] = None) -> None:
        self._collections: Dict[str, List[Task]] = {ACTIVE: [], COMPLETED: []}
        self._membership: Dict[str, str] = {}
        self._on_change = on_change
        self._moving = False
        self._defer_depth = 0
        self._dirty = False

    # -------------------- queries --------------------
    @property
    def active(self) -> Tuple[Task, ...]:
        return tuple(self._collections[ACTIVE])

    @property
    def completed(self) -> Tuple[Task, ...]:
        return tuple(self._collections[COMPLETED])

    def all_tasks(self) -> List[Task]:
        return self._collections[ACTIVE] + self._collections[COMPLETED]

    def tracking_tasks(self) -> List[Task]:
        return [task for task in self.all_tasks() if task.is_tracking]

    def get(self, task_id: str) -> Optional[Task]:
        name = self._membership.get(task_id)
        if name is None:
            return None
        return next(task for task in self._collections[name] if task.task_id == task_id)

    def location(self, task: Task) -> Optional[str]:
        return self._membership.get(task.task_id)

    def __contains__(self, task: object) -> bool:
        return isinstance(task, Task) and task.task_id in self._membership

    def __len__(self) -> int:
        return len(self._membership)

    def summary(self) -> PartitionSummary:
        tasks = self.all_tasks()
        if not tasks:
            return PartitionSummary()
        average = round(sum(task.progress for task in tasks) / len(tasks))
        return PartitionSummary(
            total=len(tasks),
            completed=len(self._collections[COMPLETED]),
            active=len(self._collections[ACTIVE]),
            average_progress=average,
        )

    # -------------------- mutations --------------------
    def add_task(self, task: Task) -> None:
        if task.task_id in self._membership:
            logger.debug("Task %s already present, ignoring add", task.task_id)
            return
        target = COMPLETED if task.is_completed else ACTIVE
        self._collections[target].append(task)
        self._membership[task.task_id] = target
        task.changed.connect(self._handle_task_change)
        self._notify()

    def complete(self, task: Task, now: dt.datetime) -> bool:
        """Move an active task to ``completed``; no-op for any other task."""
        if self._membership.get(task.task_id) != ACTIVE:
            return False
        with self.defer(), self._move_guard():
            task.stop_tracking(now)
            task.set_completed(True, now)
            self._move(task, COMPLETED)
        return True

    def restore(self, task: Task, now: dt.datetime) -> bool:
        """Move a completed task back to ``active``; no-op for any other task."""
        if self._membership.get(task.task_id) != COMPLETED:
            return False
        with self.defer(), self._move_guard():
            task.set_completed(False, now)
            self._move(task, ACTIVE)
        return True

    def delete(self, task: Task, now: dt.datetime) -> bool:
        name = self._membership.get(task.task_id)
        if name is None:
            return False
        with self.defer():
            task.stop_tracking(now)
            self._remove(task, name)
            task.changed.disconnect(self._handle_task_change)
            self._dirty = True
        logger.debug("Deleted task %s from %s", task.task_id, name)
        return True

    def clear(self) -> None:
        for task in self.all_tasks():
            task.changed.disconnect(self._handle_task_change)
        self._collections = {ACTIVE: [], COMPLETED: []}
        self._membership.clear()
        self._notify()

    @contextmanager
    def defer(self) -> Iterator[None]:
        """Hold back change callbacks until the outermost block exits."""
        self._defer_depth += 1
        try:
            yield
        finally:
            self._defer_depth -= 1
            if self._defer_depth == 0 and self._dirty:
                self._dirty = False
                self._fire()

    # -------------------- internals --------------------
    @contextmanager
    def _move_guard(self) -> Iterator[None]:
        self._moving = True
        try:
            yield
        finally:
            self._moving = False

    def _move(self, task: Task, target: str) -> None:
        source = self._membership.get(task.task_id)
        if source is None or source == target:
            return
        self._remove(task, source)
        self._collections[target].append(task)
        self._membership[task.task_id] = target
        logger.debug("Moved task %s from %s to %s", task.task_id, source, target)
        self._notify()

    def _remove(self, task: Task, name: str) -> None:
        collection = self._collections[name]
        for index, candidate in enumerate(collection):
            if candidate.task_id == task.task_id:
                del collection[index]
                break
        del self._membership[task.task_id]

    def _handle_task_change(self, task: Task, field: str) -> None:
        if self._moving or task.task_id not in self._membership:
            return
        if field == "is_completed":
            target = COMPLETED if task.is_completed else ACTIVE
            with self._move_guard():
                self._move(task, target)
            return
        self._notify()

    def _notify(self) -> None:
        if self._defer_depth:
            self._dirty = True
            return
        self._fire()

    def _fire(self) -> None:
        if self._on_change is not None:
            self._on_change()


__all__ = ["ACTIVE", "COMPLETED", "PartitionSummary", "TaskPartition"]
