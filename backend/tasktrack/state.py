from __future__ import annotations

import datetime as dt
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from tzlocal import get_localzone

from .config import Settings
from .errors import SnapshotError
from .models import Note
from .partition import TaskPartition
from .snapshot import serialize_notes, serialize_tasks
from .store import SnapshotStore

logger = logging.getLogger(__name__)


class TrackerState:
    """In-memory task and note collections bound to a snapshot store.

    Every change reported by the partition is written out immediately unless
    saving is suppressed (while loading). Autosave failures never undo the
    in-memory change; they are logged and handed to ``on_save_error``.
    """

    def __init__(self, store: Optional[SnapshotStore], *, tzinfo: Optional[dt.tzinfo] = None,
                 on_save_error: Optional[Callable[[SnapshotError], None]] = None) -> None:
        self.store = store
        # Named zone, never a fixed offset.
        self.tzinfo = tzinfo or get_localzone()
        self.on_save_error = on_save_error
        self.partition = TaskPartition(on_change=self.autosave_tasks)
        self.notes: List[Note] = []
        self._suppress_save = False

    @classmethod
    def from_settings(cls, base_settings: Settings) -> "TrackerState":
        return cls(SnapshotStore.from_settings(base_settings), tzinfo=base_settings.tzinfo())

    def now(self) -> dt.datetime:
        return dt.datetime.now(self.tzinfo)

    @contextmanager
    def suppress_save(self) -> Iterator[None]:
        previous = self._suppress_save
        self._suppress_save = True
        try:
            yield
        finally:
            self._suppress_save = previous

    # ------------------------------------------------------------------
    def write_tasks(self) -> None:
        if self.store is None or self._suppress_save:
            return
        data = serialize_tasks(self.partition.active, self.partition.completed)
        self.store.write_tasks(data)

    def write_notes(self) -> None:
        if self.store is None or self._suppress_save:
            return
        self.store.write_notes(serialize_notes(self.notes))

    def autosave_tasks(self) -> None:
        self._autosave(self.write_tasks)

    def autosave_notes(self) -> None:
        self._autosave(self.write_notes)

    def _autosave(self, write: Callable[[], None]) -> None:
        try:
            write()
        except SnapshotError as exc:
            logger.error("Autosave failed: %s", exc)
            if self.on_save_error is not None:
                self.on_save_error(exc)


__all__ = ["TrackerState"]
