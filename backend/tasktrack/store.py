from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .errors import SnapshotIOError

logger = logging.getLogger(__name__)


class SnapshotStore:
    """File locations for the task and note snapshots."""

    def __init__(self, tasks_path: Path, notes_path: Path) -> None:
        self.tasks_path = Path(tasks_path)
        self.notes_path = Path(notes_path)

    @classmethod
    def from_settings(cls, settings) -> "SnapshotStore":
        return cls(settings.tasks_path, settings.notes_path)

    def read_tasks(self) -> Optional[bytes]:
        return self._read(self.tasks_path)

    def write_tasks(self, data: bytes) -> None:
        self._write(self.tasks_path, data)

    def read_notes(self) -> Optional[bytes]:
        return self._read(self.notes_path)

    def write_notes(self, data: bytes) -> None:
        self._write(self.notes_path, data)

    @staticmethod
    def _read(path: Path) -> Optional[bytes]:
        """Return the file content, or ``None`` when no snapshot exists yet."""
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise SnapshotIOError(f"Could not read {path}: {exc}", path=path) from exc

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise SnapshotIOError(f"Could not write {path}: {exc}", path=path) from exc
        logger.debug("Wrote %d bytes to %s", len(data), path)


__all__ = ["SnapshotStore"]
