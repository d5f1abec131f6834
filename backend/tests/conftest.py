from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import List

import pytest

from tasktrack.state import TrackerState
from tasktrack.store import SnapshotStore

UTC = dt.timezone.utc


@pytest.fixture()
def now() -> dt.datetime:
    return dt.datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


@pytest.fixture()
def store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "data" / "tasks.json", tmp_path / "data" / "notes.json")


@pytest.fixture()
def state(store: SnapshotStore) -> TrackerState:
    return TrackerState(store, tzinfo=UTC)


@pytest.fixture()
def save_errors(state: TrackerState) -> List[Exception]:
    errors: List[Exception] = []
    state.on_save_error = errors.append
    return errors
