from __future__ import annotations

import datetime as dt
import json

import pytest

from tasktrack.errors import SnapshotFormatError
from tasktrack.models import UNTITLED, Note, Task
from tasktrack.snapshot import deserialize_notes, deserialize_tasks, serialize_notes, serialize_tasks


def _task(title: str, progress: int, work_seconds: int, daily_date: dt.date) -> Task:
    return Task(
        title=title,
        due_date=dt.date(2024, 1, 10),
        progress=progress,
        is_completed=progress >= 100,
        work_seconds=work_seconds,
        daily_work_seconds=work_seconds,
        daily_work_date=daily_date,
    )


def test_serialized_layout(now: dt.datetime):
    active = _task("A", 40, 120, now.date())
    done = _task("B", 100, 500, now.date())

    records = json.loads(serialize_tasks([active], [done]))

    assert [record["title"] for record in records] == ["A", "B"]
    assert records[0] == {
        "title": "A",
        "memo": "",
        "due_date": "2024-01-10",
        "progress": 40,
        "is_completed": False,
        "work_seconds": 120,
        "daily_work_seconds": 120,
        "daily_work_date": "2024-01-01",
    }
    assert "task_id" not in records[1]


def test_load_then_save_is_a_fixed_point(now: dt.datetime):
    yesterday = now.date() - dt.timedelta(days=1)
    original = serialize_tasks([_task("A", 40, 120, now.date())], [_task("B", 100, 500, yesterday)])

    loaded = deserialize_tasks(original, now)
    a, b = loaded
    assert (a.title, a.progress, a.is_completed, a.work_seconds) == ("A", 40, False, 120)
    assert (b.title, b.progress, b.is_completed, b.work_seconds) == ("B", 100, True, 500)
    assert b.daily_work_date == now.date()
    assert b.daily_work_seconds == 0

    saved = serialize_tasks([a], [b])
    again = deserialize_tasks(saved, now)
    assert serialize_tasks(again[:1], again[1:]) == saved


def test_loaded_tasks_are_idle(now: dt.datetime):
    task = _task("A", 10, 0, now.date())
    task.start_tracking(now)
    [loaded] = deserialize_tasks(serialize_tasks([task], []), now)
    assert loaded.is_tracking is False


def test_accepts_pascal_case_and_full_timestamps(now: dt.datetime):
    data = json.dumps([
        {
            "Title": "Legacy",
            "Memo": "from an older build",
            "DueDate": "2024-01-05T00:00:00",
            "Progress": 30,
            "IsCompleted": False,
            "WorkSeconds": 75,
            "DailyWorkSeconds": 15,
            "DailyWorkDate": "2024-01-01T00:00:00+01:00",
        }
    ]).encode()

    [task] = deserialize_tasks(data, now)

    assert task.title == "Legacy"
    assert task.memo == "from an older build"
    assert task.due_date == dt.date(2024, 1, 5)
    assert task.progress == 30
    assert task.work_seconds == 75
    assert task.daily_work_seconds == 15
    assert task.daily_work_date == dt.date(2024, 1, 1)


def test_soft_issues_are_repaired(now: dt.datetime):
    data = json.dumps([
        {"title": "  ", "progress": 250, "is_completed": False, "work_seconds": -4},
        {"title": "half", "progress": 50, "is_completed": True},
    ]).encode()

    first, second = deserialize_tasks(data, now)

    assert first.title == UNTITLED
    assert (first.progress, first.is_completed) == (100, True)
    assert first.work_seconds == 0
    assert first.due_date == now.date()
    assert (second.progress, second.is_completed) == (50, False)


def test_unknown_fields_are_ignored(now: dt.datetime):
    [task] = deserialize_tasks(b'[{"title": "x", "colour": "red"}]', now)
    assert task.title == "x"


@pytest.mark.parametrize("data", [b"null", b"[]"])
def test_empty_snapshots(data: bytes, now: dt.datetime):
    assert deserialize_tasks(data, now) == []
    assert deserialize_notes(data) == []


@pytest.mark.parametrize(
    "data",
    [
        b"{not json",
        b'{"title": "not a list"}',
        b'[{"title": "x", "progress": "lots"}]',
        b'[{"title": "x", "due_date": "someday"}]',
        b"[1, 2]",
    ],
)
def test_malformed_task_snapshot_raises(data: bytes, now: dt.datetime):
    with pytest.raises(SnapshotFormatError):
        deserialize_tasks(data, now)


def test_malformed_note_snapshot_raises():
    with pytest.raises(SnapshotFormatError):
        deserialize_notes(b'{"notes": []}')


def test_notes_round_trip():
    notes = [
        Note(title="Ideas", content="line 1\nline 2", folder="/work//ideas/"),
        Note(title="Groceries", content=""),
    ]

    loaded = deserialize_notes(serialize_notes(notes))

    assert [(n.title, n.content, n.folder) for n in loaded] == [
        ("Ideas", "line 1\nline 2", "work/ideas"),
        ("Groceries", "", ""),
    ]


def test_notes_accept_pascal_case():
    [note] = deserialize_notes(b'[{"Title": "Old", "Content": "body", "Folder": "a\\\\b"}]')
    assert (note.title, note.content, note.folder) == ("Old", "body", "a/b")
