from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo

import pytest

from tasktrack.errors import ValidationError
from tasktrack.models import RESTORED_PROGRESS, UNTITLED, Task, apply_completed, apply_progress, parse_due_date

UTC = dt.timezone.utc


def _task(now: dt.datetime, **kwargs) -> Task:
    kwargs.setdefault("title", "Write report")
    return Task.create(now=now, **kwargs)


def _record_changes(task: Task) -> list[str]:
    fields: list[str] = []
    task.changed.connect(lambda _task, field: fields.append(field))
    return fields


def test_create_rejects_blank_title(now: dt.datetime):
    with pytest.raises(ValidationError):
        Task.create("   ", now=now)


def test_create_trims_and_defaults(now: dt.datetime):
    task = Task.create("  Plan sprint  ", memo="  notes ", progress=250, now=now)
    assert task.title == "Plan sprint"
    assert task.memo == "notes"
    assert task.due_date == now.date()
    assert task.daily_work_date == now.date()
    assert task.progress == 100
    assert task.is_completed is True


@pytest.mark.parametrize(
    "value, expected",
    [(-5, (0, False)), (0, (0, False)), (42, (42, False)), (99, (99, False)), (100, (100, True)), (180, (100, True))],
)
def test_apply_progress_clamps_and_derives_completion(value, expected):
    assert apply_progress(value) == expected


def test_apply_completed_transitions():
    assert apply_completed(True, 10) == (100, True)
    assert apply_completed(False, 100) == (RESTORED_PROGRESS, False)
    assert apply_completed(False, 40) == (40, False)


def test_progress_completion_coupling(now: dt.datetime):
    task = _task(now, progress=30)
    task.set_progress(100, now)
    assert (task.progress, task.is_completed) == (100, True)

    task.set_progress(70, now)
    assert (task.progress, task.is_completed) == (70, False)

    task.set_completed(True, now)
    assert (task.progress, task.is_completed) == (100, True)

    task.set_completed(False, now)
    assert (task.progress, task.is_completed) == (99, False)


def test_completion_notifications_follow_consistent_state(now: dt.datetime):
    task = _task(now, progress=50)
    seen: list[tuple[int, bool]] = []
    task.changed.connect(lambda t, field: seen.append((t.progress, t.is_completed)))

    task.set_progress(100, now)

    assert seen == [(100, True), (100, True)]


def test_completing_stops_tracking(now: dt.datetime):
    task = _task(now)
    task.start_tracking(now)
    task.set_progress(100, now + dt.timedelta(minutes=5))
    assert task.is_tracking is False
    assert task.work_seconds == 300


def test_completed_task_does_not_start_tracking(now: dt.datetime):
    task = _task(now, progress=100)
    task.start_tracking(now)
    assert task.is_tracking is False


def test_stop_adds_elapsed_and_is_idempotent(now: dt.datetime):
    task = _task(now)
    task.start_tracking(now)
    task.stop_tracking(now + dt.timedelta(seconds=95))
    assert task.work_seconds == 95
    assert task.daily_work_seconds == 95

    fields = _record_changes(task)
    task.stop_tracking(now + dt.timedelta(seconds=500))
    assert task.work_seconds == 95
    assert task.daily_work_seconds == 95
    assert fields == []


def test_start_twice_keeps_first_start(now: dt.datetime):
    task = _task(now)
    task.start_tracking(now)
    task.start_tracking(now + dt.timedelta(minutes=10))
    assert task.tracking_started_at == now
    task.stop_tracking(now + dt.timedelta(minutes=20))
    assert task.work_seconds == 1200


def test_sessions_accumulate(now: dt.datetime):
    task = _task(now)
    task.start_tracking(now)
    task.stop_tracking(now + dt.timedelta(seconds=60))
    task.start_tracking(now + dt.timedelta(seconds=120))
    task.stop_tracking(now + dt.timedelta(seconds=150))
    assert task.work_seconds == 90
    assert task.daily_work_seconds == 90


def test_session_across_midnight_counts_only_new_day(now: dt.datetime):
    late = dt.datetime(2024, 1, 1, 23, 0, tzinfo=UTC)
    task = _task(late)
    task.start_tracking(late)
    task.stop_tracking(late + dt.timedelta(minutes=30))
    assert task.daily_work_seconds == 1800

    task.start_tracking(dt.datetime(2024, 1, 1, 23, 40, tzinfo=UTC))
    task.stop_tracking(dt.datetime(2024, 1, 2, 0, 15, tzinfo=UTC))

    assert task.work_seconds == 1800 + 35 * 60
    assert task.daily_work_date == dt.date(2024, 1, 2)
    assert task.daily_work_seconds == 15 * 60


def test_start_on_new_day_rolls_daily_counter(now: dt.datetime):
    task = _task(now)
    task.start_tracking(now)
    task.stop_tracking(now + dt.timedelta(hours=1))

    next_day = now + dt.timedelta(days=1)
    task.start_tracking(next_day)
    assert task.daily_work_date == next_day.date()
    assert task.daily_work_seconds == 0
    assert task.work_seconds == 3600


def test_queries_include_live_session_without_mutating(now: dt.datetime):
    task = _task(now)
    task.start_tracking(now)
    later = now + dt.timedelta(minutes=2)

    assert task.total_elapsed_seconds(later) == 120
    assert task.daily_elapsed_seconds(later) == 120
    assert task.work_seconds == 0
    assert task.daily_work_seconds == 0
    assert task.is_tracking is True


def test_daily_query_ignores_stale_counter_without_resetting(now: dt.datetime):
    task = _task(now)
    task.start_tracking(now)
    task.stop_tracking(now + dt.timedelta(minutes=10))

    tomorrow = now + dt.timedelta(days=1)
    assert task.daily_elapsed_seconds(tomorrow) == 0
    assert task.total_elapsed_seconds(tomorrow) == 600
    assert task.daily_work_seconds == 600
    assert task.daily_work_date == now.date()


def test_work_display(now: dt.datetime):
    task = _task(now)
    task.start_tracking(now)
    task.stop_tracking(now + dt.timedelta(seconds=3725))
    assert task.work_display(now + dt.timedelta(hours=2)) == "01:02:05 (01:02:05)"


def test_normalize_repairs_restored_state(now: dt.datetime):
    task = Task(
        title="   ",
        memo="  memo  ",
        due_date=None,
        progress=140,
        is_completed=False,
        work_seconds=-20,
        daily_work_seconds=500,
        daily_work_date=dt.date(2023, 12, 30),
    )
    task._tracking_started_at = now - dt.timedelta(hours=3)

    task.normalize(now)

    assert task.title == UNTITLED
    assert task.memo == "memo"
    assert task.due_date == now.date()
    assert (task.progress, task.is_completed) == (100, True)
    assert task.work_seconds == 0
    assert task.daily_work_seconds == 0
    assert task.daily_work_date == now.date()
    assert task.is_tracking is False


def test_normalize_clears_contradictory_completion(now: dt.datetime):
    task = Task(title="x", progress=60, is_completed=True, daily_work_date=now.date(), daily_work_seconds=30)
    task.normalize(now)
    assert (task.progress, task.is_completed) == (60, False)
    assert task.daily_work_seconds == 30


def test_normalize_is_idempotent(now: dt.datetime):
    task = Task(title=" a ", progress=-3, daily_work_date=dt.date(2020, 1, 1), daily_work_seconds=9)
    task.normalize(now)
    snapshot = (task.title, task.progress, task.is_completed, task.daily_work_seconds, task.daily_work_date)
    fields = _record_changes(task)
    task.normalize(now)
    assert (task.title, task.progress, task.is_completed, task.daily_work_seconds, task.daily_work_date) == snapshot
    assert fields == []


def test_field_setters_emit_only_on_change(now: dt.datetime):
    task = _task(now)
    fields = _record_changes(task)
    task.title = "Write report"
    task.memo = "  draft "
    task.due_date = dt.datetime(2024, 2, 1, 15, 30)
    assert fields == ["memo", "due_date"]
    assert task.memo == "draft"
    assert task.due_date == dt.date(2024, 2, 1)


BERLIN = ZoneInfo("Europe/Berlin")


@pytest.mark.parametrize(
    "start, stop, total, daily",
    [
        # clocks go forward at 02:00 on 2024-03-31
        (dt.datetime(2024, 3, 30, 23, 30, tzinfo=BERLIN), dt.datetime(2024, 3, 31, 4, 0, tzinfo=BERLIN),
         3 * 3600 + 1800, 3 * 3600),
        # clocks go back at 03:00 on 2024-10-27
        (dt.datetime(2024, 10, 26, 23, 0, tzinfo=BERLIN), dt.datetime(2024, 10, 27, 3, 0, tzinfo=BERLIN),
         5 * 3600, 4 * 3600),
    ],
)
def test_midnight_split_on_daylight_saving_days(start, stop, total, daily):
    task = _task(start)
    task.start_tracking(start)

    assert task.daily_elapsed_seconds(stop) == daily
    task.stop_tracking(stop)

    assert task.work_seconds == total
    assert task.daily_work_seconds == daily
    assert task.daily_work_date == stop.date()


def test_due_date_accepts_dates_and_iso_strings(now: dt.datetime):
    task = _task(now, due_date="2024-03-05")
    assert task.due_date == dt.date(2024, 3, 5)
    task.due_date = "2024-04-01T12:00:00"
    assert task.due_date == dt.date(2024, 4, 1)
    assert parse_due_date(dt.date(2024, 5, 1)) == dt.date(2024, 5, 1)


@pytest.mark.parametrize("value", ["soon", 20240101, None])
def test_due_date_rejects_non_dates(value, now: dt.datetime):
    task = _task(now)
    with pytest.raises(ValidationError):
        task.due_date = value
    assert task.due_date == now.date()
