from __future__ import annotations

import datetime as dt
import re
from typing import Any, Iterable, List, Optional

UTC = dt.timezone.utc

_REPEATED_SLASHES = re.compile(r"/{2,}")


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def normalize_text(value: Any) -> str:
    """Return ``value`` as a trimmed string, treating ``None`` as empty."""
    if value is None:
        return ""
    return str(value).strip()


def normalize_folder_path(value: Optional[str]) -> str:
    """Return a canonical ``a/b/c`` folder path without surrounding slashes."""
    text = normalize_text(value)
    if not text:
        return ""
    text = text.replace("\\", "/").strip("/")
    return _REPEATED_SLASHES.sub("/", text)


def folder_ancestors(folders: Iterable[str]) -> List[str]:
    """Expand folder paths into every distinct path prefix, sorted."""
    seen: set[str] = set()
    for folder in folders:
        normalized = normalize_folder_path(folder)
        if not normalized:
            continue
        parts = normalized.split("/")
        for depth in range(1, len(parts) + 1):
            seen.add("/".join(parts[:depth]))
    return sorted(seen)


def seconds_between(start: dt.datetime, end: dt.datetime) -> int:
    """Whole seconds from ``start`` to ``end``, never negative."""
    if start.tzinfo is not None and end.tzinfo is not None:
        start = start.astimezone(UTC)
        end = end.astimezone(UTC)
    return max(int((end - start).total_seconds()), 0)


def start_of_day(now: dt.datetime) -> dt.datetime:
    """Midnight of ``now``'s date in its zone; needs a real zone to be right on DST days."""
    return dt.datetime.combine(now.date(), dt.time.min, tzinfo=now.tzinfo)


def seconds_on_day(start: dt.datetime, now: dt.datetime) -> int:
    """Part of the interval ``start``..``now`` that falls on ``now``'s date."""
    return min(seconds_between(start, now), seconds_between(start_of_day(now), now))


def coerce_date(value: Any) -> dt.date:
    """Accept a date, a datetime or an ISO date string; raise ``ValueError`` otherwise."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return dt.date.fromisoformat(value.strip().split("T", 1)[0])
    raise ValueError(f"Not a date: {value!r}")


def format_duration(total_seconds: int) -> str:
    """Render seconds as ``MM:SS`` below one hour and ``HH:MM:SS`` above."""
    total_seconds = max(int(total_seconds), 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def summary_text(summary) -> str:
    if summary.total == 0:
        return "No tasks"
    return (
        f"Overall {summary.average_progress}% "
        f"({summary.completed}/{summary.total} done / {summary.active} remaining)"
    )
