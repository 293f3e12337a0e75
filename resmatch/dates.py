"""
Date helpers shared by the engine.

Stored dates use a zero-padded, big-endian ``YYYY/MM/DD HH:mm`` string, so
lexicographic order on the raw strings equals chronological order. Range
queries against the store rely on that.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta

DATE_FORMAT = "%Y/%m/%d %H:%M"
DISPLAY_FORMAT = "%d/%m %H:%M"
DAY_LABELS = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


def parse_date(value: str) -> datetime:
    return datetime.strptime(value.strip(), DATE_FORMAT)


def format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)


def display_date(value: str) -> str:
    """User-facing form of a stored date string; falls back to the raw value."""
    try:
        return parse_date(value).strftime(DISPLAY_FORMAT)
    except ValueError:
        return value


def day_label(value: datetime | date) -> str:
    return DAY_LABELS[value.weekday()]


def time_slot(value: datetime) -> str:
    """Hour bucket label used for statistics, e.g. ``"20:00"``."""
    return value.strftime("%H:00")


def previous_day(now: datetime) -> tuple[str, str, str]:
    """Return ``(day_start, day_end, day_label)`` for the day before *now*."""
    yesterday = (now - timedelta(days=1)).date()
    start = datetime.combine(yesterday, time(0, 0))
    end = datetime.combine(yesterday, time(23, 59))
    return format_date(start), format_date(end), day_label(yesterday)
