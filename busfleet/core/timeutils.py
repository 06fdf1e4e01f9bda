# busfleet/core/timeutils.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union

DateLike = Union[date, datetime]


def utcnow() -> datetime:
    """Naive UTC 'now' (all stored timestamps are naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def week_bounds(value: DateLike) -> Tuple[datetime, datetime]:
    """
    Monday 00:00:00 .. Sunday 23:59:59.999999 of the ISO week containing `value`.
    Both ends are inclusive.
    """
    d = _as_date(value)
    monday = d - timedelta(days=d.weekday())
    sunday = monday + timedelta(days=6)
    return datetime.combine(monday, time.min), datetime.combine(sunday, time.max)


def month_bounds(value: DateLike) -> Tuple[datetime, datetime]:
    """First instant .. last instant of the calendar month containing `value`."""
    d = _as_date(value)
    first = d.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    last = next_first - timedelta(days=1)
    return datetime.combine(first, time.min), datetime.combine(last, time.max)


def iso_week_number(value: DateLike) -> int:
    return _as_date(value).isocalendar()[1]


def parse_iso_week(value: str) -> date:
    """
    'YYYY-Www' -> Monday of that ISO week. Raises ValueError on bad input.
    """
    raw = (value or "").strip().upper()
    if "-W" not in raw:
        raise ValueError("Week must look like YYYY-Www")
    year_s, week_s = raw.split("-W", 1)
    return date.fromisocalendar(int(year_s), int(week_s), 1)


def parse_year_month(value: str) -> date:
    """'YYYY-MM' -> first day of that month. Raises ValueError on bad input."""
    y, m = (value or "").strip().split("-")
    return date(int(y), int(m), 1)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are converted to UTC and stripped; naive ones pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
