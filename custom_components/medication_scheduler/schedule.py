"""Schedule calculation: first fire instant and recurrence advancement.

Dates use the D/M/Y wire format and times HH:MM (24-hour). Both are
interpreted in the Home Assistant time zone unless one is passed in.
Instants are returned in UTC so that recurrence arithmetic is absolute
(a 24h period is always 86 400 000 ms, across DST changes too).
"""
from __future__ import annotations

import re
from datetime import date, datetime, time, tzinfo
from typing import List, Optional

from homeassistant.util import dt as dt_util

from .exceptions import MalformedDate, MalformedTime, ScheduleInThePast
from .models import RecurrenceInterval

_NUMBER = re.compile(r"[0-9]+")


def _split_numbers(value: str, sep: str, count: int) -> Optional[List[int]]:
    if not isinstance(value, str):
        return None
    parts = value.strip().split(sep)
    if len(parts) != count or not all(_NUMBER.fullmatch(p) for p in parts):
        return None
    return [int(p) for p in parts]


def parse_start_date(value: str) -> date:
    parts = _split_numbers(value, "/", 3)
    if parts is None:
        raise MalformedDate(f"Invalid date format: {value}")
    day, month, year = parts
    try:
        # datetime months are 1-based like the D/M/Y input
        return date(year, month, day)
    except ValueError as err:
        raise MalformedDate(f"Invalid date value: {value}") from err


def parse_start_time(value: str) -> time:
    parts = _split_numbers(value, ":", 2)
    if parts is None:
        raise MalformedTime(f"Invalid time format: {value}")
    hh, mm = parts
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise MalformedTime(f"Invalid time value: {value}")
    return time(hh, mm)


def combine(start_date: str, start_time: str, time_zone: Optional[tzinfo] = None) -> datetime:
    """Combine date and time-of-day into a UTC instant, seconds truncated."""
    day = parse_start_date(start_date)
    tod = parse_start_time(start_time)
    tz = time_zone or dt_util.get_default_time_zone()
    local = datetime(day.year, day.month, day.day, tod.hour, tod.minute, 0, 0, tzinfo=tz)
    return dt_util.as_utc(local)


def compute_first_fire(
    start_date: str,
    start_time: str,
    now: Optional[datetime] = None,
    time_zone: Optional[tzinfo] = None,
) -> datetime:
    """Return the first fire instant; it must be strictly after now.

    Past instants raise ScheduleInThePast and are never moved forward.
    """
    first = combine(start_date, start_time, time_zone)
    now = now or dt_util.utcnow()
    if first <= now:
        raise ScheduleInThePast(
            f"Cannot set an alarm in the past: {start_date} {start_time}"
        )
    return first


def next_fire_instant(previous: datetime, interval: RecurrenceInterval) -> Optional[datetime]:
    """Advance from the previously scheduled instant.

    None for one-time schedules and once the next instant is past datetime.max.
    """
    if interval.is_zero:
        return None
    try:
        return dt_util.as_utc(previous) + interval.period
    except OverflowError:
        return None


def fire_instants(first: datetime, interval: RecurrenceInterval, count: int) -> List[datetime]:
    out: List[datetime] = []
    current: Optional[datetime] = dt_util.as_utc(first)
    while current is not None and len(out) < count:
        out.append(current)
        current = next_fire_instant(current, interval)
    return out


def next_occurrence_after(
    first: datetime, interval: RecurrenceInterval, now: datetime
) -> Optional[datetime]:
    """First instant on the first + k*period grid strictly after now, if any."""
    first = dt_util.as_utc(first)
    if first > now:
        return first
    if interval.is_zero:
        return None
    steps = (now - first) // interval.period + 1
    try:
        return first + steps * interval.period
    except OverflowError:
        return None
