"""Recurrence descriptor parsing (D:H:M)."""
from __future__ import annotations

import re

from .exceptions import MalformedFrequency
from .models import RecurrenceInterval

_TOKEN = re.compile(r"[0-9]+")


def parse_frequency(value: str) -> RecurrenceInterval:
    """Parse "D:H:M" into a RecurrenceInterval; "00:00:00" means one-time."""
    if not isinstance(value, str):
        raise MalformedFrequency(f"Invalid frequency: {value!r}")
    tokens = value.strip().split(":")
    if len(tokens) != 3:
        raise MalformedFrequency(f"Invalid frequency format: {value}")
    for token in tokens:
        # Digits only: rejects signs, blanks and inner whitespace
        if not _TOKEN.fullmatch(token):
            raise MalformedFrequency(f"Invalid frequency value: {value}")
    days, hours, minutes = (int(t) for t in tokens)
    interval = RecurrenceInterval(days=days, hours=hours, minutes=minutes)
    try:
        interval.period
    except OverflowError as err:
        raise MalformedFrequency(f"Frequency out of range: {value}") from err
    return interval


def format_frequency(interval: RecurrenceInterval) -> str:
    return f"{interval.days:02d}:{interval.hours:02d}:{interval.minutes:02d}"
