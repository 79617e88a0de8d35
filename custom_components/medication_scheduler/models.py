"""Data model for Medication Scheduler."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .const import (
    ATTR_DOSAGE,
    ATTR_FREQUENCY,
    ATTR_MEDICATION_ID,
    ATTR_NAME,
    ATTR_START_DATE,
    ATTR_START_TIME,
)


@dataclass(frozen=True)
class Medication:
    """A medication and its schedule intent, kept in its textual wire format."""

    id: int
    name: str
    dosage: str
    frequency: str
    start_date: str
    start_time: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            ATTR_MEDICATION_ID: self.id,
            ATTR_NAME: self.name,
            ATTR_DOSAGE: self.dosage,
            ATTR_FREQUENCY: self.frequency,
            ATTR_START_DATE: self.start_date,
            ATTR_START_TIME: self.start_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Medication":
        return cls(
            id=int(data[ATTR_MEDICATION_ID]),
            name=str(data[ATTR_NAME]),
            dosage=str(data[ATTR_DOSAGE]),
            frequency=str(data[ATTR_FREQUENCY]),
            start_date=str(data[ATTR_START_DATE]),
            start_time=str(data[ATTR_START_TIME]),
        )


@dataclass(frozen=True)
class RecurrenceInterval:
    days: int = 0
    hours: int = 0
    minutes: int = 0

    @property
    def is_zero(self) -> bool:
        return self.days == 0 and self.hours == 0 and self.minutes == 0

    @property
    def period(self) -> timedelta:
        return timedelta(days=self.days, hours=self.hours, minutes=self.minutes)

    @property
    def period_ms(self) -> int:
        return self.days * 86_400_000 + self.hours * 3_600_000 + self.minutes * 60_000


@dataclass(frozen=True)
class FireEvent:
    """Reminder handed to the notification surface."""

    medication_id: int
    name: str
    dosage: str
    scheduled_for: Optional[datetime] = None


@dataclass
class ScheduleEntry:
    """Registry state for one armed medication."""

    medication_id: int
    next_fire_instant: datetime
    interval: RecurrenceInterval
    name: str
    dosage: str
    version: int
    last_fired: Optional[datetime] = field(default=None)

    @property
    def periodic(self) -> bool:
        return not self.interval.is_zero
