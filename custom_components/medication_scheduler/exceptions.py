"""Errors raised by the Medication Scheduler engine."""
from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class MedicationSchedulerError(HomeAssistantError):
    """Base class for scheduling errors."""


class MalformedFrequency(MedicationSchedulerError):
    """Frequency is not three non-negative integers separated by colons."""


class MalformedDate(MedicationSchedulerError):
    """Start date is not a valid D/M/Y calendar date."""


class MalformedTime(MedicationSchedulerError):
    """Start time is not a valid HH:MM time of day."""


class ScheduleInThePast(MedicationSchedulerError):
    """First fire instant is not strictly after now."""


class RegistrationFailure(MedicationSchedulerError):
    """The timer facility did not accept a registration."""


class InvalidMedication(MedicationSchedulerError):
    """A required medication field is blank."""


class UnknownMedication(MedicationSchedulerError):
    """No medication exists with the given id."""
