"""Engine facade: owns the medication collection and its alarms."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from homeassistant.core import HomeAssistant
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.util import dt as dt_util

from .const import (
    DOMAIN,
    SIGNAL_MEDICATION_ADDED,
    SIGNAL_MEDICATION_REMOVED,
    SIGNAL_SCHEDULE_UPDATED,
)
from .dispatcher import TriggerDispatcher
from .exceptions import (
    InvalidMedication,
    MedicationSchedulerError,
    RegistrationFailure,
    UnknownMedication,
)
from .frequency import parse_frequency
from .models import Medication, RecurrenceInterval, ScheduleEntry
from .notification import NotificationSurface
from .registry import AlarmRegistry
from .schedule import combine, compute_first_fire, next_occurrence_after
from .storage import MedicationStore
from .timer import HassAlarmTimer

_LOGGER = logging.getLogger(__name__)


class MedicationScheduler:
    def __init__(self, hass: HomeAssistant, notify_services: Optional[List[str]] = None) -> None:
        self.hass = hass
        self.store = MedicationStore(hass)
        self.timer = HassAlarmTimer(hass)
        self.registry = AlarmRegistry(self.timer)
        self.surface = NotificationSurface(hass, notify_services)
        self.dispatcher = TriggerDispatcher(hass, self.registry, self.surface)
        self._medications: Dict[int, Medication] = {}

    @property
    def medications(self) -> List[Medication]:
        return list(self._medications.values())

    def get_medication(self, medication_id: int) -> Optional[Medication]:
        return self._medications.get(medication_id)

    def get_entry(self, medication_id: int) -> Optional[ScheduleEntry]:
        return self.registry.get(medication_id)

    async def async_load(self) -> None:
        """Load the stored collection and re-arm every schedule still due."""
        self._medications = {m.id: m for m in await self.store.async_load_all()}
        now = dt_util.utcnow()
        for medication in self.medications:
            await self._async_restore(medication, now)
        _LOGGER.debug(
            "%s: restored %s of %s schedules",
            DOMAIN,
            len(self.registry.entries),
            len(self._medications),
        )

    async def _async_restore(self, medication: Medication, now: datetime) -> None:
        try:
            interval = parse_frequency(medication.frequency)
            first = combine(medication.start_date, medication.start_time)
        except MedicationSchedulerError as err:
            _LOGGER.warning("Not restoring %s (id %s): %s", medication.name, medication.id, err)
            return
        when = next_occurrence_after(first, interval, now)
        if when is None:
            _LOGGER.info(
                "Reminder for %s (id %s) starting %s has no future instant, leaving it unscheduled",
                medication.name,
                medication.id,
                first.isoformat(),
            )
            return
        try:
            await self.registry.async_register(medication, interval, when)
        except RegistrationFailure as err:
            _LOGGER.warning("Skipping restore of %s (id %s): %s", medication.name, medication.id, err)

    def _validate(
        self, name: str, dosage: str, frequency: str, start_date: str, start_time: str
    ) -> Tuple[RecurrenceInterval, datetime]:
        if not (name or "").strip():
            raise InvalidMedication("Please enter the medication name.")
        if not (dosage or "").strip():
            raise InvalidMedication("Please enter the dosage.")
        interval = parse_frequency(frequency)
        first = compute_first_fire(start_date, start_time, dt_util.utcnow())
        return interval, first

    async def async_add(
        self, name: str, dosage: str, frequency: str, start_date: str, start_time: str
    ) -> Medication:
        interval, first = self._validate(name, dosage, frequency, start_date, start_time)
        medication_id = await self.store.async_mint_id()
        medication = Medication(
            id=medication_id,
            name=name.strip(),
            dosage=dosage.strip(),
            frequency=frequency.strip(),
            start_date=start_date.strip(),
            start_time=start_time.strip(),
        )
        await self.registry.async_register(medication, interval, first)
        self._medications[medication_id] = medication
        await self._async_save()
        async_dispatcher_send(self.hass, SIGNAL_MEDICATION_ADDED, medication)
        return medication

    async def async_update(
        self,
        medication_id: int,
        name: str,
        dosage: str,
        frequency: str,
        start_date: str,
        start_time: str,
    ) -> Medication:
        """Replace a medication in full; its alarm is canceled before re-arming."""
        if medication_id not in self._medications:
            raise UnknownMedication(f"Medication not found: {medication_id}")
        # Rejected edits leave the current alarm armed
        interval, first = self._validate(name, dosage, frequency, start_date, start_time)
        medication = Medication(
            id=medication_id,
            name=name.strip(),
            dosage=dosage.strip(),
            frequency=frequency.strip(),
            start_date=start_date.strip(),
            start_time=start_time.strip(),
        )
        await self.registry.async_register(medication, interval, first)
        self._medications[medication_id] = medication
        await self._async_save()
        async_dispatcher_send(self.hass, SIGNAL_SCHEDULE_UPDATED, medication_id, None)
        return medication

    async def async_remove(self, medication_id: int) -> None:
        if medication_id not in self._medications:
            raise UnknownMedication(f"Medication not found: {medication_id}")
        await self.registry.async_cancel(medication_id)
        self._medications.pop(medication_id, None)
        await self._async_save()
        async_dispatcher_send(self.hass, SIGNAL_MEDICATION_REMOVED, medication_id)

    async def async_shutdown(self) -> None:
        """Drop all timer registrations; stored medications are kept."""
        await self.registry.async_cancel_all()
        self.timer.close()

    async def _async_save(self) -> None:
        await self.store.async_save_all(self.medications)
