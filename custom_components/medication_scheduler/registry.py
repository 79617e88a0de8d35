"""Alarm registry: one armed schedule entry per medication id."""
from __future__ import annotations

import asyncio
import itertools
import logging
from collections import Counter
from contextlib import asynccontextmanager
from datetime import datetime
from functools import partial
from typing import AsyncIterator, Callable, Dict, Optional

from homeassistant.core import callback

from .exceptions import RegistrationFailure
from .models import Medication, RecurrenceInterval, ScheduleEntry
from .schedule import next_fire_instant

_LOGGER = logging.getLogger(__name__)

# (medication_id, version, scheduled_for)
FireHandler = Callable[[int, int, datetime], None]


class AlarmRegistry:
    def __init__(self, timer) -> None:
        self._timer = timer
        self._entries: Dict[int, ScheduleEntry] = {}
        self._locks: Dict[int, asyncio.Lock] = {}
        self._lock_users: Counter = Counter()
        self._versions = itertools.count(1)
        self._fire_handler: Optional[FireHandler] = None

    def set_fire_handler(self, handler: FireHandler) -> None:
        self._fire_handler = handler

    @property
    def entries(self) -> Dict[int, ScheduleEntry]:
        return dict(self._entries)

    def get(self, medication_id: int) -> Optional[ScheduleEntry]:
        return self._entries.get(medication_id)

    @asynccontextmanager
    async def _id_lock(self, medication_id: int) -> AsyncIterator[None]:
        """Serialize work on one id; the lock is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(medication_id, asyncio.Lock())
        self._lock_users[medication_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[medication_id] -= 1
            if not self._lock_users[medication_id]:
                del self._lock_users[medication_id]
                self._locks.pop(medication_id, None)

    async def async_register(
        self, medication: Medication, interval: RecurrenceInterval, first_instant: datetime
    ) -> ScheduleEntry:
        """Arm medication at first_instant, replacing any live entry for its id.

        The previous registration is canceled before the new one is requested,
        so a failed request leaves the id unscheduled rather than half-applied.
        """
        async with self._id_lock(medication.id):
            self._cancel(medication.id)
            version = next(self._versions)
            action = partial(self._fired, medication.id, version)
            try:
                if interval.is_zero:
                    self._timer.register_one_shot(medication.id, first_instant, action)
                else:
                    self._timer.register_periodic(medication.id, first_instant, interval.period, action)
            except RegistrationFailure as err:
                _LOGGER.error("Could not arm reminder for %s (id %s): %s", medication.name, medication.id, err)
                raise
            entry = ScheduleEntry(
                medication_id=medication.id,
                next_fire_instant=first_instant,
                interval=interval,
                name=medication.name,
                dosage=medication.dosage,
                version=version,
            )
            self._entries[medication.id] = entry
            _LOGGER.debug(
                "Armed id %s (version %s) at %s, periodic=%s",
                medication.id,
                version,
                first_instant.isoformat(),
                entry.periodic,
            )
            return entry

    async def async_cancel(self, medication_id: int) -> bool:
        """Cancel the registration for medication_id; no-op when there is none."""
        async with self._id_lock(medication_id):
            return self._cancel(medication_id)

    async def async_cancel_all(self) -> None:
        for medication_id in list(self._entries):
            await self.async_cancel(medication_id)

    def _cancel(self, medication_id: int) -> bool:
        entry = self._entries.pop(medication_id, None)
        canceled = self._timer.cancel(medication_id)
        if entry is not None:
            _LOGGER.debug("Canceled id %s (version %s)", medication_id, entry.version)
        return entry is not None or canceled

    @callback
    def _fired(self, medication_id: int, version: int, scheduled_for: datetime) -> None:
        if self._fire_handler is None:
            _LOGGER.warning("Reminder for id %s fired with no dispatcher attached", medication_id)
            return
        self._fire_handler(medication_id, version, scheduled_for)

    @callback
    def async_resolve_fire(
        self, medication_id: int, version: int, scheduled_for: datetime
    ) -> Optional[ScheduleEntry]:
        """Return the live entry for a delivery, or None when it was superseded.

        One-shot entries return to unscheduled; periodic entries advance until
        the next instant no longer fits in a datetime.
        """
        entry = self._entries.get(medication_id)
        if entry is None or entry.version != version:
            return None
        entry.last_fired = scheduled_for
        if not entry.periodic:
            self._entries.pop(medication_id, None)
            return entry
        next_instant = next_fire_instant(scheduled_for, entry.interval)
        if next_instant is None:
            _LOGGER.warning("Schedule for id %s runs past the last representable date, ending it", medication_id)
            self._entries.pop(medication_id, None)
        else:
            entry.next_fire_instant = next_instant
        return entry
