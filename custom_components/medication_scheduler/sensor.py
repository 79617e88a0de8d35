"""Sensor platform for Medication Scheduler."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from homeassistant.components.sensor import SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers import entity_registry as er
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import async_generate_entity_id
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import (
    ATTR_DOSAGE,
    ATTR_FREQUENCY,
    ATTR_LAST_FIRED,
    ATTR_MEDICATION_ID,
    ATTR_NEXT_FIRE,
    ATTR_PERIODIC,
    ATTR_START_DATE,
    ATTR_START_TIME,
    DOMAIN,
    SIGNAL_MEDICATION_ADDED,
    SIGNAL_MEDICATION_REMOVED,
    SIGNAL_SCHEDULE_UPDATED,
    STATE_ARMED,
    STATE_UNSCHEDULED,
)
from .entity import MedicationSchedulerEntity
from .models import Medication
from .scheduler import MedicationScheduler


def _slugify(name: str) -> str:
    base = "".join(ch if ch.isalnum() else "_" for ch in name.lower())
    return "_".join([p for p in base.split("_") if p])


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    scheduler: MedicationScheduler = hass.data[DOMAIN]["scheduler"]

    def _build(medications: List[Medication]) -> List[MedicationScheduleSensor]:
        # Track ids handed out in this batch so equal names do not collide
        taken: list[str] = []
        sensors = []
        for med in medications:
            sensor = MedicationScheduleSensor(hass, scheduler, med, taken)
            taken.append(sensor.entity_id)
            sensors.append(sensor)
        return sensors

    async_add_entities(_build(scheduler.medications))

    @callback
    def _added(medication: Medication) -> None:
        async_add_entities(_build([medication]))

    entry.async_on_unload(async_dispatcher_connect(hass, SIGNAL_MEDICATION_ADDED, _added))


class MedicationScheduleSensor(MedicationSchedulerEntity, SensorEntity):
    """Shows whether a medication's reminder is armed and when it fires next."""

    def __init__(
        self,
        hass: HomeAssistant,
        scheduler: MedicationScheduler,
        medication: Medication,
        current_ids: Optional[List[str]] = None,
    ) -> None:
        super().__init__(medication.id)
        self.hass = hass
        self._scheduler = scheduler
        self._medication = medication
        self._last_fired: Optional[datetime] = None
        self._attr_name = medication.name
        # Stable entity_id; remains sensor.medication_<slug> when free
        self.entity_id = async_generate_entity_id(
            "sensor.{}", f"medication_{_slugify(medication.name)}", current_ids=current_ids, hass=hass
        )

    @property
    def native_value(self):
        return STATE_ARMED if self._scheduler.get_entry(self._medication_id) else STATE_UNSCHEDULED

    @property
    def icon(self):
        if self._scheduler.get_entry(self._medication_id):
            return "mdi:alarm"
        return "mdi:pill"

    @property
    def extra_state_attributes(self):
        entry = self._scheduler.get_entry(self._medication_id)
        med = self._medication
        return {
            ATTR_MEDICATION_ID: med.id,
            ATTR_DOSAGE: med.dosage,
            ATTR_FREQUENCY: med.frequency,
            ATTR_START_DATE: med.start_date,
            ATTR_START_TIME: med.start_time,
            ATTR_PERIODIC: bool(entry and entry.periodic),
            ATTR_NEXT_FIRE: entry.next_fire_instant.isoformat() if entry else None,
            ATTR_LAST_FIRED: self._last_fired.isoformat() if self._last_fired else None,
        }

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(async_dispatcher_connect(self.hass, SIGNAL_SCHEDULE_UPDATED, self._updated))
        self.async_on_remove(async_dispatcher_connect(self.hass, SIGNAL_MEDICATION_REMOVED, self._removed))

    @callback
    def _updated(self, medication_id: int, fired_at: Optional[datetime] = None) -> None:
        if medication_id != self._medication_id:
            return
        if fired_at is not None:
            self._last_fired = fired_at
        medication = self._scheduler.get_medication(medication_id)
        if medication is not None:
            self._medication = medication
            self._attr_name = medication.name
        self.async_write_ha_state()

    @callback
    def _removed(self, medication_id: int) -> None:
        if medication_id != self._medication_id:
            return
        registry = er.async_get(self.hass)
        if self.registry_entry is not None:
            # Removing the registry entry also removes this entity
            registry.async_remove(self.entity_id)
        else:
            self.hass.async_create_task(self.async_remove())
