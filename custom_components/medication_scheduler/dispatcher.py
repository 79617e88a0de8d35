"""Trigger dispatcher: resolves fired registrations into reminders."""
from __future__ import annotations

import logging
from datetime import datetime

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_send

from .const import (
    ATTR_DOSAGE,
    ATTR_MEDICATION_ID,
    ATTR_NAME,
    ATTR_SCHEDULED_FOR,
    EVENT_MEDICATION_DUE,
    SIGNAL_SCHEDULE_UPDATED,
)
from .models import FireEvent
from .notification import NotificationSurface
from .registry import AlarmRegistry

_LOGGER = logging.getLogger(__name__)


class TriggerDispatcher:
    """Seam between the timer (which only knows ids) and the notification surface."""

    def __init__(self, hass: HomeAssistant, registry: AlarmRegistry, surface: NotificationSurface) -> None:
        self.hass = hass
        self._registry = registry
        self._surface = surface
        registry.set_fire_handler(self.async_handle_fire)

    @callback
    def async_handle_fire(self, medication_id: int, version: int, scheduled_for: datetime) -> None:
        entry = self._registry.async_resolve_fire(medication_id, version, scheduled_for)
        if entry is None:
            _LOGGER.debug("Dropped superseded delivery for id %s (version %s)", medication_id, version)
            return
        event = FireEvent(
            medication_id=entry.medication_id,
            name=entry.name,
            dosage=entry.dosage,
            scheduled_for=scheduled_for,
        )
        self.hass.async_create_task(self._surface.async_deliver(event))
        self.hass.bus.async_fire(
            EVENT_MEDICATION_DUE,
            {
                ATTR_MEDICATION_ID: event.medication_id,
                ATTR_NAME: event.name,
                ATTR_DOSAGE: event.dosage,
                ATTR_SCHEDULED_FOR: scheduled_for.isoformat(),
            },
        )
        async_dispatcher_send(self.hass, SIGNAL_SCHEDULE_UPDATED, medication_id, scheduled_for)
