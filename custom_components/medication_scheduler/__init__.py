"""Medication Scheduler integration for Home Assistant."""
from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, ConfigEntryState
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
import homeassistant.helpers.config_validation as cv

from .const import (
    ATTR_DOSAGE,
    ATTR_FREQUENCY,
    ATTR_MEDICATION_ID,
    ATTR_NAME,
    ATTR_START_DATE,
    ATTR_START_TIME,
    CONF_NOTIFY_SERVICES,
    DOMAIN,
    FREQUENCY_ONCE,
    SERVICE_ADD_MEDICATION,
    SERVICE_REMOVE_MEDICATION,
    SERVICE_UPDATE_MEDICATION,
)
from .notification import parse_services
from .scheduler import MedicationScheduler

_LOGGER = logging.getLogger(__name__)

PLATFORMS = ["sensor"]
SERVICES = (SERVICE_ADD_MEDICATION, SERVICE_UPDATE_MEDICATION, SERVICE_REMOVE_MEDICATION)

_MEDICATION_FIELDS = {
    vol.Required(ATTR_NAME): cv.string,
    vol.Required(ATTR_DOSAGE): cv.string,
    vol.Optional(ATTR_FREQUENCY, default=FREQUENCY_ONCE): cv.string,
    vol.Required(ATTR_START_DATE): cv.string,
    vol.Required(ATTR_START_TIME): cv.string,
}

ADD_SCHEMA = vol.Schema(_MEDICATION_FIELDS)
UPDATE_SCHEMA = vol.Schema({vol.Required(ATTR_MEDICATION_ID): vol.Coerce(int), **_MEDICATION_FIELDS})
REMOVE_SCHEMA = vol.Schema({vol.Required(ATTR_MEDICATION_ID): vol.Coerce(int)})


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Medication Scheduler from a config entry."""
    store = hass.data.setdefault(DOMAIN, {})
    notify_services = parse_services(entry.options.get(CONF_NOTIFY_SERVICES, ""))
    scheduler = MedicationScheduler(hass, notify_services)
    # Re-arm every stored schedule before entities and services appear
    await scheduler.async_load()
    store["scheduler"] = scheduler

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.debug("%s: sensor platform forwarded for entry %s", DOMAIN, entry.entry_id)

    if not store.get("services_registered"):
        _register_services(hass)
        store["services_registered"] = True
        _LOGGER.debug("%s: services registered", DOMAIN)

    entry.async_on_unload(entry.add_update_listener(_async_options_updated))
    return True


def _register_services(hass: HomeAssistant) -> None:
    def _scheduler() -> MedicationScheduler:
        return hass.data[DOMAIN]["scheduler"]

    async def add_medication(call: ServiceCall) -> ServiceResponse:
        medication = await _scheduler().async_add(
            call.data[ATTR_NAME],
            call.data[ATTR_DOSAGE],
            call.data[ATTR_FREQUENCY],
            call.data[ATTR_START_DATE],
            call.data[ATTR_START_TIME],
        )
        return {ATTR_MEDICATION_ID: medication.id}

    async def update_medication(call: ServiceCall) -> None:
        await _scheduler().async_update(
            call.data[ATTR_MEDICATION_ID],
            call.data[ATTR_NAME],
            call.data[ATTR_DOSAGE],
            call.data[ATTR_FREQUENCY],
            call.data[ATTR_START_DATE],
            call.data[ATTR_START_TIME],
        )

    async def remove_medication(call: ServiceCall) -> None:
        await _scheduler().async_remove(call.data[ATTR_MEDICATION_ID])

    hass.services.async_register(
        DOMAIN,
        SERVICE_ADD_MEDICATION,
        add_medication,
        schema=ADD_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(DOMAIN, SERVICE_UPDATE_MEDICATION, update_medication, schema=UPDATE_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_REMOVE_MEDICATION, remove_medication, schema=REMOVE_SCHEMA)


async def _async_options_updated(hass: HomeAssistant, entry: ConfigEntry) -> None:
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not ok:
        return False

    store = hass.data.get(DOMAIN, {})
    scheduler: MedicationScheduler | None = store.pop("scheduler", None)
    if scheduler is not None:
        await scheduler.async_shutdown()

    # If no more loaded entries, remove services
    entries = hass.config_entries.async_entries(DOMAIN)
    any_loaded = any(e.state == ConfigEntryState.LOADED and e.entry_id != entry.entry_id for e in entries)
    if not any_loaded:
        for svc in SERVICES:
            if hass.services.has_service(DOMAIN, svc):
                hass.services.async_remove(DOMAIN, svc)
        store["services_registered"] = False
    return True
