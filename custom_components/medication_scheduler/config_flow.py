"""Config flow for Medication Scheduler integration."""
from __future__ import annotations

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from .const import CONF_NOTIFY_SERVICES, DOMAIN
from .notification import sanitize_services

TITLE = "Medication Scheduler"


def _normalize_services(value: str) -> str:
    items = [v.strip() for v in (value or "").split(",") if v.strip()]
    bad = [i for i in items if not sanitize_services([i])]
    if bad:
        raise vol.Invalid(f"Invalid notify service: {', '.join(bad)}")
    return ", ".join(f"notify.{s}" for s in sanitize_services(items))


class MedicationSchedulerConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None):
        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured()

        errors = {}
        if user_input is not None:
            try:
                services = _normalize_services(user_input.get(CONF_NOTIFY_SERVICES, ""))
                return self.async_create_entry(
                    title=TITLE, data={}, options={CONF_NOTIFY_SERVICES: services}
                )
            except vol.Invalid:
                errors["base"] = "invalid_notify_services"

        schema = vol.Schema(
            {
                vol.Optional(
                    CONF_NOTIFY_SERVICES,
                    default="",
                    description={
                        "suggested_value": "notify.mobile_app_my_phone",
                    },
                ): str,
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: config_entries.ConfigEntry):
        return MedicationSchedulerOptionsFlow()


class MedicationSchedulerOptionsFlow(config_entries.OptionsFlow):
    async def async_step_init(self, user_input=None):
        errors = {}
        if user_input is not None:
            try:
                services = _normalize_services(user_input.get(CONF_NOTIFY_SERVICES, ""))
                return self.async_create_entry(title="", data={CONF_NOTIFY_SERVICES: services})
            except vol.Invalid:
                errors["base"] = "invalid_notify_services"

        current = self.config_entry.options.get(CONF_NOTIFY_SERVICES, "")
        schema = vol.Schema(
            {
                vol.Optional(
                    CONF_NOTIFY_SERVICES,
                    default=current,
                    description={
                        "suggested_value": "notify.mobile_app_my_phone, notify.family",
                    },
                ): str,
            }
        )
        return self.async_show_form(step_id="init", data_schema=schema, errors=errors)
