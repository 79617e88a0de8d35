"""Notification surface: renders fire events as Home Assistant notifications."""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

from homeassistant.core import HomeAssistant

from .const import DOMAIN
from .models import FireEvent

_LOGGER = logging.getLogger(__name__)

_SERVICE_PATTERN = re.compile(r"^(?:notify\.)?[a-z0-9_]+$")


def sanitize_services(services: Iterable[str]) -> List[str]:
    """Allow 'notify.xxx' or 'xxx'; return normalized unique list of 'xxx'."""
    out: list[str] = []
    seen: set[str] = set()
    for svc in services:
        svc = svc.strip()
        if not _SERVICE_PATTERN.fullmatch(svc):
            continue
        name = svc.split(".", 1)[1] if svc.startswith("notify.") else svc
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out


def parse_services(value: str) -> List[str]:
    return sanitize_services(s for s in (value or "").split(",") if s.strip())


def notification_id(medication_id: int) -> str:
    return f"{DOMAIN}_{medication_id}"


class NotificationSurface:
    def __init__(self, hass: HomeAssistant, notify_services: List[str] | None = None) -> None:
        self.hass = hass
        self.notify_services = list(notify_services or [])

    async def async_deliver(self, event: FireEvent) -> None:
        """Show the reminder; a later reminder for the same id replaces it."""
        title = f"{event.name} Reminder"
        message = f"Time to take your medication: {event.name}, Dosage: {event.dosage}"
        tag = notification_id(event.medication_id)
        await self.hass.services.async_call(
            "persistent_notification",
            "create",
            {"title": title, "message": message, "notification_id": tag},
            blocking=False,
        )
        for service in self.notify_services:
            await self.hass.services.async_call(
                "notify",
                service,
                {
                    "title": title,
                    "message": message,
                    "data": {"tag": tag, "medication_id": event.medication_id},
                },
                blocking=False,
            )
        _LOGGER.debug("%s: delivered reminder for id %s", DOMAIN, event.medication_id)
