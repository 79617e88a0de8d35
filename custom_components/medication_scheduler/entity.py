"""Entity definitions for Medication Scheduler."""
from homeassistant.helpers.entity import Entity

from .const import DOMAIN


class MedicationSchedulerEntity(Entity):
    """Base for entities grouped under the scheduler device."""

    _attr_should_poll = False

    def __init__(self, medication_id: int) -> None:
        self._medication_id = medication_id
        self._attr_unique_id = f"{DOMAIN}_{medication_id}"
        self._attr_device_info = {
            "identifiers": {(DOMAIN, DOMAIN)},
            "name": "Medication Scheduler",
        }

    @property
    def medication_id(self) -> int:
        return self._medication_id
