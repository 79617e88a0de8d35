"""Timer facility backed by Home Assistant point-in-time tracking."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.event import async_track_point_in_utc_time
from homeassistant.util import dt as dt_util

from .exceptions import RegistrationFailure

_LOGGER = logging.getLogger(__name__)

# Receives the instant the delivery was scheduled for
FireAction = Callable[[datetime], None]


class HassAlarmTimer:
    """One registration per id: exact one-shots or fixed-period deliveries."""

    def __init__(self, hass: HomeAssistant) -> None:
        self.hass = hass
        self._unsubs: Dict[int, Callable[[], None]] = {}
        self._closed = False

    def is_registered(self, medication_id: int) -> bool:
        return medication_id in self._unsubs

    @callback
    def register_one_shot(self, medication_id: int, when: datetime, action: FireAction) -> None:
        self._check(medication_id, when)

        @callback
        def _fire(_now: datetime) -> None:
            self._unsubs.pop(medication_id, None)
            action(when)

        self._unsubs[medication_id] = self._track(medication_id, when, _fire)
        _LOGGER.debug("One-shot armed for id %s at %s", medication_id, when.isoformat())

    @callback
    def register_periodic(
        self, medication_id: int, first: datetime, period: timedelta, action: FireAction
    ) -> None:
        self._check(medication_id, first)
        if period <= timedelta(0):
            raise RegistrationFailure(f"Period must be positive for id {medication_id}")
        try:
            dt_util.as_utc(first) + period
        except OverflowError as err:
            raise RegistrationFailure(f"Period for id {medication_id} runs past the last date") from err
        self._arm_periodic(medication_id, dt_util.as_utc(first), period, action)
        _LOGGER.debug(
            "Periodic armed for id %s at %s every %s", medication_id, first.isoformat(), period
        )

    def _arm_periodic(self, medication_id: int, when: datetime, period: timedelta, action: FireAction) -> None:
        @callback
        def _fire(_now: datetime) -> None:
            # Anchored to the scheduled instant, so late wakes never shift the grid
            try:
                self._arm_periodic(medication_id, when + period, period, action)
            except (OverflowError, RegistrationFailure) as err:
                self._unsubs.pop(medication_id, None)
                _LOGGER.warning("Periodic delivery for id %s ends after %s: %s", medication_id, when.isoformat(), err)
            action(when)

        self._unsubs[medication_id] = self._track(medication_id, when, _fire)

    @callback
    def cancel(self, medication_id: int) -> bool:
        unsub = self._unsubs.pop(medication_id, None)
        if unsub is None:
            return False
        unsub()
        _LOGGER.debug("Timer canceled for id %s", medication_id)
        return True

    @callback
    def cancel_all(self) -> None:
        for medication_id in list(self._unsubs):
            self.cancel(medication_id)

    @callback
    def close(self) -> None:
        self.cancel_all()
        self._closed = True

    def _check(self, medication_id: int, when: datetime) -> None:
        if self._closed:
            raise RegistrationFailure("Timer facility is shut down")
        if when.tzinfo is None:
            raise RegistrationFailure(f"Fire instant for id {medication_id} has no time zone")
        if medication_id in self._unsubs:
            raise RegistrationFailure(f"Id {medication_id} already has a live registration")

    def _track(self, medication_id: int, when: datetime, action) -> Callable[[], None]:
        try:
            return async_track_point_in_utc_time(self.hass, action, dt_util.as_utc(when))
        except (TypeError, ValueError) as err:
            raise RegistrationFailure(f"Could not arm timer for id {medication_id}: {err}") from err
