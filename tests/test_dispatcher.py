from datetime import UTC, datetime, timedelta

import pytest

from pytest_homeassistant_custom_component.common import async_capture_events, async_mock_service

from custom_components.medication_scheduler.const import DOMAIN, EVENT_MEDICATION_DUE
from custom_components.medication_scheduler.dispatcher import TriggerDispatcher
from custom_components.medication_scheduler.models import FireEvent, Medication, RecurrenceInterval
from custom_components.medication_scheduler.notification import (
    NotificationSurface,
    parse_services,
    sanitize_services,
)
from custom_components.medication_scheduler.registry import AlarmRegistry

T = datetime(2030, 12, 25, 9, 0, tzinfo=UTC)


class RecordingSurface:
    def __init__(self):
        self.events = []

    async def async_deliver(self, event):
        self.events.append(event)


def _med(name="Aspirin", dosage="100mg"):
    return Medication(7, name, dosage, "00:00:00", "25/12/2030", "09:00")


@pytest.mark.asyncio
async def test_one_shot_fire_emits_single_event(hass, fake_timer):
    registry = AlarmRegistry(fake_timer)
    surface = RecordingSurface()
    TriggerDispatcher(hass, registry, surface)
    bus_events = async_capture_events(hass, EVENT_MEDICATION_DUE)

    await registry.async_register(_med(), RecurrenceInterval(), T)
    fake_timer.fire(7)
    await hass.async_block_till_done()

    assert surface.events == [FireEvent(7, "Aspirin", "100mg", T)]
    assert len(bus_events) == 1
    assert bus_events[0].data == {
        "medication_id": 7,
        "name": "Aspirin",
        "dosage": "100mg",
        "scheduled_for": T.isoformat(),
    }
    assert registry.get(7) is None


@pytest.mark.asyncio
async def test_periodic_fires_keep_entry_armed(hass, fake_timer):
    registry = AlarmRegistry(fake_timer)
    surface = RecordingSurface()
    TriggerDispatcher(hass, registry, surface)

    await registry.async_register(_med(), RecurrenceInterval(1, 0, 0), T)
    for _ in range(3):
        fake_timer.fire(7)
    await hass.async_block_till_done()

    assert [e.scheduled_for for e in surface.events] == [T, T + timedelta(days=1), T + timedelta(days=2)]
    assert registry.get(7).next_fire_instant == T + timedelta(days=3)
    assert registry.get(7).last_fired == T + timedelta(days=2)


@pytest.mark.asyncio
async def test_superseded_delivery_is_dropped(hass, fake_timer):
    registry = AlarmRegistry(fake_timer)
    surface = RecordingSurface()
    dispatcher = TriggerDispatcher(hass, registry, surface)

    old = await registry.async_register(_med(), RecurrenceInterval(0, 1, 0), T)
    await registry.async_register(_med(name="Ibuprofen"), RecurrenceInterval(0, 1, 0), T)
    dispatcher.async_handle_fire(7, old.version, T)
    await hass.async_block_till_done()
    assert surface.events == []

    fake_timer.fire(7)
    await hass.async_block_till_done()
    assert [e.name for e in surface.events] == ["Ibuprofen"]


@pytest.mark.asyncio
async def test_surface_replaces_notification_per_medication(hass):
    created = async_mock_service(hass, "persistent_notification", "create")
    pushed = async_mock_service(hass, "notify", "phone")
    surface = NotificationSurface(hass, ["phone"])

    await surface.async_deliver(FireEvent(7, "Aspirin", "100mg", T))
    await surface.async_deliver(FireEvent(7, "Aspirin", "100mg", T + timedelta(hours=1)))
    await hass.async_block_till_done()

    assert len(created) == 2
    assert {c.data["notification_id"] for c in created} == {f"{DOMAIN}_7"}
    assert created[0].data["title"] == "Aspirin Reminder"
    assert created[0].data["message"] == "Time to take your medication: Aspirin, Dosage: 100mg"
    assert [c.data["data"]["tag"] for c in pushed] == [f"{DOMAIN}_7", f"{DOMAIN}_7"]


def test_sanitize_services():
    assert sanitize_services(["notify.phone", "phone", "family", "Bad Name", "light.kitchen"]) == ["phone", "family"]
    assert parse_services("notify.a, b ,, notify.a") == ["a", "b"]
    assert parse_services("") == []
