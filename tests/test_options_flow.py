import pytest

from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.medication_scheduler.const import CONF_NOTIFY_SERVICES, DOMAIN


@pytest.mark.asyncio
async def test_options_flow_updates_notify_services(hass):
    entry = MockConfigEntry(
        domain=DOMAIN,
        data={},
        options={CONF_NOTIFY_SERVICES: ""},
        title="Medication Scheduler",
        unique_id=DOMAIN,
    )
    entry.add_to_hass(hass)
    await hass.config_entries.async_setup(entry.entry_id)
    await hass.async_block_till_done()
    assert hass.data[DOMAIN]["scheduler"].surface.notify_services == []

    # Open options
    result = await hass.config_entries.options.async_init(entry.entry_id)
    assert result["type"] == "form"

    result2 = await hass.config_entries.options.async_configure(
        result["flow_id"],
        user_input={CONF_NOTIFY_SERVICES: "notify.test, phone"},
    )
    assert result2["type"] == "create_entry"
    await hass.async_block_till_done()

    # Entry reloads with the new targets
    assert entry.options[CONF_NOTIFY_SERVICES] == "notify.test, notify.phone"
    assert hass.data[DOMAIN]["scheduler"].surface.notify_services == ["test", "phone"]

    await hass.config_entries.async_unload(entry.entry_id)
    await hass.async_block_till_done()


@pytest.mark.asyncio
async def test_options_flow_rejects_invalid_services(hass):
    entry = MockConfigEntry(domain=DOMAIN, data={}, options={}, unique_id=DOMAIN)
    entry.add_to_hass(hass)
    await hass.config_entries.async_setup(entry.entry_id)
    await hass.async_block_till_done()

    result = await hass.config_entries.options.async_init(entry.entry_id)
    result2 = await hass.config_entries.options.async_configure(
        result["flow_id"], user_input={CONF_NOTIFY_SERVICES: "light.kitchen"}
    )
    assert result2["type"] == "form"
    assert result2["errors"]["base"] == "invalid_notify_services"

    await hass.config_entries.async_unload(entry.entry_id)
    await hass.async_block_till_done()
