import pytest

from pytest_homeassistant_custom_component.common import MockConfigEntry

from homeassistant.data_entry_flow import FlowResultType

from custom_components.medication_scheduler.const import CONF_NOTIFY_SERVICES, DOMAIN


@pytest.mark.asyncio
async def test_config_flow_success(hass):
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": "user"})
    assert result["type"] == FlowResultType.FORM

    result2 = await hass.config_entries.flow.async_configure(
        result["flow_id"], user_input={CONF_NOTIFY_SERVICES: "mobile_app_phone, notify.family"}
    )
    assert result2["type"] == FlowResultType.CREATE_ENTRY
    assert result2["title"] == "Medication Scheduler"
    assert result2["options"][CONF_NOTIFY_SERVICES] == "notify.mobile_app_phone, notify.family"
    await hass.async_block_till_done()

    entry = hass.config_entries.async_entries(DOMAIN)[0]
    await hass.config_entries.async_unload(entry.entry_id)
    await hass.async_block_till_done()


@pytest.mark.asyncio
async def test_config_flow_invalid_services(hass):
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": "user"})
    result2 = await hass.config_entries.flow.async_configure(
        result["flow_id"], user_input={CONF_NOTIFY_SERVICES: "Not A Service!"}
    )
    assert result2["type"] == FlowResultType.FORM
    assert result2["errors"]["base"] == "invalid_notify_services"


@pytest.mark.asyncio
async def test_config_flow_single_instance(hass):
    MockConfigEntry(domain=DOMAIN, unique_id=DOMAIN, data={}).add_to_hass(hass)
    result = await hass.config_entries.flow.async_init(DOMAIN, context={"source": "user"})
    assert result["type"] == FlowResultType.ABORT
    assert result["reason"] == "already_configured"
