"""Electrolux Devices integration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeassistant.const import (
    EVENT_HOMEASSISTANT_STARTED,
    EVENT_HOMEASSISTANT_STOP,
    Platform,
)
from homeassistant.core import CoreState, callback

from .accessory import AccessoryHost, ElectroluxAccessoryStore
from .api import create_session_client
from .auth import ElectroluxTokenStore
from .const import (
    CONF_API_KEY,
    CONF_CLIENT_ID,
    CONF_CLIENT_SECRET,
    CONF_POLLING_INTERVAL,
    CONF_REFRESH_TOKEN,
    DEFAULT_POLLING_INTERVAL,
    DOMAIN,
)
from .coordinator import ElectroluxPollingCoordinator
from .discovery import ElectroluxDiscovery
from .registry import AccessoryRegistry

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import Event, HomeAssistant

    from .models import Session

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.SENSOR]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info(
        "Setting up Electrolux Devices integration for entry %s", entry.entry_id
    )

    session = create_session_client(hass)

    @callback
    def _persist_tokens(new_session: Session) -> None:
        """Store the rotated refresh token so a restart does not reuse a spent one."""
        if entry.data.get(CONF_REFRESH_TOKEN) == new_session.refresh_token:
            return
        hass.config_entries.async_update_entry(
            entry,
            data={**entry.data, CONF_REFRESH_TOKEN: new_session.refresh_token},
        )
        _LOGGER.debug("Persisted rotated refresh token for entry %s", entry.entry_id)

    token_store = ElectroluxTokenStore(
        session,
        client_id=entry.data.get(CONF_CLIENT_ID),
        client_secret=entry.data.get(CONF_CLIENT_SECRET),
        api_key=entry.data.get(CONF_API_KEY),
        refresh_token=entry.data.get(CONF_REFRESH_TOKEN),
        on_token_update=_persist_tokens,
    )

    registry = AccessoryRegistry()
    host = AccessoryHost(hass, entry)
    for accessory in await host.async_load():
        registry.restore(accessory)

    discovery = ElectroluxDiscovery(hass, session, token_store, registry, host)
    coordinator = ElectroluxPollingCoordinator(
        hass,
        token_store,
        discovery,
        entry.data.get(CONF_POLLING_INTERVAL, DEFAULT_POLLING_INTERVAL),
    )

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "token_store": token_store,
        "registry": registry,
        "host": host,
        "discovery": discovery,
        "coordinator": coordinator,
    }
    _LOGGER.debug(
        "Stored data for entry %s: %d cached accessories",
        entry.entry_id,
        len(registry),
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    entry.async_on_unload(coordinator.async_stop)
    entry.async_on_unload(
        hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, coordinator.async_stop)
    )

    async def _async_start(event: Event | None = None) -> None:
        if entry.entry_id not in hass.data.get(DOMAIN, {}):
            _LOGGER.debug("Entry %s unloaded before startup", entry.entry_id)
            return
        await coordinator.async_start()

    if hass.state is CoreState.running:
        hass.async_create_task(
            _async_start(), name=f"Electrolux Devices start - {entry.title}"
        )
    else:
        hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STARTED, _async_start)

    _LOGGER.info(
        "Successfully setup Electrolux Devices integration for entry %s",
        entry.entry_id,
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Electrolux Devices integration for entry %s", entry.entry_id)

    entry_data = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if entry_data is not None:
        entry_data["coordinator"].async_stop()

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data[DOMAIN].pop(entry.entry_id, None)
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)
    else:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Forget the cached accessories of a removed entry."""
    await ElectroluxAccessoryStore(hass, entry.entry_id).async_remove()
