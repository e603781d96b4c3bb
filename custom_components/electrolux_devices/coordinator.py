"""Polling coordinator for Electrolux Devices integration."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from homeassistant.core import callback
from homeassistant.helpers.event import async_track_time_interval

from . import api
from .const import DEFAULT_POLLING_INTERVAL, DOMAIN

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from .auth import ElectroluxTokenStore
    from .discovery import ElectroluxDiscovery
    from .models import ApplianceDescriptor

_LOGGER = logging.getLogger(__name__)


class ElectroluxPollingCoordinator:
    """Drives the recurring token check, discovery and status polling.

    Every tick runs three phases in order inside a single error boundary:
    renew the session when it is missing or expired, run discovery until one pass has
    succeeded, and otherwise push fresh appliance data to the controllers of
    known accessories. A failing tick is logged and the next one still runs.
    Ticks never overlap: a tick firing while the previous one is still
    running is skipped.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        token_store: ElectroluxTokenStore,
        discovery: ElectroluxDiscovery,
        polling_interval: int = DEFAULT_POLLING_INTERVAL,
    ) -> None:
        self.hass = hass
        self.token_store = token_store
        self.discovery = discovery
        self.update_interval = timedelta(
            seconds=polling_interval or DEFAULT_POLLING_INTERVAL
        )
        self._unsub_interval: Callable[[], None] | None = None
        self._tick_lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._unsub_interval is not None

    async def async_start(self) -> None:
        """Sign in, run the first discovery and start the polling interval.

        Startup failures are logged; the interval is started regardless so
        the next ticks can recover.
        """
        if self.started:
            _LOGGER.debug("Polling already started")
            return

        try:
            await self.async_renew_session()
            await self.discovery.async_discover()
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Startup failed: %s", api.extract_error_message(err))
        finally:
            if not self.started:
                self._unsub_interval = async_track_time_interval(
                    self.hass,
                    self._async_handle_interval,
                    self.update_interval,
                    name=f"{DOMAIN} polling",
                )
                _LOGGER.debug(
                    "Polling every %s seconds",
                    self.update_interval.total_seconds(),
                )

    @callback
    def async_stop(self, *_: object) -> None:
        """Cancel the polling interval.

        Safe to call more than once and without a prior start. A tick that
        is already running is left to finish.
        """
        if self._unsub_interval is None:
            return
        self._unsub_interval()
        self._unsub_interval = None
        _LOGGER.debug("Polling stopped")

    async def async_renew_session(self) -> None:
        """Obtain a new session with the refresh token or the client credentials.

        Without a refresh token the client credentials are used. A rejected
        refresh token falls back to signing in when credentials are
        configured, so an entry never gets stuck on a spent token.

        Raises:
            ElectroluxApiAuthError: If no way to authenticate is left.
            ElectroluxApiClientError: If the token request fails.

        """
        if not self.token_store.refresh_token:
            await self.token_store.async_sign_in()
            return

        try:
            await self.token_store.async_refresh()
        except api.ElectroluxApiAuthError as err:
            if not self.token_store.has_client_credentials:
                raise
            _LOGGER.warning(
                "Refresh token rejected (%s), signing in again",
                api.extract_error_message(err),
            )
            await self.token_store.async_sign_in()

    async def _async_handle_interval(self, _now: datetime) -> None:
        if self._tick_lock.locked():
            _LOGGER.debug("Previous poll still running, skipping this tick")
            return
        async with self._tick_lock:
            await self.async_tick()

    async def async_tick(self, now: datetime | None = None) -> None:
        """Run one polling cycle, logging instead of raising any error."""
        try:
            if now is None:
                now = datetime.now(UTC)
            if self.token_store.is_expired(now):
                await self.async_renew_session()

            if not self.discovery.devices_discovered:
                await self.discovery.async_discover()
                return

            await self.async_poll_status()
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Polling error: %s", api.extract_error_message(err))

    async def async_poll_status(self) -> None:
        """Push the latest appliance data to the known accessories.

        Appliances without a local accessory are ignored until the entry is
        reloaded.
        """
        _LOGGER.debug("Polling appliances status...")
        appliances = await self.discovery.async_get_appliances()

        for appliance in appliances:
            self._update_appliance(appliance)

        _LOGGER.debug("Appliances status polled!")

    def _update_appliance(self, appliance: ApplianceDescriptor) -> None:
        identity = self.discovery.host.derive_identity(appliance.appliance_id)
        record = self.discovery.registry.get(identity)
        if record is None:
            return

        record.update_descriptor(appliance)
        if record.controller is None:
            return
        try:
            record.controller.update(appliance)
        except Exception:
            _LOGGER.exception(
                "Failed to update appliance %s (%s)",
                appliance.display_name,
                appliance.appliance_id,
            )
