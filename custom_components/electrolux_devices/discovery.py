"""Reconciliation of the remote appliance list with the local accessories."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from . import api
from .devices import get_controller_factory
from .registry import AccessoryRecord

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .accessory import AccessoryHost, PlatformAccessory
    from .auth import ElectroluxTokenStore
    from .models import ApplianceDescriptor, Capabilities
    from .registry import AccessoryRegistry

_LOGGER = logging.getLogger(__name__)


class ElectroluxDiscovery:
    """Performs discovery passes against the Electrolux cloud.

    Each pass fetches the appliance listing once and reconciles every entry
    independently: unsupported models are skipped, known accessories get a
    fresh controller, and new ones are created and registered with the host.
    Passes are serialized so registry mutations have a single writer.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        session: httpx.AsyncClient,
        token_store: ElectroluxTokenStore,
        registry: AccessoryRegistry,
        host: AccessoryHost,
    ) -> None:
        self.hass = hass
        self.session = session
        self.token_store = token_store
        self.registry = registry
        self.host = host
        self.devices_discovered = False
        self._lock = asyncio.Lock()

    async def async_get_appliances(self) -> list[ApplianceDescriptor]:
        """Fetch the remote appliance listing with the current session."""
        return await api.async_get_appliances(
            self.session,
            self.token_store.access_token,
            self.token_store.regional_base_url,
            self.token_store.api_key,
        )

    async def async_get_capabilities(self, appliance_id: str) -> Capabilities | None:
        """Fetch the capabilities of an appliance.

        Any failure classifies the appliance as unsupported (None).
        """
        try:
            return await api.async_get_capabilities(
                self.session,
                appliance_id,
                self.token_store.access_token,
                self.token_store.regional_base_url,
                self.token_store.api_key,
            )
        except api.ElectroluxApiNotFoundError:
            _LOGGER.debug("Appliance %s exposes no capabilities", appliance_id)
        except (api.ElectroluxApiClientError, httpx.RequestError, ValueError) as err:
            _LOGGER.debug(
                "Capabilities unavailable for appliance %s: %s",
                appliance_id,
                api.extract_error_message(err),
            )
        return None

    async def async_discover(self) -> None:
        """Run one discovery pass.

        Returns immediately when there is no access token yet. Errors while
        fetching the listing propagate; errors for a single appliance are
        logged and do not affect the others.
        """
        if not self.token_store.access_token:
            _LOGGER.debug("No access token yet, deferring discovery")
            return

        async with self._lock:
            _LOGGER.info("Discovering devices...")
            appliances = await self.async_get_appliances()

            new_accessories: list[PlatformAccessory] = []
            results = await asyncio.gather(
                *(
                    self._async_reconcile(appliance, new_accessories)
                    for appliance in appliances
                ),
                return_exceptions=True,
            )
            for appliance, result in zip(appliances, results, strict=True):
                if isinstance(result, BaseException):
                    _LOGGER.warning(
                        "Failed to set up appliance %s (%s): %s",
                        appliance.display_name,
                        appliance.appliance_id,
                        api.extract_error_message(result),
                    )

            if new_accessories:
                self.host.async_register_accessories(new_accessories)
            self.host.async_update_accessories()

            _LOGGER.info("Devices discovered!")
            self.devices_discovered = True

    async def _async_reconcile(
        self,
        appliance: ApplianceDescriptor,
        new_accessories: list[PlatformAccessory],
    ) -> None:
        factory = get_controller_factory(appliance.model_name)
        if factory is None:
            _LOGGER.warning(
                "Accessory not found for model: %s", appliance.model_name
            )
            return

        identity = self.host.derive_identity(appliance.appliance_id)
        existing = self.registry.get(identity)

        if existing is not None and existing.capabilities_known:
            capabilities = existing.capabilities
        else:
            capabilities = await self.async_get_capabilities(appliance.appliance_id)

        # The listing may have been reconciled concurrently for the same id
        existing = self.registry.get(identity)

        if existing is not None:
            _LOGGER.info(
                "Restoring existing accessory from cache: %s",
                existing.accessory.display_name,
            )
            controller = factory(self, existing.accessory, appliance, capabilities)
            existing.update_descriptor(appliance)
            if not existing.capabilities_known:
                existing.capabilities = capabilities
            existing.controller = controller
            existing.accessory.notify_updated()
            return

        _LOGGER.info("Adding new accessory: %s", appliance.display_name)
        accessory = self.host.create_accessory(appliance.display_name, identity)
        controller = factory(self, accessory, appliance, capabilities)
        record = AccessoryRecord(accessory, controller=controller)
        record.update_descriptor(appliance)
        record.capabilities = capabilities
        self.registry.add(record)
        new_accessories.append(accessory)
