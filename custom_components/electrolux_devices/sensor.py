"""Sensor entities for Electrolux appliances.

Each accessory is shown as one sensor whose state is the primary value
reported by its controller; the remaining supported properties are exposed
as state attributes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import SensorEntity
from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.dispatcher import async_dispatcher_connect

from .const import (
    CONTEXT_APPLIANCE_ID,
    CONTEXT_MODEL_NAME,
    DOMAIN,
    MANUFACTURER,
    SIGNAL_NEW_ACCESSORY,
)

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .accessory import PlatformAccessory
    from .devices import ElectroluxController
    from .registry import AccessoryRegistry

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities for Electrolux accessories."""
    registry: AccessoryRegistry = hass.data[DOMAIN][entry.entry_id]["registry"]

    async_add_entities(
        [ElectroluxApplianceSensor(registry, record.accessory) for record in registry]
    )

    @callback
    def _async_add_accessories(accessories: list[PlatformAccessory]) -> None:
        _LOGGER.debug("Adding entities for %d new accessories", len(accessories))
        async_add_entities(
            [ElectroluxApplianceSensor(registry, accessory) for accessory in accessories]
        )

    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            SIGNAL_NEW_ACCESSORY.format(entry.entry_id),
            _async_add_accessories,
        )
    )


class ElectroluxApplianceSensor(SensorEntity):
    """Sensor mirroring the controller of one accessory."""

    _attr_has_entity_name = True
    _attr_name = None
    _attr_should_poll = False

    def __init__(
        self,
        registry: AccessoryRegistry,
        accessory: PlatformAccessory,
    ) -> None:
        """Initialize the sensor.

        Args:
            registry: Accessory registry owning the controller.
            accessory: Accessory handle the sensor represents.

        """
        self._registry = registry
        self._accessory = accessory
        self._unsub_update = None
        self._attr_unique_id = accessory.uuid
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, accessory.uuid)},
            name=accessory.display_name,
            manufacturer=MANUFACTURER,
            model=accessory.context.get(CONTEXT_MODEL_NAME),
            serial_number=accessory.context.get(CONTEXT_APPLIANCE_ID),
        )

    @property
    def controller(self) -> ElectroluxController | None:
        record = self._registry.get(self._accessory.uuid)
        return record.controller if record else None

    @property
    def available(self) -> bool:
        controller = self.controller
        return controller is not None and controller.available

    @property
    def device_class(self) -> Any:
        controller = self.controller
        return controller.device_class if controller else None

    @property
    def native_unit_of_measurement(self) -> str | None:
        controller = self.controller
        return controller.unit_of_measurement if controller else None

    @property
    def icon(self) -> str | None:
        controller = self.controller
        return controller.icon if controller else None

    @property
    def native_value(self) -> Any:
        controller = self.controller
        return controller.native_value if controller else None

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        controller = self.controller
        return controller.attributes if controller else None

    async def async_added_to_hass(self) -> None:
        """Subscribe to accessory updates."""
        await super().async_added_to_hass()
        self._unsub_update = self._accessory.register_update_callback(
            self._handle_accessory_update
        )

    async def async_will_remove_from_hass(self) -> None:
        """Unsubscribe from accessory updates."""
        await super().async_will_remove_from_hass()
        if self._unsub_update is not None:
            self._unsub_update()
            self._unsub_update = None

    @callback
    def _handle_accessory_update(self) -> None:
        self.async_write_ha_state()
