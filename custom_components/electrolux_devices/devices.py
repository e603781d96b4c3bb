"""Per-model controllers for Electrolux appliances.

A controller turns the reported state of one appliance into the values shown
by its Home Assistant entity. Controllers are selected by model name through
``get_controller_factory``; models missing from ``DEVICES`` are unsupported.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import SensorDeviceClass
from homeassistant.const import (
    CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
    PERCENTAGE,
    UnitOfTemperature,
)

from .const import CONNECTION_STATE_CONNECTED

if TYPE_CHECKING:
    from .accessory import PlatformAccessory
    from .discovery import ElectroluxDiscovery
    from .models import ApplianceDescriptor, Capabilities

_LOGGER = logging.getLogger(__name__)

# Key holding the capability map in the appliance info document
CAPABILITIES_KEY = "capabilities"

# Robot vacuum battery levels reported as steps 1..6
BATTERY_STEPS = 6


class ElectroluxController:
    """Base controller shared by every supported model."""

    primary_property: str | None = None
    device_class: SensorDeviceClass | None = None
    unit_of_measurement: str | None = None
    icon: str | None = None

    def __init__(
        self,
        platform: ElectroluxDiscovery,
        accessory: PlatformAccessory,
        descriptor: ApplianceDescriptor,
        capabilities: Capabilities | None,
    ) -> None:
        """Initialize the controller.

        Args:
            platform: Discovery engine that created the controller.
            accessory: Accessory handle the controller drives.
            descriptor: Latest appliance descriptor.
            capabilities: Capability document, or None when unsupported.

        """
        self.platform = platform
        self.accessory = accessory
        self.capabilities = capabilities
        self.descriptor = descriptor
        self.state: dict[str, Any] = {}
        self._apply(descriptor)

    @property
    def available(self) -> bool:
        return self.descriptor.connection_state == CONNECTION_STATE_CONNECTED

    @property
    def supported_properties(self) -> set[str]:
        """Return the property names listed in the capability document."""
        if not isinstance(self.capabilities, dict):
            return set()
        capability_map = self.capabilities.get(CAPABILITIES_KEY, self.capabilities)
        if not isinstance(capability_map, dict):
            return set()
        return set(capability_map)

    @property
    def native_value(self) -> Any:
        if self.primary_property is None:
            return None
        return self.convert(self.primary_property, self.state.get(self.primary_property))

    @property
    def attributes(self) -> dict[str, Any]:
        """Return the reported properties the appliance declares support for.

        Without capabilities only the primary property is exposed.
        """
        supported = self.supported_properties
        return {
            key: value
            for key, value in self.state.items()
            if key in supported and key != self.primary_property
        }

    def convert(self, key: str, value: Any) -> Any:
        """Convert a reported value into its displayed form."""
        return value

    def update(self, descriptor: ApplianceDescriptor) -> None:
        """Apply fresh appliance data and notify listeners."""
        self._apply(descriptor)
        self.accessory.notify_updated()

    def _apply(self, descriptor: ApplianceDescriptor) -> None:
        self.descriptor = descriptor
        self.state = dict(descriptor.properties)


class AirPurifierController(ElectroluxController):
    """Pure A9, Well A5/A7 and UltimateHome 500 air purifiers."""

    primary_property = "PM2_5"
    device_class = SensorDeviceClass.PM25
    unit_of_measurement = CONCENTRATION_MICROGRAMS_PER_CUBIC_METER
    icon = "mdi:air-purifier"


class AirConditionerController(ElectroluxController):
    """Portable air conditioners."""

    primary_property = "ambientTemperatureC"
    device_class = SensorDeviceClass.TEMPERATURE
    unit_of_measurement = UnitOfTemperature.CELSIUS
    icon = "mdi:air-conditioner"


class RobotVacuumController(ElectroluxController):
    """Pure i9 robot vacuums."""

    primary_property = "batteryStatus"
    device_class = SensorDeviceClass.BATTERY
    unit_of_measurement = PERCENTAGE
    icon = "mdi:robot-vacuum"

    def convert(self, key: str, value: Any) -> Any:
        if key != "batteryStatus" or value is None:
            return value
        try:
            step = int(value)
        except (TypeError, ValueError):
            _LOGGER.debug("Unexpected battery status %r", value)
            return None
        return round(min(max(step, 0), BATTERY_STEPS) * 100 / BATTERY_STEPS)


DEVICES: dict[str, type[ElectroluxController]] = {
    "PUREA9": AirPurifierController,
    "WELLA5": AirPurifierController,
    "WELLA7": AirPurifierController,
    "UltimateHome 500": AirPurifierController,
    "Azul": AirConditionerController,
    "COMFORT600": AirConditionerController,
    "PUREi9": RobotVacuumController,
}


def get_controller_factory(model_name: str) -> type[ElectroluxController] | None:
    """Return the controller class for a model, or None if unsupported."""
    return DEVICES.get(model_name)
