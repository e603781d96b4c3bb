"""Accessory handles and their persistence inside Home Assistant.

An accessory is the local representation of one appliance. Its context blob
is persisted with ``homeassistant.helpers.storage`` so cached data such as
the appliance capabilities survives restarts.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, TypedDict

from homeassistant.helpers import storage
from homeassistant.helpers.dispatcher import async_dispatcher_send

from .const import DOMAIN, SIGNAL_NEW_ACCESSORY, STORAGE_SAVE_DELAY, STORAGE_VERSION

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)

ACCESSORY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, "electrolux.one")


class AccessoryStoreEntry(TypedDict):
    displayName: str
    uuid: str
    context: dict[str, Any]


class AccessoryStoreType(TypedDict):
    accessories: list[AccessoryStoreEntry]


class ElectroluxAccessoryStore(storage.Store[AccessoryStoreType]):
    VERSION = STORAGE_VERSION

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        super().__init__(
            hass,
            ElectroluxAccessoryStore.VERSION,
            f"{DOMAIN}.accessories.{entry_id}",
        )


class PlatformAccessory:
    """Handle of one accessory known to the host."""

    def __init__(
        self,
        display_name: str,
        accessory_uuid: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.display_name = display_name
        self.uuid = accessory_uuid
        self.context: dict[str, Any] = context if context is not None else {}
        self._update_callbacks: list[Callable[[], None]] = []

    def __repr__(self) -> str:
        return f"PlatformAccessory({self.display_name!r}, {self.uuid!r})"

    def register_update_callback(
        self,
        callback: Callable[[], None],
    ) -> Callable[[], None]:
        """Register a callback run whenever the accessory state changes.

        Returns:
            A function to unregister the callback.

        """
        self._update_callbacks.append(callback)

        def unregister() -> None:
            if callback in self._update_callbacks:
                self._update_callbacks.remove(callback)

        return unregister

    def notify_updated(self) -> None:
        """Run the registered update callbacks."""
        for callback in list(self._update_callbacks):
            callback()

    def as_dict(self) -> AccessoryStoreEntry:
        return {
            "displayName": self.display_name,
            "uuid": self.uuid,
            "context": self.context,
        }


class AccessoryHost:
    """Bridge between the accessory registry and Home Assistant.

    Derives stable identities, creates accessory handles, persists their
    context and announces newly registered accessories to entity platforms.
    """

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        self.hass = hass
        self.entry = entry
        self._store = ElectroluxAccessoryStore(hass, entry.entry_id)
        self._accessories: dict[str, PlatformAccessory] = {}

    @property
    def accessories(self) -> list[PlatformAccessory]:
        """Return every accessory registered with the host."""
        return list(self._accessories.values())

    @staticmethod
    def derive_identity(appliance_id: str) -> str:
        """Return the deterministic identity of an appliance."""
        return str(uuid.uuid5(ACCESSORY_NAMESPACE, appliance_id))

    @staticmethod
    def create_accessory(display_name: str, identity: str) -> PlatformAccessory:
        """Create a new, not yet registered, accessory handle."""
        return PlatformAccessory(display_name, identity)

    async def async_load(self) -> list[PlatformAccessory]:
        """Load the accessories persisted by a previous run."""
        data = await self._store.async_load()
        if not data:
            return []

        restored = []
        for entry in data.get("accessories", []):
            try:
                accessory = PlatformAccessory(
                    entry["displayName"],
                    entry["uuid"],
                    dict(entry.get("context") or {}),
                )
            except (KeyError, TypeError):
                _LOGGER.warning("Ignoring malformed stored accessory: %s", entry)
                continue
            self._accessories[accessory.uuid] = accessory
            restored.append(accessory)

        _LOGGER.debug("Loaded %d accessories from storage", len(restored))
        return restored

    def async_register_accessories(
        self,
        accessories: Iterable[PlatformAccessory],
    ) -> None:
        """Register new accessories and announce them to entity platforms."""
        added = []
        for accessory in accessories:
            if accessory.uuid in self._accessories:
                _LOGGER.debug("Accessory %s already registered", accessory)
                continue
            self._accessories[accessory.uuid] = accessory
            added.append(accessory)

        if not added:
            return

        self._schedule_save()
        async_dispatcher_send(
            self.hass,
            SIGNAL_NEW_ACCESSORY.format(self.entry.entry_id),
            added,
        )

    def async_update_accessories(self) -> None:
        """Persist the current context of every registered accessory."""
        self._schedule_save()

    def _schedule_save(self) -> None:
        self._store.async_delay_save(self._data_to_save, STORAGE_SAVE_DELAY)

    def _data_to_save(self) -> AccessoryStoreType:
        return {
            "accessories": [
                accessory.as_dict() for accessory in self._accessories.values()
            ]
        }
