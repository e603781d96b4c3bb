"""In-memory registry of the accessories managed by the integration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .const import CONTEXT_APPLIANCE_ID, CONTEXT_CAPABILITIES, CONTEXT_MODEL_NAME

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .accessory import PlatformAccessory
    from .devices import ElectroluxController
    from .models import ApplianceDescriptor, Capabilities

_LOGGER = logging.getLogger(__name__)


class AccessoryRecord:
    """One accessory together with its latest descriptor and controller.

    Capabilities live in the accessory context so they are persisted by the
    host. The context distinguishes three states: no key (not yet known),
    ``None`` (explicitly unsupported) and a capability document.
    """

    def __init__(
        self,
        accessory: PlatformAccessory,
        descriptor: ApplianceDescriptor | None = None,
        controller: ElectroluxController | None = None,
    ) -> None:
        self.accessory = accessory
        self.descriptor = descriptor
        self.controller = controller

    def __repr__(self) -> str:
        return (
            f"AccessoryRecord({self.accessory!r}, "
            f"controller={type(self.controller).__name__ if self.controller else None})"
        )

    @property
    def identity(self) -> str:
        return self.accessory.uuid

    @property
    def capabilities_known(self) -> bool:
        """Return True once capabilities were resolved, even as unsupported."""
        return CONTEXT_CAPABILITIES in self.accessory.context

    @property
    def capabilities(self) -> Capabilities | None:
        return self.accessory.context.get(CONTEXT_CAPABILITIES)

    @capabilities.setter
    def capabilities(self, value: Capabilities | None) -> None:
        self.accessory.context[CONTEXT_CAPABILITIES] = value

    def update_descriptor(self, descriptor: ApplianceDescriptor) -> None:
        """Store the latest descriptor and mirror its identity in the context."""
        self.descriptor = descriptor
        self.accessory.context[CONTEXT_APPLIANCE_ID] = descriptor.appliance_id
        self.accessory.context[CONTEXT_MODEL_NAME] = descriptor.model_name


class AccessoryRegistry:
    """Insertion ordered mapping of accessory identity to record."""

    def __init__(self) -> None:
        self._records: dict[str, AccessoryRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AccessoryRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, identity: object) -> bool:
        return identity in self._records

    def get(self, identity: str) -> AccessoryRecord | None:
        return self._records.get(identity)

    def add(self, record: AccessoryRecord) -> AccessoryRecord:
        """Insert a new record.

        Raises:
            ValueError: If a record with the same identity already exists.

        """
        if record.identity in self._records:
            error_msg = f"Accessory {record.identity} is already registered"
            raise ValueError(error_msg)
        self._records[record.identity] = record
        return record

    def restore(self, accessory: PlatformAccessory) -> AccessoryRecord:
        """Track an accessory replayed from storage.

        The record has no descriptor or controller until the next discovery
        pass supplies them.
        """
        _LOGGER.info("Loading accessory from cache: %s", accessory.display_name)
        existing = self._records.get(accessory.uuid)
        if existing is not None:
            return existing
        return self.add(AccessoryRecord(accessory))
