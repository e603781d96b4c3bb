"""Data models for Electrolux Devices integration."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

Capabilities = dict[str, Any]


@dataclass(frozen=True)
class Session:
    """Represents an authenticated cloud session.

    A session is always replaced as a whole, so the access and refresh
    tokens are either both present or both absent.
    """

    access_token: str
    refresh_token: str
    expires_at: datetime
    regional_base_url: str


@dataclass(frozen=True)
class ApplianceDescriptor:
    """Represents one appliance as returned by the remote listing."""

    appliance_id: str
    model_name: str
    display_name: str
    connection_state: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
