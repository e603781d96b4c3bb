"""Builders shared by the Electrolux Devices tests."""

from datetime import UTC, datetime, timedelta
from typing import Any

from custom_components.electrolux_devices.const import BASE_URL
from custom_components.electrolux_devices.models import (
    ApplianceDescriptor,
    Session,
)

ACCESS_TOKEN = "access_token_value"
REFRESH_TOKEN = "refresh_token_value"
API_KEY = "api_key_value"


def create_session(
    access_token: str = ACCESS_TOKEN,
    refresh_token: str = REFRESH_TOKEN,
    expires_in: int = 43200,
) -> Session:
    """Create a session expiring ``expires_in`` seconds from now."""
    return Session(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=datetime.now(UTC) + timedelta(seconds=expires_in),
        regional_base_url=BASE_URL,
    )


def create_appliance(
    appliance_id: str,
    model_name: str = "PUREA9",
    display_name: str | None = None,
    properties: dict[str, Any] | None = None,
    connection_state: str = "connected",
) -> ApplianceDescriptor:
    """Create an appliance descriptor as returned by the listing."""
    return ApplianceDescriptor(
        appliance_id=appliance_id,
        model_name=model_name,
        display_name=display_name or f"Appliance {appliance_id}",
        connection_state=connection_state,
        properties=properties if properties is not None else {"PM2_5": 3, "Fanspeed": 2},
    )
