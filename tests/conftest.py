"""Pytest configuration and fixtures for Electrolux Devices tests."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from custom_components.electrolux_devices.accessory import AccessoryHost
from custom_components.electrolux_devices.auth import ElectroluxTokenStore
from custom_components.electrolux_devices.discovery import ElectroluxDiscovery
from custom_components.electrolux_devices.registry import AccessoryRegistry

from .helpers import ACCESS_TOKEN, API_KEY, REFRESH_TOKEN, create_session


@pytest.fixture
def sample_token_response() -> dict:
    """Fixture providing a sample token endpoint response."""
    return {
        "accessToken": ACCESS_TOKEN,
        "refreshToken": REFRESH_TOKEN,
        "expiresIn": 43200,
        "tokenType": "Bearer",
        "scope": "email offline_access",
    }


@pytest.fixture
def sample_appliances_response() -> list[dict]:
    """Fixture providing a sample appliance listing response.

    Returns:
        Two supported appliances and one appliance of an unknown model.

    """
    return [
        {
            "applianceId": "900277479937001234",
            "applianceData": {"applianceName": "Living room", "modelName": "PUREA9"},
            "connectionState": "connected",
            "properties": {"reported": {"PM2_5": 4, "Fanspeed": 3}},
        },
        {
            "applianceId": "950011716506019911",
            "applianceData": {"applianceName": "Bedroom AC", "modelName": "Azul"},
            "connectionState": "disconnected",
            "properties": {"reported": {"ambientTemperatureC": 24}},
        },
        {
            "applianceId": "914501132201234567",
            "applianceData": {"applianceName": "Oven", "modelName": "OVEN9000"},
            "connectionState": "connected",
            "properties": {"reported": {}},
        },
    ]


@pytest.fixture
def sample_capabilities_response() -> dict:
    """Fixture providing a sample appliance info response."""
    return {
        "applianceInfo": {"brand": "ELECTROLUX", "model": "PUREA9"},
        "capabilities": {
            "Fanspeed": {"access": "readwrite", "type": "int", "min": 1, "max": 9},
            "PM2_5": {"access": "read", "type": "int"},
        },
    }


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    hass = Mock()
    hass.data = {}
    return hass


@pytest.fixture
def mock_entry() -> Mock:
    """Create a mock config entry."""
    entry = Mock()
    entry.entry_id = "test_entry_id"
    entry.title = "Electrolux Devices"
    entry.data = {}
    return entry


@pytest.fixture
def mock_session() -> Mock:
    """Create a mock HTTP session."""
    return Mock(spec=httpx.AsyncClient)


@pytest.fixture
def mock_store() -> Mock:
    """Create a mock accessory store."""
    store = Mock()
    store.async_load = AsyncMock(return_value=None)
    store.async_delay_save = Mock()
    return store


@pytest.fixture
def mock_dispatcher_send() -> Iterator[Mock]:
    """Patch the dispatcher used to announce new accessories."""
    with patch(
        "custom_components.electrolux_devices.accessory.async_dispatcher_send"
    ) as send:
        yield send


@pytest.fixture
def host(
    mock_hass: Mock,
    mock_entry: Mock,
    mock_store: Mock,
    mock_dispatcher_send: Mock,
) -> Iterator[AccessoryHost]:
    """Create an accessory host backed by the mock store."""
    with patch(
        "custom_components.electrolux_devices.accessory.ElectroluxAccessoryStore",
        return_value=mock_store,
    ):
        yield AccessoryHost(mock_hass, mock_entry)


@pytest.fixture
def token_store(mock_session: Mock) -> ElectroluxTokenStore:
    """Create a token store holding a valid session."""
    store = ElectroluxTokenStore(
        mock_session,
        client_id="client_id",
        client_secret="client_secret",
        api_key=API_KEY,
    )
    store._session = create_session()
    return store


@pytest.fixture
def registry() -> AccessoryRegistry:
    """Create an empty accessory registry."""
    return AccessoryRegistry()


@pytest.fixture
def discovery(
    mock_hass: Mock,
    mock_session: Mock,
    token_store: ElectroluxTokenStore,
    registry: AccessoryRegistry,
    host: AccessoryHost,
) -> ElectroluxDiscovery:
    """Create a discovery engine wired to the fixtures above."""
    return ElectroluxDiscovery(mock_hass, mock_session, token_store, registry, host)
