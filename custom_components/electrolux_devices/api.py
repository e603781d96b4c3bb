"""API client for the Electrolux developer cloud.

This module provides functions to interact with the Electrolux API,
including authentication, token refresh, appliance listing and
capability lookup.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import AUTH_BASE_URL, BASE_URL, HTTP_TIMEOUT, USER_AGENT
from .models import ApplianceDescriptor, Capabilities, Session

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404

# Fields a structured error body may carry its message in, by priority
ERROR_MESSAGE_KEYS = ("message", "detail", "error_description", "error")


class ElectroluxApiClientError(Exception):
    """Base exception for Electrolux API client errors."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ElectroluxApiAuthError(ElectroluxApiClientError):
    """Exception raised for authentication errors."""


class ElectroluxApiNotFoundError(ElectroluxApiClientError):
    """Exception raised when the requested resource does not exist."""


def create_headers(
    access_token: str | None = None,
    api_key: str | None = None,
) -> dict[str, str]:
    """Create HTTP headers for Electrolux API requests.

    Args:
        access_token: Optional bearer token to include in headers.
        api_key: Optional developer API key.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "content-type": "application/json",
        "accept": "application/json",
        "user-agent": USER_AGENT,
    }
    if access_token:
        headers["authorization"] = f"Bearer {access_token}"
    if api_key:
        headers["x-api-key"] = api_key
    return headers


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error."""
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    """Check if HTTP status code indicates authentication error."""
    return status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN)


def is_not_found_error(status: int) -> bool:
    """Check if HTTP status code indicates a missing resource."""
    return status == HTTP_NOT_FOUND


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _message_from_body(body: Any) -> str | None:
    if isinstance(body, dict):
        for key in ERROR_MESSAGE_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(body, str) and body:
        return body
    return None


def extract_error_message(err: BaseException) -> str:
    """Return the most descriptive message available for an error.

    Structured error bodies returned by the API take precedence over the
    exception text.

    Args:
        err: Any exception raised while talking to the API.

    Returns:
        Human readable error message.

    """
    if isinstance(err, ElectroluxApiClientError):
        message = _message_from_body(err.body)
        if message:
            return message
    return str(err) or type(err).__name__


def validate_response(response: httpx.Response) -> Any:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response.

    Raises:
        ElectroluxApiAuthError: If authentication error is detected.
        ElectroluxApiNotFoundError: If the resource does not exist.
        ElectroluxApiClientError: If any other HTTP error is detected.

    """
    status = response.status_code
    if not is_http_error(status):
        return response.json()

    body = _parse_body(response)
    message = _message_from_body(body) or f"Request failed: {status}"

    if is_auth_error(status):
        raise ElectroluxApiAuthError(message, status=status, body=body)
    if is_not_found_error(status):
        raise ElectroluxApiNotFoundError(message, status=status, body=body)
    raise ElectroluxApiClientError(message, status=status, body=body)


def extract_session(
    data: dict[str, Any],
    regional_base_url: str,
    now: datetime | None = None,
) -> Session:
    """Build a Session from a token endpoint response.

    Args:
        data: Token endpoint response data.
        regional_base_url: Base URL to keep when the response omits one.
        now: Reference time for the expiry computation.

    Returns:
        A new Session.

    Raises:
        ElectroluxApiClientError: If the response lacks the token fields.

    """
    if now is None:
        now = datetime.now(UTC)
    try:
        access_token = data["accessToken"]
        refresh_token = data["refreshToken"]
        expires_in = int(data["expiresIn"])
    except (KeyError, TypeError, ValueError) as err:
        error_msg = f"Malformed token response: {err}"
        raise ElectroluxApiClientError(error_msg, body=data) from err

    if not access_token or not refresh_token:
        error_msg = "Token response is missing a token"
        raise ElectroluxApiClientError(error_msg, body=data)

    return Session(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=now + timedelta(seconds=expires_in),
        regional_base_url=data.get("regionalBaseUrl") or regional_base_url,
    )


def extract_appliance(data: dict[str, Any]) -> ApplianceDescriptor:
    """Extract one appliance descriptor from a listing entry."""
    appliance_data = data.get("applianceData") or {}
    properties = data.get("properties") or {}
    return ApplianceDescriptor(
        appliance_id=str(data["applianceId"]),
        model_name=str(appliance_data.get("modelName", "")),
        display_name=str(
            appliance_data.get("applianceName") or data["applianceId"]
        ),
        connection_state=data.get("connectionState"),
        properties=dict(properties.get("reported") or {}),
    )


def extract_appliances(data: list[dict[str, Any]]) -> list[ApplianceDescriptor]:
    """Extract appliance descriptors from the listing response.

    Entries without an appliance id are skipped.

    Raises:
        ElectroluxApiClientError: If the response is not a list.

    """
    if not isinstance(data, list):
        error_msg = "Malformed appliance listing"
        raise ElectroluxApiClientError(error_msg, body=data)

    appliances = []
    for entry in data:
        if not isinstance(entry, dict):
            _LOGGER.debug("Skipping malformed appliance entry: %s", entry)
            continue
        if not entry.get("applianceId"):
            _LOGGER.debug("Skipping appliance entry without id: %s", entry)
            continue
        appliances.append(extract_appliance(entry))
    return appliances


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for Electrolux API.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=HTTP_TIMEOUT)
    retry = Retry(total=3, backoff_factor=0.5)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def async_sign_in(
    session: httpx.AsyncClient,
    client_id: str,
    client_secret: str,
    api_key: str | None = None,
) -> Session:
    """Obtain a fresh session with the developer client credentials.

    Args:
        session: HTTP client session.
        client_id: Developer portal client id.
        client_secret: Developer portal client secret.
        api_key: Optional developer API key.

    Returns:
        The new Session.

    Raises:
        ElectroluxApiAuthError: If the credentials are rejected.
        ElectroluxApiClientError: If API request fails.

    """
    url = f"{AUTH_BASE_URL}/one-account-authorization/api/v1/token"
    payload = {
        "grantType": "client_credentials",
        "clientId": client_id,
        "clientSecret": client_secret,
    }

    _LOGGER.debug("Signing in to Electrolux API")
    response = await session.post(
        url, headers=create_headers(api_key=api_key), json=payload
    )
    data = validate_response(response)
    _LOGGER.debug("Successfully signed in to Electrolux API")
    return extract_session(data, BASE_URL)


async def async_refresh_token(
    session: httpx.AsyncClient,
    refresh_token: str,
    regional_base_url: str,
    api_key: str | None = None,
) -> Session:
    """Exchange a refresh token for a new session.

    The refresh token is single use; the returned session carries its
    replacement.

    Raises:
        ElectroluxApiAuthError: If the refresh token is rejected.
        ElectroluxApiClientError: If API request fails.

    """
    url = f"{regional_base_url}/api/v1/token/refresh"
    payload = {"grantType": "refresh_token", "refreshToken": refresh_token}

    _LOGGER.debug("Refreshing Electrolux access token")
    response = await session.post(
        url, headers=create_headers(api_key=api_key), json=payload
    )
    data = validate_response(response)
    return extract_session(data, regional_base_url)


async def async_get_appliances(
    session: httpx.AsyncClient,
    access_token: str,
    regional_base_url: str,
    api_key: str | None = None,
) -> list[ApplianceDescriptor]:
    """Fetch the appliances of the account.

    Raises:
        ElectroluxApiAuthError: If authentication fails.
        ElectroluxApiClientError: If API request fails.

    """
    url = f"{regional_base_url}/api/v1/appliances"

    _LOGGER.debug("Fetching appliances from Electrolux API")
    response = await session.get(
        url, headers=create_headers(access_token, api_key)
    )
    data = validate_response(response)
    appliances = extract_appliances(data)
    _LOGGER.debug("Retrieved %d appliances from Electrolux API", len(appliances))
    return appliances


async def async_get_capabilities(
    session: httpx.AsyncClient,
    appliance_id: str,
    access_token: str,
    regional_base_url: str,
    api_key: str | None = None,
) -> Capabilities:
    """Fetch the capability document of one appliance.

    Raises:
        ElectroluxApiNotFoundError: If the appliance exposes no capabilities.
        ElectroluxApiAuthError: If authentication fails.
        ElectroluxApiClientError: If API request fails.

    """
    url = f"{regional_base_url}/api/v1/appliances/{appliance_id}/info"

    _LOGGER.debug("Fetching capabilities for appliance %s", appliance_id)
    response = await session.get(
        url, headers=create_headers(access_token, api_key)
    )
    return validate_response(response)
