"""Tests for the Electrolux Devices API client."""

import json
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest
from pytest_httpx import HTTPXMock

from custom_components.electrolux_devices import api
from custom_components.electrolux_devices.api import (
    ElectroluxApiAuthError,
    ElectroluxApiClientError,
    ElectroluxApiNotFoundError,
)
from custom_components.electrolux_devices.const import (
    AUTH_BASE_URL,
    BASE_URL,
    USER_AGENT,
)
from custom_components.electrolux_devices.models import ApplianceDescriptor, Session

from tests.helpers import ACCESS_TOKEN, API_KEY, REFRESH_TOKEN

REGIONAL_URL = "https://api.eu.electrolux.one"
EXPECTED_APPLIANCE_COUNT = 3


class TestErrors:
    """Tests for the API exception hierarchy."""

    def test_auth_error_is_client_error(self) -> None:
        """Test that ElectroluxApiAuthError is an ElectroluxApiClientError."""
        error = ElectroluxApiAuthError("Auth error")
        assert isinstance(error, ElectroluxApiClientError)
        assert isinstance(error, Exception)

    def test_not_found_error_is_client_error(self) -> None:
        """Test that ElectroluxApiNotFoundError is an ElectroluxApiClientError."""
        assert isinstance(ElectroluxApiNotFoundError("gone"), ElectroluxApiClientError)

    def test_client_error_keeps_status_and_body(self) -> None:
        """Test that the status code and body are kept on the exception."""
        error = ElectroluxApiClientError("boom", status=500, body={"message": "x"})
        assert error.status == 500
        assert error.body == {"message": "x"}
        assert str(error) == "boom"


class TestCreateHeaders:
    """Tests for create_headers function."""

    def test_create_headers_returns_base_headers(self) -> None:
        """Test that create_headers returns base headers without auth."""
        headers = api.create_headers()
        assert headers["content-type"] == "application/json"
        assert headers["user-agent"] == USER_AGENT
        assert "authorization" not in headers
        assert "x-api-key" not in headers

    def test_create_headers_includes_bearer_token_and_api_key(self) -> None:
        """Test that the token and API key are added when provided."""
        headers = api.create_headers(ACCESS_TOKEN, API_KEY)
        assert headers["authorization"] == f"Bearer {ACCESS_TOKEN}"
        assert headers["x-api-key"] == API_KEY


class TestStatusHelpers:
    """Tests for the HTTP status helpers."""

    def test_is_http_error(self) -> None:
        """Test that only 4xx and 5xx codes are errors."""
        assert api.is_http_error(200) is False
        assert api.is_http_error(299) is False
        assert api.is_http_error(400) is True
        assert api.is_http_error(503) is True

    def test_is_auth_error(self) -> None:
        """Test that 401 and 403 are authentication errors."""
        assert api.is_auth_error(401) is True
        assert api.is_auth_error(403) is True
        assert api.is_auth_error(404) is False

    def test_is_not_found_error(self) -> None:
        """Test that only 404 is a not found error."""
        assert api.is_not_found_error(404) is True
        assert api.is_not_found_error(400) is False


class TestValidateResponse:
    """Tests for validate_response function."""

    def test_returns_json_on_success(self) -> None:
        """Test that the parsed body is returned for successful responses."""
        response = httpx.Response(200, json={"ok": True})
        assert api.validate_response(response) == {"ok": True}

    def test_raises_auth_error_on_401(self) -> None:
        """Test that a 401 raises ElectroluxApiAuthError with the body message."""
        response = httpx.Response(401, json={"message": "Invalid grant"})
        with pytest.raises(ElectroluxApiAuthError, match="Invalid grant") as exc:
            api.validate_response(response)
        assert exc.value.status == 401
        assert exc.value.body == {"message": "Invalid grant"}

    def test_raises_not_found_error_on_404(self) -> None:
        """Test that a 404 raises ElectroluxApiNotFoundError."""
        response = httpx.Response(404, json={"detail": "Appliance not found"})
        with pytest.raises(ElectroluxApiNotFoundError, match="Appliance not found"):
            api.validate_response(response)

    def test_raises_client_error_with_default_message(self) -> None:
        """Test that a body without message falls back to the status code."""
        response = httpx.Response(500, json={"unexpected": 1})
        with pytest.raises(ElectroluxApiClientError, match="Request failed: 500"):
            api.validate_response(response)

    def test_raises_client_error_with_text_body(self) -> None:
        """Test that a plain text error body becomes the message."""
        response = httpx.Response(502, text="Bad gateway")
        with pytest.raises(ElectroluxApiClientError, match="Bad gateway") as exc:
            api.validate_response(response)
        assert exc.value.body == "Bad gateway"


class TestExtractErrorMessage:
    """Tests for extract_error_message function."""

    def test_prefers_structured_body_message(self) -> None:
        """Test that the body message wins over the exception text."""
        error = ElectroluxApiClientError(
            "Request failed: 429", status=429, body={"message": "Rate limit"}
        )
        assert api.extract_error_message(error) == "Rate limit"

    def test_falls_back_to_exception_text(self) -> None:
        """Test that the exception text is used without a body."""
        assert api.extract_error_message(httpx.ConnectError("refused")) == "refused"

    def test_uses_type_name_for_empty_exception(self) -> None:
        """Test that exceptions without text are named by their type."""
        assert api.extract_error_message(TimeoutError()) == "TimeoutError"


class TestExtractSession:
    """Tests for extract_session function."""

    def test_builds_session_with_expiry(
        self, sample_token_response: dict[str, Any]
    ) -> None:
        """Test that expiresIn is turned into an absolute expiry."""
        now = datetime(2026, 1, 1, tzinfo=UTC)
        session = api.extract_session(sample_token_response, BASE_URL, now)
        assert isinstance(session, Session)
        assert session.access_token == ACCESS_TOKEN
        assert session.refresh_token == REFRESH_TOKEN
        assert session.expires_at == now + timedelta(seconds=43200)
        assert session.regional_base_url == BASE_URL

    def test_uses_regional_base_url_from_response(
        self, sample_token_response: dict[str, Any]
    ) -> None:
        """Test that a regional base URL in the response is preferred."""
        sample_token_response["regionalBaseUrl"] = REGIONAL_URL
        session = api.extract_session(sample_token_response, BASE_URL)
        assert session.regional_base_url == REGIONAL_URL

    def test_raises_on_missing_fields(self) -> None:
        """Test that a malformed token response raises."""
        with pytest.raises(ElectroluxApiClientError, match="Malformed token response"):
            api.extract_session({"accessToken": "a"}, BASE_URL)

    def test_raises_on_empty_token(self, sample_token_response: dict[str, Any]) -> None:
        """Test that an empty refresh token is rejected."""
        sample_token_response["refreshToken"] = ""
        with pytest.raises(ElectroluxApiClientError, match="missing a token"):
            api.extract_session(sample_token_response, BASE_URL)


class TestExtractAppliances:
    """Tests for extract_appliances function."""

    def test_extracts_descriptors(
        self, sample_appliances_response: list[dict[str, Any]]
    ) -> None:
        """Test that every listing entry becomes a descriptor."""
        appliances = api.extract_appliances(sample_appliances_response)
        assert len(appliances) == EXPECTED_APPLIANCE_COUNT
        first = appliances[0]
        assert isinstance(first, ApplianceDescriptor)
        assert first.appliance_id == "900277479937001234"
        assert first.model_name == "PUREA9"
        assert first.display_name == "Living room"
        assert first.connection_state == "connected"
        assert first.properties == {"PM2_5": 4, "Fanspeed": 3}

    def test_skips_entries_without_id(self) -> None:
        """Test that entries without an appliance id are ignored."""
        assert api.extract_appliances([{"applianceData": {}}]) == []

    def test_rejects_non_list_listing(self) -> None:
        """Test that an error document in place of the listing raises."""
        body = {"error": "Service degraded"}
        with pytest.raises(
            ElectroluxApiClientError, match="Malformed appliance listing"
        ) as exc:
            api.extract_appliances(body)
        assert exc.value.body == body

    def test_skips_non_object_entries(self) -> None:
        """Test that listing entries that are not objects are ignored."""
        assert api.extract_appliances(["900277479937001234"]) == []

    def test_defaults_display_name_to_id(self) -> None:
        """Test that a missing appliance name falls back to the id."""
        appliance = api.extract_appliance(
            {"applianceId": "123", "applianceData": {"modelName": "WELLA5"}}
        )
        assert appliance.display_name == "123"
        assert appliance.properties == {}
        assert appliance.connection_state is None


class TestAsyncSignIn:
    """Tests for async_sign_in function."""

    @pytest.mark.asyncio
    async def test_sign_in_posts_client_credentials(
        self,
        httpx_mock: HTTPXMock,
        sample_token_response: dict[str, Any],
    ) -> None:
        """Test that sign-in sends the client credentials grant."""
        httpx_mock.add_response(
            method="POST",
            url=f"{AUTH_BASE_URL}/one-account-authorization/api/v1/token",
            json=sample_token_response,
        )
        async with httpx.AsyncClient() as client:
            session = await api.async_sign_in(client, "id", "secret", API_KEY)

        assert session.access_token == ACCESS_TOKEN
        assert session.regional_base_url == BASE_URL
        request = httpx_mock.get_request()
        assert json.loads(request.content) == {
            "grantType": "client_credentials",
            "clientId": "id",
            "clientSecret": "secret",
        }
        assert request.headers["x-api-key"] == API_KEY

    @pytest.mark.asyncio
    async def test_sign_in_raises_auth_error(self, httpx_mock: HTTPXMock) -> None:
        """Test that rejected credentials raise ElectroluxApiAuthError."""
        httpx_mock.add_response(
            method="POST",
            url=f"{AUTH_BASE_URL}/one-account-authorization/api/v1/token",
            status_code=401,
            json={"message": "Invalid client"},
        )
        async with httpx.AsyncClient() as client:
            with pytest.raises(ElectroluxApiAuthError, match="Invalid client"):
                await api.async_sign_in(client, "id", "bad")


class TestAsyncRefreshToken:
    """Tests for async_refresh_token function."""

    @pytest.mark.asyncio
    async def test_refresh_posts_refresh_token(
        self,
        httpx_mock: HTTPXMock,
        sample_token_response: dict[str, Any],
    ) -> None:
        """Test that the refresh token grant is sent to the regional URL."""
        sample_token_response["refreshToken"] = "rotated"
        httpx_mock.add_response(
            method="POST",
            url=f"{REGIONAL_URL}/api/v1/token/refresh",
            json=sample_token_response,
        )
        async with httpx.AsyncClient() as client:
            session = await api.async_refresh_token(client, "old", REGIONAL_URL)

        assert session.refresh_token == "rotated"
        assert session.regional_base_url == REGIONAL_URL
        request = httpx_mock.get_request()
        assert json.loads(request.content) == {
            "grantType": "refresh_token",
            "refreshToken": "old",
        }


class TestAsyncGetAppliances:
    """Tests for async_get_appliances function."""

    @pytest.mark.asyncio
    async def test_get_appliances_returns_descriptors(
        self,
        httpx_mock: HTTPXMock,
        sample_appliances_response: list[dict[str, Any]],
    ) -> None:
        """Test that the listing is fetched with the bearer token."""
        httpx_mock.add_response(
            method="GET",
            url=f"{BASE_URL}/api/v1/appliances",
            json=sample_appliances_response,
        )
        async with httpx.AsyncClient() as client:
            appliances = await api.async_get_appliances(
                client, ACCESS_TOKEN, BASE_URL, API_KEY
            )

        assert len(appliances) == EXPECTED_APPLIANCE_COUNT
        request = httpx_mock.get_request()
        assert request.headers["authorization"] == f"Bearer {ACCESS_TOKEN}"

    @pytest.mark.asyncio
    async def test_get_appliances_raises_client_error(
        self, httpx_mock: HTTPXMock
    ) -> None:
        """Test that server errors raise ElectroluxApiClientError."""
        httpx_mock.add_response(
            method="GET",
            url=f"{BASE_URL}/api/v1/appliances",
            status_code=500,
            json={"message": "Internal error"},
        )
        async with httpx.AsyncClient() as client:
            with pytest.raises(ElectroluxApiClientError, match="Internal error"):
                await api.async_get_appliances(client, ACCESS_TOKEN, BASE_URL)


class TestAsyncGetCapabilities:
    """Tests for async_get_capabilities function."""

    @pytest.mark.asyncio
    async def test_get_capabilities_returns_document(
        self,
        httpx_mock: HTTPXMock,
        sample_capabilities_response: dict[str, Any],
    ) -> None:
        """Test that the info document is returned as is."""
        httpx_mock.add_response(
            method="GET",
            url=f"{BASE_URL}/api/v1/appliances/123/info",
            json=sample_capabilities_response,
        )
        async with httpx.AsyncClient() as client:
            capabilities = await api.async_get_capabilities(
                client, "123", ACCESS_TOKEN, BASE_URL
            )

        assert capabilities == sample_capabilities_response

    @pytest.mark.asyncio
    async def test_get_capabilities_raises_not_found(
        self, httpx_mock: HTTPXMock
    ) -> None:
        """Test that a missing info document raises ElectroluxApiNotFoundError."""
        httpx_mock.add_response(
            method="GET",
            url=f"{BASE_URL}/api/v1/appliances/123/info",
            status_code=404,
        )
        async with httpx.AsyncClient() as client:
            with pytest.raises(ElectroluxApiNotFoundError):
                await api.async_get_capabilities(client, "123", ACCESS_TOKEN, BASE_URL)
