"""
Configuration flow for Electrolux Devices integration.

This module handles the setup and configuration of the Electrolux Devices
integration through Home Assistant's config flow system.
"""

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    BASE_URL,
    CONF_API_KEY,
    CONF_CLIENT_ID,
    CONF_CLIENT_SECRET,
    CONF_POLLING_INTERVAL,
    CONF_REFRESH_TOKEN,
    DEFAULT_POLLING_INTERVAL,
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_MISSING_CREDENTIALS,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
    NAME,
)
from .models import Session

_LOGGER = logging.getLogger(__name__)

DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_API_KEY): str,
        vol.Optional(CONF_CLIENT_ID, default=""): str,
        vol.Optional(CONF_CLIENT_SECRET, default=""): str,
        vol.Optional(CONF_REFRESH_TOKEN, default=""): str,
        vol.Optional(CONF_POLLING_INTERVAL, default=DEFAULT_POLLING_INTERVAL): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)


class ElectroluxDevicesConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for Electrolux Devices integration."""

    VERSION = 1

    async def _async_authenticate(self, user_input: dict[str, Any]) -> Session:
        """
        Validate the credentials by obtaining a session.

        A supplied refresh token is exchanged right away; the returned
        session carries its rotated replacement.
        """
        session = get_async_client(self.hass)
        api_key = user_input[CONF_API_KEY]
        if user_input.get(CONF_REFRESH_TOKEN):
            return await api.async_refresh_token(
                session, user_input[CONF_REFRESH_TOKEN], BASE_URL, api_key
            )
        return await api.async_sign_in(
            session,
            user_input[CONF_CLIENT_ID],
            user_input[CONF_CLIENT_SECRET],
            api_key,
        )

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing the API credentials.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            has_client_credentials = bool(
                user_input.get(CONF_CLIENT_ID) and user_input.get(CONF_CLIENT_SECRET)
            )
            if not user_input.get(CONF_REFRESH_TOKEN) and not has_client_credentials:
                errors["base"] = ERROR_MISSING_CREDENTIALS
            else:
                try:
                    session = await self._async_authenticate(user_input)
                    _LOGGER.info("Successfully authenticated with Electrolux API")

                except api.ElectroluxApiAuthError as err:
                    _LOGGER.warning(
                        "Authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                    )
                    errors["base"] = ERROR_INVALID_AUTH
                except httpx.ConnectError:
                    _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                    errors["base"] = ERROR_CANNOT_CONNECT
                except httpx.TimeoutException:
                    _LOGGER.exception("Timeout error (%s)", ERROR_TIMEOUT)
                    errors["base"] = ERROR_TIMEOUT
                except api.ElectroluxApiClientError:
                    _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                    errors["base"] = ERROR_API_ERROR
                except Exception:
                    _LOGGER.exception(
                        "Unexpected error during authentication (%s)",
                        ERROR_UNKNOWN,
                    )
                    errors["base"] = ERROR_UNKNOWN

                else:
                    await self.async_set_unique_id(user_input[CONF_API_KEY])
                    self._abort_if_unique_id_configured()

                    # A submitted refresh token was consumed, keep its replacement
                    refresh_token = (
                        session.refresh_token
                        if user_input.get(CONF_REFRESH_TOKEN)
                        else ""
                    )
                    return self.async_create_entry(
                        title=NAME,
                        data={**user_input, CONF_REFRESH_TOKEN: refresh_token},
                    )

        return self.async_show_form(
            step_id="user",
            data_schema=DATA_SCHEMA,
            errors=errors,
        )
