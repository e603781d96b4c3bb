"""Session and token lifecycle for Electrolux Devices integration."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from . import api
from .const import BASE_URL

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from .models import Session

_LOGGER = logging.getLogger(__name__)


class ElectroluxTokenStore:
    """Owns the current cloud session.

    The session is only ever replaced through ``async_sign_in`` and
    ``async_refresh``. Both build the new session completely before
    swapping it in, so a failed call leaves the previous session untouched.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        api_key: str | None = None,
        refresh_token: str | None = None,
        regional_base_url: str = BASE_URL,
        on_token_update: Callable[[Session], None] | None = None,
    ) -> None:
        """Initialize the token store.

        Args:
            session: HTTP client session for API calls.
            client_id: Developer portal client id used for sign-in.
            client_secret: Developer portal client secret used for sign-in.
            api_key: Optional developer API key sent with every request.
            refresh_token: Pre-supplied refresh token, skips sign-in.
            regional_base_url: Base URL used until a session supplies one.
            on_token_update: Called with every newly committed session.

        """
        self._http = session
        self._client_id = client_id
        self._client_secret = client_secret
        self.api_key = api_key
        self._initial_refresh_token = refresh_token or None
        self._initial_base_url = regional_base_url
        self._on_token_update = on_token_update
        self._session: Session | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def session(self) -> Session | None:
        """Return the current session, if any."""
        return self._session

    @property
    def access_token(self) -> str | None:
        """Return the current access token, if any."""
        return self._session.access_token if self._session else None

    @property
    def refresh_token(self) -> str | None:
        """Return the refresh token the next refresh will submit."""
        if self._session is not None:
            return self._session.refresh_token
        return self._initial_refresh_token

    @property
    def regional_base_url(self) -> str:
        """Return the base URL of the account's region."""
        if self._session is not None:
            return self._session.regional_base_url
        return self._initial_base_url

    @property
    def has_client_credentials(self) -> bool:
        """Return True when a client id and secret are configured."""
        return bool(self._client_id and self._client_secret)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True when there is no session or it has expired."""
        if self._session is None:
            return True
        if now is None:
            now = datetime.now(UTC)
        return now >= self._session.expires_at

    async def async_sign_in(self) -> Session:
        """Obtain a fresh session with the configured client credentials.

        Raises:
            ElectroluxApiAuthError: If the credentials are missing or rejected.
            ElectroluxApiClientError: If the token request fails.

        """
        if not self.has_client_credentials:
            error_msg = "Client id and client secret are required to sign in"
            raise api.ElectroluxApiAuthError(error_msg)

        _LOGGER.info("Signing in to Electrolux cloud")
        async with self._refresh_lock:
            new_session = await api.async_sign_in(
                self._http,
                self._client_id,
                self._client_secret,
                self.api_key,
            )
            self._commit(new_session)
        _LOGGER.info("Signed in to Electrolux cloud")
        return new_session

    async def async_refresh(self) -> Session | None:
        """Exchange the refresh token for a new session.

        Returns None without doing anything when no refresh token is known.
        Concurrent callers are serialized; a caller whose refresh token was
        already rotated by another caller returns the new session instead of
        submitting the consumed token again.

        Raises:
            ElectroluxApiAuthError: If the refresh token is rejected.
            ElectroluxApiClientError: If the token request fails.

        """
        submitted = self.refresh_token
        if not submitted:
            _LOGGER.debug("No refresh token available, skipping refresh")
            return None

        async with self._refresh_lock:
            if self.refresh_token != submitted:
                _LOGGER.debug("Access token already refreshed by another caller")
                return self._session

            _LOGGER.info("Refreshing access token")
            new_session = await api.async_refresh_token(
                self._http,
                submitted,
                self.regional_base_url,
                self.api_key,
            )
            self._commit(new_session)

        _LOGGER.info(
            "Access token refreshed, expires at %s",
            new_session.expires_at.isoformat(),
        )
        return new_session

    def _commit(self, new_session: Session) -> None:
        self._session = new_session
        if self._on_token_update is not None:
            self._on_token_update(new_session)
