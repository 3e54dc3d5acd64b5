"""
Refresh-token manager for the Daylite REST API.

Daylite personal tokens come as a long-lived refresh token that is exchanged
for a short-lived access token. The exchange may rotate the refresh token,
so the latest one is kept in ~/.daylite-refresh-token (mode 0600) and seeds
the next process.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from .config import REST_API_BASE
from .errors import CredentialError, DayliteAPIError
from .models import RefreshTokenState

logger = logging.getLogger(__name__)

REFRESH_MARGIN_SECONDS = 300
ASSUMED_TOKEN_LIFETIME_SECONDS = 3600
MIN_PERSISTED_TOKEN_LENGTH = 10


class TokenStore:
    """
    Best-effort file persistence for the rotated refresh token.

    Every method logs failures and returns normally; a broken home directory
    should not take the REST tools down.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _log_failure(self, action: str, error: OSError) -> None:
        logger.warning(
            f"Could not {action} refresh token file: {error}",
            extra={"component": "token_store", "action": action, "path": str(self.path)},
        )

    def load(self) -> str | None:
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            self._log_failure("read", e)
            return None
        return value or None

    def save(self, token: str) -> None:
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(token)
            os.chmod(self.path, 0o600)
        except OSError as e:
            self._log_failure("write", e)
            return
        logger.info(
            "Persisted rotated refresh token",
            extra={"component": "token_store", "action": "write", "path": str(self.path)},
        )

    def delete(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            self._log_failure("delete", e)


def initial_state(config_token: str, store: TokenStore) -> RefreshTokenState:
    """Prefer a persisted token that differs from the configured one."""
    persisted = store.load()
    if persisted and len(persisted) > MIN_PERSISTED_TOKEN_LENGTH and persisted != config_token:
        logger.info("Using persisted refresh token")
        return RefreshTokenState(config_token=config_token, active_token=persisted)
    return RefreshTokenState(config_token=config_token, active_token=config_token)


class RefreshTokenManager:
    """Hands out bearer tokens, exchanging the refresh token when needed."""

    def __init__(
        self,
        config_token: str,
        store: TokenStore,
        http: httpx.AsyncClient,
        *,
        base_url: str = REST_API_BASE,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._clock = clock
        self.state = initial_state(config_token, store)

    async def get_access_token(self) -> str:
        """Return a cached access token, refreshing within 5 minutes of expiry."""
        state = self.state
        if state.access_token and self._clock() < state.expires_at - REFRESH_MARGIN_SECONDS:
            return state.access_token
        return await self.refresh()

    def invalidate(self) -> None:
        self.state.access_token = None
        self.state.expires_at = 0.0

    async def _exchange(self, refresh_token: str) -> dict:
        response = await self._http.get(
            f"{self._base_url}/personal_token/refresh_token",
            params={"refresh_token": refresh_token},
        )
        if not response.is_success:
            raise DayliteAPIError(response.status_code, response.text)
        try:
            data = response.json()
        except ValueError as e:
            raise DayliteAPIError(
                response.status_code, f"Token response is not JSON: {response.text[:200]}"
            ) from e
        if not isinstance(data, dict) or not data.get("access_token"):
            raise DayliteAPIError(response.status_code, "Token response carried no access_token")
        return data

    async def refresh(self) -> str:
        """
        Exchange the active refresh token for a new access token.

        When a rotated token fails, the persisted file is discarded and the
        configured token is tried once.

        Raises:
            CredentialError: every available refresh token was rejected
        """
        state = self.state
        try:
            data = await self._exchange(state.active_token)
        except (DayliteAPIError, httpx.HTTPError) as e:
            if state.active_token == state.config_token:
                logger.error(f"Token refresh failed: {e}")
                raise CredentialError() from e

            logger.warning(f"Rotated refresh token rejected, retrying with configured token: {e}")
            self._store.delete()
            state.active_token = state.config_token
            try:
                data = await self._exchange(state.config_token)
            except (DayliteAPIError, httpx.HTTPError) as fallback_error:
                logger.error(f"Token refresh with configured token failed: {fallback_error}")
                raise CredentialError() from fallback_error

        state.access_token = data["access_token"]
        state.expires_at = self._clock() + ASSUMED_TOKEN_LIFETIME_SECONDS

        rotated = data.get("refresh_token")
        if rotated and rotated != state.active_token:
            state.active_token = rotated
            self._store.save(rotated)

        logger.debug("Access token refreshed")
        return state.access_token
