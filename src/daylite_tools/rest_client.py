"""
Authenticated request layer for the Daylite REST API.

API Reference: https://developer.daylite.app/reference/personal-token
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import RestConfig
from .errors import DayliteAPIError
from .token_manager import RefreshTokenManager, TokenStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class DayliteRestClient:
    """Bearer-authenticated JSON client with one refresh-and-retry on 401."""

    def __init__(
        self,
        config: RestConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        token_manager: RefreshTokenManager | None = None,
    ):
        self._base_url = config.base_url.rstrip("/")
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)
        self.tokens = token_manager or RefreshTokenManager(
            config.refresh_token,
            TokenStore(config.token_file),
            self._http,
            base_url=self._base_url,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        json: Any,
    ) -> httpx.Response:
        token = await self.tokens.get_access_token()
        return await self._http.request(
            method,
            f"{self._base_url}{path}",
            params=params,
            json=json if method in _BODY_METHODS else None,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """
        Send one API request and return the parsed JSON body.

        Args:
            method: HTTP method
            path: path below the API base, e.g. "/contacts"
            params: query parameters
            json: request body, sent only for POST/PUT/PATCH

        Returns:
            Parsed JSON, or None for 204 and empty bodies

        Raises:
            DayliteAPIError: non-2xx status (after one retry on 401)
            CredentialError: the access token could not be refreshed
        """
        method = method.upper()
        response = await self._send(method, path, params, json)

        if response.status_code == 401:
            logger.info(f"Daylite API returned 401 for {method} {path}, refreshing token")
            self.tokens.invalidate()
            await self.tokens.refresh()
            response = await self._send(method, path, params, json)

        logger.debug(f"Daylite API {method} {path} -> {response.status_code}")

        if not response.is_success:
            raise DayliteAPIError(response.status_code, response.text)
        if response.status_code == 204 or not response.content.strip():
            return None
        return response.json()

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
