"""Tests for the REST refresh-token manager and its file store."""

import logging
import os
import stat

import httpx
import pytest

from daylite_tools.errors import PERSONAL_TOKEN_HELP_URL, CredentialError
from daylite_tools.token_manager import (
    ASSUMED_TOKEN_LIFETIME_SECONDS,
    REFRESH_MARGIN_SECONDS,
    RefreshTokenManager,
    TokenStore,
)

from .fakes import REST_BASE

CONFIG_TOKEN = "config-refresh-token"
PERSISTED_TOKEN = "persisted-refresh-token"


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def store(tmp_path):
    return TokenStore(tmp_path / ".daylite-refresh-token")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_manager(rest_api, store, clock):
    def _make(config_token: str = CONFIG_TOKEN) -> RefreshTokenManager:
        http = httpx.AsyncClient(transport=httpx.MockTransport(rest_api.handler))
        return RefreshTokenManager(config_token, store, http, base_url=REST_BASE, clock=clock)

    return _make


class TestTokenStore:
    """Tests for best-effort token persistence."""

    def test_load_missing_file(self, store):
        assert store.load() is None

    def test_save_and_load(self, store):
        store.save("abc-token-value")

        assert store.load() == "abc-token-value"
        assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o600

    def test_delete(self, store):
        store.save("abc-token-value")
        store.delete()
        store.delete()

        assert not store.path.exists()

    def test_write_failure_is_logged_not_raised(self, tmp_path, caplog):
        store = TokenStore(tmp_path / "missing-dir" / "token")

        with caplog.at_level(logging.WARNING, logger="daylite_tools.token_manager"):
            store.save("abc-token-value")

        assert "Could not write refresh token file" in caplog.text
        assert caplog.records[0].action == "write"

    def test_read_failure_is_logged_not_raised(self, tmp_path, caplog):
        store = TokenStore(tmp_path)

        with caplog.at_level(logging.WARNING, logger="daylite_tools.token_manager"):
            assert store.load() is None

        assert "Could not read refresh token file" in caplog.text


class TestSeeding:
    """Tests for choosing the initial refresh token."""

    def test_uses_config_token_without_file(self, make_manager):
        manager = make_manager()
        assert manager.state.active_token == CONFIG_TOKEN

    def test_prefers_persisted_token(self, make_manager, store):
        store.save(PERSISTED_TOKEN)

        manager = make_manager()

        assert manager.state.active_token == PERSISTED_TOKEN
        assert manager.state.config_token == CONFIG_TOKEN

    def test_ignores_short_persisted_token(self, make_manager, store):
        store.save("short")
        assert make_manager().state.active_token == CONFIG_TOKEN

    def test_ignores_persisted_copy_of_config_token(self, make_manager, store):
        store.save(CONFIG_TOKEN)
        assert make_manager().state.active_token == CONFIG_TOKEN


class TestAccessToken:
    """Tests for access-token caching and expiry."""

    @pytest.mark.asyncio
    async def test_first_call_exchanges_token(self, make_manager, rest_api, clock):
        manager = make_manager()

        assert await manager.get_access_token() == "access-1"
        assert rest_api.refresh_tokens_seen == [CONFIG_TOKEN]
        assert manager.state.expires_at == clock.now + ASSUMED_TOKEN_LIFETIME_SECONDS

    @pytest.mark.asyncio
    async def test_cached_until_refresh_margin(self, make_manager, rest_api, clock):
        manager = make_manager()
        await manager.get_access_token()

        clock.now += ASSUMED_TOKEN_LIFETIME_SECONDS - REFRESH_MARGIN_SECONDS - 1
        await manager.get_access_token()
        assert len(rest_api.refresh_tokens_seen) == 1

        clock.now += 1
        await manager.get_access_token()
        assert len(rest_api.refresh_tokens_seen) == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_refresh(self, make_manager, rest_api):
        manager = make_manager()
        await manager.get_access_token()

        manager.invalidate()
        await manager.get_access_token()

        assert len(rest_api.refresh_tokens_seen) == 2


class TestRotation:
    """Tests for refresh-token rotation and persistence."""

    @pytest.mark.asyncio
    async def test_rotated_token_is_adopted_and_persisted(self, make_manager, rest_api, store):
        rest_api.token_responses.append(
            httpx.Response(200, json={"access_token": "access-2", "refresh_token": "rotated-token-1"})
        )
        manager = make_manager()

        await manager.refresh()

        assert manager.state.active_token == "rotated-token-1"
        assert store.load() == "rotated-token-1"

        await manager.refresh()
        assert rest_api.refresh_tokens_seen == [CONFIG_TOKEN, "rotated-token-1"]

    @pytest.mark.asyncio
    async def test_unchanged_token_is_not_persisted(self, make_manager, rest_api, store):
        rest_api.token_responses.append(
            httpx.Response(200, json={"access_token": "access-2", "refresh_token": CONFIG_TOKEN})
        )
        manager = make_manager()

        await manager.refresh()

        assert not store.path.exists()


class TestFallback:
    """Tests for falling back to the configured token."""

    @pytest.mark.asyncio
    async def test_falls_back_to_config_token(self, make_manager, rest_api, store):
        store.save(PERSISTED_TOKEN)
        rest_api.token_responses.append(httpx.Response(401, text="expired"))
        manager = make_manager()

        assert await manager.refresh() == "access-1"

        assert rest_api.refresh_tokens_seen == [PERSISTED_TOKEN, CONFIG_TOKEN]
        assert manager.state.active_token == CONFIG_TOKEN
        assert not store.path.exists()

    @pytest.mark.asyncio
    async def test_non_json_answer_falls_back(self, make_manager, rest_api, store):
        """A 200 maintenance page for the persisted token still reaches the config token."""
        store.save(PERSISTED_TOKEN)
        rest_api.token_responses.append(httpx.Response(200, text="<html>maintenance</html>"))
        manager = make_manager()

        assert await manager.refresh() == "access-1"

        assert rest_api.refresh_tokens_seen == [PERSISTED_TOKEN, CONFIG_TOKEN]
        assert not store.path.exists()

    @pytest.mark.asyncio
    async def test_non_json_answer_for_config_token(self, make_manager, rest_api):
        rest_api.token_responses.append(httpx.Response(200, text="<html>maintenance</html>"))
        manager = make_manager()

        with pytest.raises(CredentialError):
            await manager.refresh()

    @pytest.mark.asyncio
    async def test_both_tokens_rejected(self, make_manager, rest_api, store):
        store.save(PERSISTED_TOKEN)
        rest_api.token_responses.extend(
            [httpx.Response(401, text="expired"), httpx.Response(401, text="revoked")]
        )
        manager = make_manager()

        with pytest.raises(CredentialError) as exc_info:
            await manager.refresh()

        assert PERSONAL_TOKEN_HELP_URL in str(exc_info.value)
        assert manager.state.access_token is None

    @pytest.mark.asyncio
    async def test_config_token_rejected_is_not_retried(self, make_manager, rest_api):
        rest_api.token_responses.append(httpx.Response(400, text="bad token"))
        manager = make_manager()

        with pytest.raises(CredentialError):
            await manager.refresh()

        assert rest_api.refresh_tokens_seen == [CONFIG_TOKEN]

    @pytest.mark.asyncio
    async def test_response_without_access_token(self, make_manager, rest_api):
        rest_api.token_responses.append(httpx.Response(200, json={"refresh_token": "x" * 20}))
        manager = make_manager()

        with pytest.raises(CredentialError):
            await manager.refresh()
