"""Shared fixtures for the Daylite tool tests."""

import pytest

from daylite_tools.config import CalDAVConfig, RestConfig

from .fakes import DAV_SERVER, REST_BASE, FakeDAVClient, FakeRestAPI


@pytest.fixture
def dav_client() -> FakeDAVClient:
    return FakeDAVClient()


@pytest.fixture
def caldav_config() -> CalDAVConfig:
    return CalDAVConfig(username="ann", password="secret", server_url=DAV_SERVER)


@pytest.fixture
def rest_api() -> FakeRestAPI:
    return FakeRestAPI()


@pytest.fixture
def rest_config(tmp_path) -> RestConfig:
    return RestConfig(
        refresh_token="config-refresh-token",
        base_url=REST_BASE,
        token_file=tmp_path / ".daylite-refresh-token",
    )
