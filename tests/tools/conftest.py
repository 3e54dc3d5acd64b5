"""Fixtures wiring the tool modules to the in-memory Daylite fakes."""

import httpx
import pytest
from fastmcp import FastMCP

from daylite_tools.caldav_session import DayliteCalDAVSession
from daylite_tools.rest_client import DayliteRestClient


@pytest.fixture
def mcp():
    """Create a FastMCP instance for testing."""
    return FastMCP("test-daylite")


@pytest.fixture
def session(dav_client, caldav_config):
    return DayliteCalDAVSession(caldav_config, client=dav_client)


@pytest.fixture
def rest_client(rest_config, rest_api):
    return DayliteRestClient(rest_config, transport=httpx.MockTransport(rest_api.handler))


@pytest.fixture
def tool(mcp):
    """Look up a registered tool function by name."""

    def _tool(name: str):
        return mcp._tool_manager._tools[name].fn

    return _tool
