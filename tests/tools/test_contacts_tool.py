"""Tests for the Daylite contacts tool."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from daylite_tools.tools.contacts_tool import register_tools
from daylite_tools.tools.contacts_tool.contacts_tool import format_contact

CONTACT = {
    "self": "/v1/contacts/1000",
    "first_name": "Ann",
    "last_name": "Lee",
    "category": "Customer",
    "email_addresses": [{"address": "ann@example.com", "label": "work"}],
    "phone_numbers": [{"number": "+1 555 0100", "label": "mobile"}],
    "addresses": [{"street": "1 Main St", "postal_code": "12345", "city": "Springfield"}],
    "companies": [{"company": "/v1/companies/7", "role": "CEO"}],
    "keywords": ["vip"],
    "flagged": True,
}


@pytest.fixture
def contact_tools(mcp, rest_client, tool):
    register_tools(mcp, rest_client)
    return tool


class TestFormatting:
    """Tests for format_contact."""

    def test_full_record(self):
        text = format_contact(CONTACT)

        assert text.splitlines()[0] == "ID: 1000"
        assert "Name: Ann Lee" in text
        assert "Email: ann@example.com (work)" in text
        assert "Phone: +1 555 0100 (mobile)" in text
        assert "Address: 1 Main St, 12345, Springfield" in text
        assert "Companies: /v1/companies/7 (CEO)" in text
        assert "Keywords: vip" in text
        assert "Flagged: yes" in text

    def test_full_name_wins(self):
        assert "Name: Dr. Ann Lee" in format_contact({"full_name": "Dr. Ann Lee", "first_name": "x"})


class TestCredentialHandling:
    """Tests for tools registered without a REST client."""

    @pytest.mark.asyncio
    async def test_no_client_returns_error(self, mcp, tool):
        register_tools(mcp, None)

        result = await tool("daylite_get_contact")(id=1)

        assert "not configured" in result["error"]
        assert "DAYLITE_REFRESH_TOKEN" in result["help"]


class TestListContacts:
    """Tests for daylite_list_contacts."""

    @pytest.mark.asyncio
    async def test_bare_list(self, contact_tools, rest_api):
        rest_api.add("GET", "/contacts", payload=[CONTACT])

        result = await contact_tools("daylite_list_contacts")()

        assert result["result"].startswith("1 contact(s):\n\nID: 1000")

    @pytest.mark.asyncio
    async def test_wrapped_list(self, contact_tools, rest_api):
        rest_api.add("GET", "/contacts", payload={"data": [CONTACT, CONTACT]})

        result = await contact_tools("daylite_list_contacts")()

        assert result["result"].startswith("2 contact(s):")
        assert "\n---\n" in result["result"]

    @pytest.mark.asyncio
    async def test_default_display_cap(self, contact_tools, rest_api):
        rest_api.add("GET", "/contacts", payload=[{"self": f"/v1/contacts/{i}"} for i in range(60)])

        result = await contact_tools("daylite_list_contacts")()

        assert result["result"].startswith("60 contact(s) (showing first 50):")
        assert "ID: 49" in result["result"]
        assert "ID: 50" not in result["result"]

    @pytest.mark.asyncio
    async def test_limit_and_offset_are_sent(self, contact_tools, rest_api):
        rest_api.add("GET", "/contacts", payload=[])

        result = await contact_tools("daylite_list_contacts")(limit=5, offset=10)

        assert result == {"result": "No contacts found."}
        params = rest_api.api_requests()[0].url.params
        assert params["limit"] == "5"
        assert params["offset"] == "10"

    @pytest.mark.asyncio
    async def test_api_error(self, contact_tools, rest_api):
        rest_api.add("GET", "/contacts", 500, {"message": "boom"})

        result = await contact_tools("daylite_list_contacts")()

        assert result["error"].startswith("Daylite API error (HTTP 500)")


class TestWriteContacts:
    """Tests for create, update and delete."""

    @pytest.mark.asyncio
    async def test_create(self, contact_tools, rest_api):
        rest_api.add("POST", "/contacts", 201, CONTACT)

        result = await contact_tools("daylite_create_contact")(
            last_name="Lee", first_name="Ann", email="ann@example.com"
        )

        assert result["result"].startswith("Contact created:\nID: 1000")
        body = json.loads(rest_api.api_requests()[0].content)
        assert body == {
            "last_name": "Lee",
            "first_name": "Ann",
            "email_addresses": [{"address": "ann@example.com", "label": "work"}],
        }

    @pytest.mark.asyncio
    async def test_update_merges_email_and_phone(self, contact_tools, rest_api):
        rest_api.add("GET", "/contacts/1000", payload=CONTACT)
        rest_api.add("PUT", "/contacts/1000", payload=CONTACT)

        await contact_tools("daylite_update_contact")(
            id=1000, email="ann@home.example", phone="+1 555 0100"
        )

        put = rest_api.api_requests()[1]
        assert put.method == "PUT"
        body = json.loads(put.content)
        assert body["email_addresses"] == [
            {"address": "ann@example.com", "label": "work"},
            {"address": "ann@home.example", "label": "work"},
        ]
        assert body["phone_numbers"] == CONTACT["phone_numbers"]

    @pytest.mark.asyncio
    async def test_delete(self, contact_tools, rest_api):
        rest_api.add("DELETE", "/contacts/1000", 204)

        result = await contact_tools("daylite_delete_contact")(id=1000)

        assert result == {"result": "Contact 1000 deleted."}


class TestTransportErrors:
    """Tests for exceptions raised below the REST client."""

    @pytest.mark.asyncio
    async def test_timeout(self, mcp, tool):
        client = MagicMock()
        client.get = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        register_tools(mcp, client)

        result = await tool("daylite_list_contacts")()

        assert result == {"error": "Request timed out"}

    @pytest.mark.asyncio
    async def test_network_error(self, mcp, tool):
        client = MagicMock()
        client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))
        register_tools(mcp, client)

        result = await tool("daylite_get_contact")(id=1)

        assert result == {"error": "Network error: refused"}

    @pytest.mark.asyncio
    async def test_unexpected_error(self, mcp, tool):
        client = MagicMock()
        client.get = AsyncMock(side_effect=RuntimeError("kaput"))
        register_tools(mcp, client)

        result = await tool("daylite_get_contact")(id=1)

        assert result == {"error": "Unexpected error: kaput"}
