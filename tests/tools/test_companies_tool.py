"""Tests for the Daylite companies tool."""

import json

import pytest

from daylite_tools.tools.companies_tool import register_tools

COMPANY = {
    "self": "/v1/companies/170006",
    "name": "ACME",
    "number_of_employees": 12,
    "urls": [{"url": "https://acme.example", "label": "work"}],
    "email_addresses": [],
    "contacts": [{"contact": "/v1/contacts/1000", "role": "Owner"}],
}


@pytest.fixture
def company_tools(mcp, rest_client, tool):
    register_tools(mcp, rest_client)
    return tool


class TestCompanies:
    """Tests for the company tools."""

    @pytest.mark.asyncio
    async def test_get(self, company_tools, rest_api):
        rest_api.add("GET", "/companies/170006", payload=COMPANY)

        result = await company_tools("daylite_get_company")(id=170006)

        text = result["result"]
        assert "ID: 170006" in text
        assert "Employees: 12" in text
        assert "URL: https://acme.example" in text
        assert "Contacts: /v1/contacts/1000 (Owner)" in text

    @pytest.mark.asyncio
    async def test_create_with_url(self, company_tools, rest_api):
        rest_api.add("POST", "/companies", 201, COMPANY)

        await company_tools("daylite_create_company")(name="ACME", url="https://acme.example")

        body = json.loads(rest_api.api_requests()[0].content)
        assert body == {"name": "ACME", "urls": [{"url": "https://acme.example", "label": "work"}]}

    @pytest.mark.asyncio
    async def test_update_patches_then_rereads(self, company_tools, rest_api):
        renamed = {**COMPANY, "name": "ACME Corp"}
        rest_api.add("GET", "/companies/170006", payload=COMPANY)
        rest_api.add("GET", "/companies/170006", payload=renamed)
        rest_api.add("PATCH", "/companies/170006", 204)

        result = await company_tools("daylite_update_company")(
            id=170006, name="ACME Corp", url="https://acme.example", email="hi@acme.example"
        )

        methods = [request.method for request in rest_api.api_requests()]
        assert methods == ["GET", "PATCH", "GET"]
        body = json.loads(rest_api.api_requests()[1].content)
        assert body["urls"] == COMPANY["urls"]
        assert body["email_addresses"] == [{"address": "hi@acme.example", "label": "work"}]
        assert "Name: ACME Corp" in result["result"]

    @pytest.mark.asyncio
    async def test_not_found(self, company_tools, rest_api):
        result = await company_tools("daylite_get_company")(id=1)
        assert "HTTP 404" in result["error"]
