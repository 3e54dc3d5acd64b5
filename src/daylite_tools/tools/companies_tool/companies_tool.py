"""
Daylite Companies Tool - organization records over the Daylite REST API.

Updates are sent as PATCH and the company is re-read afterwards, since the
PATCH response does not carry the full record.
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from ...credentials import missing_credentials_error
from ...rest_client import DayliteRestClient
from .._common import (
    append_common_fields,
    extract_id,
    format_address,
    format_labelled,
    format_listing,
    format_roles,
    format_urls,
    list_params,
    merge_entries,
    tool_error,
    unwrap_items,
)


def format_company(company: dict[str, Any]) -> str:
    lines = []
    record_id = extract_id(company.get("self"))
    if record_id:
        lines.append(f"ID: {record_id}")
    if company.get("name"):
        lines.append(f"Name: {company['name']}")
    if company.get("category"):
        lines.append(f"Category: {company['category']}")
    if company.get("number_of_employees"):
        lines.append(f"Employees: {company['number_of_employees']}")
    if company.get("email_addresses"):
        lines.append(f"Email: {format_labelled(company['email_addresses'], 'address')}")
    if company.get("phone_numbers"):
        lines.append(f"Phone: {format_labelled(company['phone_numbers'], 'number')}")
    if company.get("urls"):
        lines.append(f"URL: {format_urls(company['urls'])}")
    address = format_address(company.get("addresses") or [])
    if address:
        lines.append(f"Address: {address}")
    if company.get("contacts"):
        lines.append(f"Contacts: {format_roles(company['contacts'], 'contact')}")
    append_common_fields(lines, company)
    return "\n".join(lines)


def register_tools(mcp: FastMCP, client: DayliteRestClient | None = None) -> None:
    """Register Daylite company tools with the MCP server."""

    @mcp.tool()
    async def daylite_list_companies(limit: int | None = None, offset: int | None = None) -> dict:
        """
        List companies from Daylite.

        Args:
            limit: Maximum number of companies to fetch (default: show first 50)
            offset: Offset for pagination

        Returns:
            Dict with the formatted companies or error
        """
        if client is None:
            return missing_credentials_error("daylite_list_companies")

        try:
            data = await client.get("/companies", list_params(limit, offset))
            companies = unwrap_items(data, "companies")
            if not companies:
                return {"result": "No companies found."}
            return {"result": format_listing(companies, format_company, "company(ies)", limit)}
        except Exception as e:
            return tool_error("daylite_list_companies", e)

    @mcp.tool()
    async def daylite_get_company(id: int) -> dict:
        """
        Get a single company by ID.

        Args:
            id: The Daylite company ID

        Returns:
            Dict with the formatted company or error
        """
        if client is None:
            return missing_credentials_error("daylite_get_company")

        try:
            data = await client.get(f"/companies/{id}")
            return {"result": format_company(data or {})}
        except Exception as e:
            return tool_error("daylite_get_company", e)

    @mcp.tool()
    async def daylite_create_company(
        name: str,
        email: str | None = None,
        phone: str | None = None,
        url: str | None = None,
    ) -> dict:
        """
        Create a new company in Daylite.

        Args:
            name: Company name
            email: Work email address
            phone: Work phone number
            url: Website

        Returns:
            Dict with the created company or error
        """
        if client is None:
            return missing_credentials_error("daylite_create_company")
        if not name:
            return {"error": "name is required"}

        body: dict[str, Any] = {"name": name}
        if email:
            body["email_addresses"] = [{"address": email, "label": "work"}]
        if phone:
            body["phone_numbers"] = [{"number": phone, "label": "work"}]
        if url:
            body["urls"] = [{"url": url, "label": "work"}]

        try:
            data = await client.post("/companies", body)
            return {"result": f"Company created:\n{format_company(data or {})}"}
        except Exception as e:
            return tool_error("daylite_create_company", e)

    @mcp.tool()
    async def daylite_update_company(
        id: int,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        url: str | None = None,
    ) -> dict:
        """
        Update an existing company. New email addresses, phone numbers and
        websites are added next to the existing ones.

        Args:
            id: The Daylite company ID
            name: New company name
            email: Email address to add
            phone: Phone number to add
            url: Website to add

        Returns:
            Dict with the updated company or error
        """
        if client is None:
            return missing_credentials_error("daylite_update_company")

        try:
            existing = await client.get(f"/companies/{id}") or {}
            body: dict[str, Any] = {}
            if name:
                body["name"] = name
            if email:
                body["email_addresses"] = merge_entries(
                    existing.get("email_addresses"), email, "address"
                )
            if phone:
                body["phone_numbers"] = merge_entries(existing.get("phone_numbers"), phone, "number")
            if url:
                body["urls"] = merge_entries(
                    existing.get("urls"), url, "url", match_keys=("url", "address")
                )

            await client.patch(f"/companies/{id}", body)
            updated = await client.get(f"/companies/{id}")
            return {"result": f"Company updated:\n{format_company(updated or {})}"}
        except Exception as e:
            return tool_error("daylite_update_company", e)

    @mcp.tool()
    async def daylite_delete_company(id: int) -> dict:
        """
        Delete a company from Daylite.

        Args:
            id: The Daylite company ID

        Returns:
            Dict with confirmation or error
        """
        if client is None:
            return missing_credentials_error("daylite_delete_company")

        try:
            await client.delete(f"/companies/{id}")
            return {"result": f"Company {id} deleted."}
        except Exception as e:
            return tool_error("daylite_delete_company", e)
