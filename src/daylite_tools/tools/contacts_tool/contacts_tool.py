"""
Daylite Contacts Tool - people records over the Daylite REST API.

Supports:
- Listing and reading contacts
- Creating, updating and deleting contacts

Updates merge new email addresses and phone numbers into the existing
lists instead of replacing them.
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


def format_contact(contact: dict[str, Any]) -> str:
    lines = []
    record_id = extract_id(contact.get("self"))
    if record_id:
        lines.append(f"ID: {record_id}")
    name = contact.get("full_name") or " ".join(
        part for part in (contact.get("first_name"), contact.get("last_name")) if part
    )
    if name:
        lines.append(f"Name: {name}")
    if contact.get("individual_salutation"):
        lines.append(f"Title: {contact['individual_salutation']}")
    if contact.get("category"):
        lines.append(f"Category: {contact['category']}")
    if contact.get("birthday"):
        lines.append(f"Birthday: {contact['birthday']}")
    if contact.get("email_addresses"):
        lines.append(f"Email: {format_labelled(contact['email_addresses'], 'address')}")
    if contact.get("phone_numbers"):
        lines.append(f"Phone: {format_labelled(contact['phone_numbers'], 'number')}")
    if contact.get("urls"):
        lines.append(f"URL: {format_urls(contact['urls'])}")
    address = format_address(contact.get("addresses") or [])
    if address:
        lines.append(f"Address: {address}")
    if contact.get("companies"):
        lines.append(f"Companies: {format_roles(contact['companies'], 'company')}")
    append_common_fields(lines, contact)
    return "\n".join(lines)


def register_tools(mcp: FastMCP, client: DayliteRestClient | None = None) -> None:
    """Register Daylite contact tools with the MCP server."""

    @mcp.tool()
    async def daylite_list_contacts(limit: int | None = None, offset: int | None = None) -> dict:
        """
        List contacts from Daylite.

        Args:
            limit: Maximum number of contacts to fetch (default: show first 50)
            offset: Offset for pagination

        Returns:
            Dict with the formatted contacts or error
        """
        if client is None:
            return missing_credentials_error("daylite_list_contacts")

        try:
            data = await client.get("/contacts", list_params(limit, offset))
            contacts = unwrap_items(data, "contacts")
            if not contacts:
                return {"result": "No contacts found."}
            return {"result": format_listing(contacts, format_contact, "contact(s)", limit)}
        except Exception as e:
            return tool_error("daylite_list_contacts", e)

    @mcp.tool()
    async def daylite_get_contact(id: int) -> dict:
        """
        Get a single contact by ID.

        Args:
            id: The Daylite contact ID

        Returns:
            Dict with the formatted contact or error
        """
        if client is None:
            return missing_credentials_error("daylite_get_contact")

        try:
            data = await client.get(f"/contacts/{id}")
            return {"result": format_contact(data or {})}
        except Exception as e:
            return tool_error("daylite_get_contact", e)

    @mcp.tool()
    async def daylite_create_contact(
        last_name: str,
        first_name: str | None = None,
        title: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> dict:
        """
        Create a new contact in Daylite.

        Args:
            last_name: Last name
            first_name: First name
            title: Salutation or job title
            email: Work email address
            phone: Work phone number

        Returns:
            Dict with the created contact or error
        """
        if client is None:
            return missing_credentials_error("daylite_create_contact")
        if not last_name:
            return {"error": "last_name is required"}

        body: dict[str, Any] = {"last_name": last_name}
        if first_name:
            body["first_name"] = first_name
        if title:
            body["individual_salutation"] = title
        if email:
            body["email_addresses"] = [{"address": email, "label": "work"}]
        if phone:
            body["phone_numbers"] = [{"number": phone, "label": "work"}]

        try:
            data = await client.post("/contacts", body)
            return {"result": f"Contact created:\n{format_contact(data or {})}"}
        except Exception as e:
            return tool_error("daylite_create_contact", e)

    @mcp.tool()
    async def daylite_update_contact(
        id: int,
        first_name: str | None = None,
        last_name: str | None = None,
        title: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> dict:
        """
        Update an existing contact. New email addresses and phone numbers are
        added next to the existing ones.

        Args:
            id: The Daylite contact ID
            first_name: New first name
            last_name: New last name
            title: New salutation or job title
            email: Email address to add
            phone: Phone number to add

        Returns:
            Dict with the updated contact or error
        """
        if client is None:
            return missing_credentials_error("daylite_update_contact")

        try:
            existing = await client.get(f"/contacts/{id}") or {}
            body: dict[str, Any] = {}
            if first_name:
                body["first_name"] = first_name
            if last_name:
                body["last_name"] = last_name
            if title:
                body["individual_salutation"] = title
            if email:
                body["email_addresses"] = merge_entries(
                    existing.get("email_addresses"), email, "address"
                )
            if phone:
                body["phone_numbers"] = merge_entries(existing.get("phone_numbers"), phone, "number")

            data = await client.put(f"/contacts/{id}", body)
            return {"result": f"Contact updated:\n{format_contact(data or existing)}"}
        except Exception as e:
            return tool_error("daylite_update_contact", e)

    @mcp.tool()
    async def daylite_delete_contact(id: int) -> dict:
        """
        Delete a contact from Daylite.

        Args:
            id: The Daylite contact ID

        Returns:
            Dict with confirmation or error
        """
        if client is None:
            return missing_credentials_error("daylite_delete_contact")

        try:
            await client.delete(f"/contacts/{id}")
            return {"result": f"Contact {id} deleted."}
        except Exception as e:
            return tool_error("daylite_delete_contact", e)
