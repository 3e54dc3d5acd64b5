"""
Daylite Opportunities Tool - sales opportunities over the Daylite REST API.

Pipelines, stages, contacts and companies are linked by reference paths
such as /v1/pipeline_stages/3000.
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from ...credentials import missing_credentials_error
from ...rest_client import DayliteRestClient
from .._common import (
    append_common_fields,
    extract_id,
    format_listing,
    format_roles,
    list_params,
    tool_error,
    unwrap_items,
)


def format_opportunity(opportunity: dict[str, Any]) -> str:
    lines = []
    record_id = extract_id(opportunity.get("self"))
    if record_id:
        lines.append(f"ID: {record_id}")
    if opportunity.get("name"):
        lines.append(f"Name: {opportunity['name']}")
    if opportunity.get("state"):
        lines.append(f"Status: {opportunity['state']}")
    if opportunity.get("probability") is not None:
        lines.append(f"Probability: {opportunity['probability']}%")
    if opportunity.get("total") is not None:
        lines.append(f"Amount: {opportunity['total']}")
    if opportunity.get("priority"):
        lines.append(f"Priority: {opportunity['priority']}")
    if opportunity.get("category"):
        lines.append(f"Category: {opportunity['category']}")
    if opportunity.get("start"):
        lines.append(f"Start: {opportunity['start']}")
    if opportunity.get("forecasted"):
        lines.append(f"Forecast: {opportunity['forecasted']}")
    if opportunity.get("current_pipeline"):
        lines.append(f"Pipeline: {opportunity['current_pipeline']}")
    if opportunity.get("current_pipeline_stage"):
        lines.append(f"Stage: {opportunity['current_pipeline_stage']}")
    if opportunity.get("contacts"):
        lines.append(f"Contacts: {format_roles(opportunity['contacts'], 'contact')}")
    if opportunity.get("companies"):
        lines.append(f"Companies: {format_roles(opportunity['companies'], 'company')}")
    append_common_fields(lines, opportunity)
    return "\n".join(lines)


def register_tools(mcp: FastMCP, client: DayliteRestClient | None = None) -> None:
    """Register Daylite opportunity tools with the MCP server."""

    @mcp.tool()
    async def daylite_list_opportunities(
        limit: int | None = None, offset: int | None = None
    ) -> dict:
        """
        List sales opportunities from Daylite.

        Args:
            limit: Maximum number of opportunities to fetch (default: show first 50)
            offset: Offset for pagination

        Returns:
            Dict with the formatted opportunities or error
        """
        if client is None:
            return missing_credentials_error("daylite_list_opportunities")

        try:
            data = await client.get("/opportunities", list_params(limit, offset))
            opportunities = unwrap_items(data, "opportunities")
            if not opportunities:
                return {"result": "No opportunities found."}
            return {
                "result": format_listing(
                    opportunities, format_opportunity, "opportunity(ies)", limit
                )
            }
        except Exception as e:
            return tool_error("daylite_list_opportunities", e)

    @mcp.tool()
    async def daylite_get_opportunity(id: int) -> dict:
        """
        Get a single opportunity by ID.

        Args:
            id: The Daylite opportunity ID

        Returns:
            Dict with the formatted opportunity or error
        """
        if client is None:
            return missing_credentials_error("daylite_get_opportunity")

        try:
            data = await client.get(f"/opportunities/{id}")
            return {"result": format_opportunity(data or {})}
        except Exception as e:
            return tool_error("daylite_get_opportunity", e)

    @mcp.tool()
    async def daylite_create_opportunity(
        name: str,
        amount: float | None = None,
        pipeline_id: int | None = None,
        stage_id: int | None = None,
        contact_id: int | None = None,
        company_id: int | None = None,
        details: str | None = None,
    ) -> dict:
        """
        Create a new sales opportunity in Daylite.

        Args:
            name: Opportunity name
            amount: Value of the opportunity
            pipeline_id: Pipeline ID (see daylite_list_pipelines)
            stage_id: Pipeline stage ID
            contact_id: Contact to link
            company_id: Company to link
            details: Description

        Returns:
            Dict with the created opportunity or error
        """
        if client is None:
            return missing_credentials_error("daylite_create_opportunity")
        if not name:
            return {"error": "name is required"}

        body: dict[str, Any] = {"name": name}
        if amount is not None:
            body["total"] = amount
        if details:
            body["details"] = details
        if pipeline_id:
            body["current_pipeline"] = f"/v1/pipelines/{pipeline_id}"
        if stage_id:
            body["current_pipeline_stage"] = f"/v1/pipeline_stages/{stage_id}"
        if contact_id:
            body["contacts"] = [{"contact": f"/v1/contacts/{contact_id}"}]
        if company_id:
            body["companies"] = [{"company": f"/v1/companies/{company_id}"}]

        try:
            data = await client.post("/opportunities", body)
            return {"result": f"Opportunity created:\n{format_opportunity(data or {})}"}
        except Exception as e:
            return tool_error("daylite_create_opportunity", e)

    @mcp.tool()
    async def daylite_update_opportunity(
        id: int,
        name: str | None = None,
        amount: float | None = None,
        stage_id: int | None = None,
        details: str | None = None,
        status: str | None = None,
    ) -> dict:
        """
        Update an existing opportunity.

        Args:
            id: The Daylite opportunity ID
            name: New name
            amount: New value
            stage_id: New pipeline stage ID
            details: New description
            status: New state, e.g. "won", "lost" or "pending"

        Returns:
            Dict with the updated opportunity or error
        """
        if client is None:
            return missing_credentials_error("daylite_update_opportunity")

        body: dict[str, Any] = {}
        if name:
            body["name"] = name
        if amount is not None:
            body["total"] = amount
        if stage_id:
            body["current_pipeline_stage"] = f"/v1/pipeline_stages/{stage_id}"
        if details:
            body["details"] = details
        if status:
            body["state"] = status

        try:
            await client.patch(f"/opportunities/{id}", body)
            updated = await client.get(f"/opportunities/{id}")
            return {"result": f"Opportunity updated:\n{format_opportunity(updated or {})}"}
        except Exception as e:
            return tool_error("daylite_update_opportunity", e)

    @mcp.tool()
    async def daylite_delete_opportunity(id: int) -> dict:
        """
        Delete an opportunity from Daylite.

        Args:
            id: The Daylite opportunity ID

        Returns:
            Dict with confirmation or error
        """
        if client is None:
            return missing_credentials_error("daylite_delete_opportunity")

        try:
            await client.delete(f"/opportunities/{id}")
            return {"result": f"Opportunity {id} deleted."}
        except Exception as e:
            return tool_error("daylite_delete_opportunity", e)
