"""
Daylite Projects Tool - projects over the Daylite REST API.
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


def format_project(project: dict[str, Any]) -> str:
    lines = []
    record_id = extract_id(project.get("self"))
    if record_id:
        lines.append(f"ID: {record_id}")
    if project.get("name"):
        lines.append(f"Name: {project['name']}")
    if project.get("status"):
        lines.append(f"Status: {project['status']}")
    if project.get("priority"):
        lines.append(f"Priority: {project['priority']}")
    if project.get("category"):
        lines.append(f"Category: {project['category']}")
    if project.get("started"):
        lines.append(f"Start: {project['started']}")
    if project.get("due"):
        lines.append(f"Due: {project['due']}")
    if project.get("completed"):
        lines.append(f"Completed: {project['completed']}")
    if project.get("current_pipeline"):
        lines.append(f"Pipeline: {project['current_pipeline']}")
    if project.get("current_pipeline_stage"):
        lines.append(f"Stage: {project['current_pipeline_stage']}")
    if project.get("contacts"):
        lines.append(f"Contacts: {format_roles(project['contacts'], 'contact')}")
    if project.get("companies"):
        lines.append(f"Companies: {format_roles(project['companies'], 'company')}")
    append_common_fields(lines, project)
    return "\n".join(lines)


def register_tools(mcp: FastMCP, client: DayliteRestClient | None = None) -> None:
    """Register Daylite project tools with the MCP server."""

    @mcp.tool()
    async def daylite_list_projects(limit: int | None = None, offset: int | None = None) -> dict:
        """
        List projects from Daylite.

        Args:
            limit: Maximum number of projects to fetch (default: show first 50)
            offset: Offset for pagination

        Returns:
            Dict with the formatted projects or error
        """
        if client is None:
            return missing_credentials_error("daylite_list_projects")

        try:
            data = await client.get("/projects", list_params(limit, offset))
            projects = unwrap_items(data, "projects")
            if not projects:
                return {"result": "No projects found."}
            return {"result": format_listing(projects, format_project, "project(s)", limit)}
        except Exception as e:
            return tool_error("daylite_list_projects", e)

    @mcp.tool()
    async def daylite_get_project(id: int) -> dict:
        """
        Get a single project by ID.

        Args:
            id: The Daylite project ID

        Returns:
            Dict with the formatted project or error
        """
        if client is None:
            return missing_credentials_error("daylite_get_project")

        try:
            data = await client.get(f"/projects/{id}")
            return {"result": format_project(data or {})}
        except Exception as e:
            return tool_error("daylite_get_project", e)

    @mcp.tool()
    async def daylite_create_project(
        name: str,
        pipeline_id: int | None = None,
        stage_id: int | None = None,
        contact_id: int | None = None,
        company_id: int | None = None,
        details: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> dict:
        """
        Create a new project in Daylite.

        Args:
            name: Project name
            pipeline_id: Pipeline ID (see daylite_list_pipelines)
            stage_id: Pipeline stage ID
            contact_id: Contact to link
            company_id: Company to link
            details: Description
            start_date: Start date (ISO 8601)
            end_date: Due date (ISO 8601)

        Returns:
            Dict with the created project or error
        """
        if client is None:
            return missing_credentials_error("daylite_create_project")
        if not name:
            return {"error": "name is required"}

        body: dict[str, Any] = {"name": name}
        if details:
            body["details"] = details
        if start_date:
            body["started"] = start_date
        if end_date:
            body["due"] = end_date
        if pipeline_id:
            body["current_pipeline"] = f"/v1/pipelines/{pipeline_id}"
        if stage_id:
            body["current_pipeline_stage"] = f"/v1/pipeline_stages/{stage_id}"
        if contact_id:
            body["contacts"] = [{"contact": f"/v1/contacts/{contact_id}"}]
        if company_id:
            body["companies"] = [{"company": f"/v1/companies/{company_id}"}]

        try:
            data = await client.post("/projects", body)
            return {"result": f"Project created:\n{format_project(data or {})}"}
        except Exception as e:
            return tool_error("daylite_create_project", e)

    @mcp.tool()
    async def daylite_update_project(
        id: int,
        name: str | None = None,
        stage_id: int | None = None,
        details: str | None = None,
        status: str | None = None,
    ) -> dict:
        """
        Update an existing project.

        Args:
            id: The Daylite project ID
            name: New project name
            stage_id: New pipeline stage ID
            details: New description
            status: New status

        Returns:
            Dict with the updated project or error
        """
        if client is None:
            return missing_credentials_error("daylite_update_project")

        body: dict[str, Any] = {}
        if name:
            body["name"] = name
        if stage_id:
            body["current_pipeline_stage"] = f"/v1/pipeline_stages/{stage_id}"
        if details:
            body["details"] = details
        if status:
            body["status"] = status

        try:
            data = await client.put(f"/projects/{id}", body)
            return {"result": f"Project updated:\n{format_project(data or {})}"}
        except Exception as e:
            return tool_error("daylite_update_project", e)

    @mcp.tool()
    async def daylite_delete_project(id: int) -> dict:
        """
        Delete a project from Daylite.

        Args:
            id: The Daylite project ID

        Returns:
            Dict with confirmation or error
        """
        if client is None:
            return missing_credentials_error("daylite_delete_project")

        try:
            await client.delete(f"/projects/{id}")
            return {"result": f"Project {id} deleted."}
        except Exception as e:
            return tool_error("daylite_delete_project", e)
