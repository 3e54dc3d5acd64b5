"""
Daylite Search Tool - cross-entity search, pipelines and raw API access.

The Daylite REST API has no server-side search, so daylite_search fetches
each record type and filters it client-side on name, category and keywords.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from fastmcp import FastMCP

from ...credentials import missing_credentials_error
from ...rest_client import DayliteRestClient
from .._common import display_name, extract_id, tool_error, unwrap_items

SEARCHABLE_TYPES = ("contacts", "companies", "opportunities", "projects")
SECTION_LABELS = {
    "contacts": "Contacts",
    "companies": "Companies",
    "opportunities": "Opportunities",
    "projects": "Projects",
}
DEBUG_RAW_MAX_CHARS = 8000


def matches_query(item: dict[str, Any], query: str) -> bool:
    """Case-insensitive substring match on display name, category or any keyword."""
    needle = query.lower()
    if needle in display_name(item).lower():
        return True
    category = item.get("category")
    if isinstance(category, str) and needle in category.lower():
        return True
    for keyword in item.get("keywords") or []:
        text = keyword if isinstance(keyword, str) else (keyword or {}).get("name") or ""
        if needle in str(text).lower():
            return True
    return False


def format_pipeline(pipeline: dict[str, Any]) -> str:
    lines = []
    record_id = extract_id(pipeline.get("self"))
    if record_id:
        lines.append(f"ID: {record_id}")
    if pipeline.get("name"):
        lines.append(f"Name: {pipeline['name']}")
    stages = pipeline.get("stages") or []
    if stages:
        lines.append("Stages:")
        for stage in stages:
            stage_id = extract_id(stage.get("self")) or "?"
            lines.append(f"  - {stage.get('name') or '?'} (ID: {stage_id})")
    return "\n".join(lines)


def register_tools(mcp: FastMCP, client: DayliteRestClient | None = None) -> None:
    """Register Daylite search tools with the MCP server."""

    @mcp.tool()
    async def daylite_search(
        query: str,
        type: Literal["contacts", "companies", "opportunities", "projects", "all"] = "all",
        limit: int = 10,
    ) -> dict:
        """
        Search Daylite contacts, companies, opportunities and projects.

        Use this when you need to:
        - Find a record ID by name before reading or updating it
        - Look up everything tagged with a keyword or category

        Args:
            query: Text to look for in names, categories and keywords
            type: Restrict the search to one record type (default: "all")
            limit: Maximum results shown per record type (default: 10)

        Returns:
            Dict with matches grouped by record type or error
        """
        if client is None:
            return missing_credentials_error("daylite_search")
        if not query:
            return {"error": "query is required"}

        endpoints = SEARCHABLE_TYPES if type == "all" else (type,)
        sections: list[str] = []
        for endpoint in endpoints:
            try:
                items = unwrap_items(await client.get(f"/{endpoint}"), endpoint)
            except Exception as e:
                failure = tool_error("daylite_search", e)
                sections.append(f"### {SECTION_LABELS[endpoint]}: error - {failure['error']}")
                continue

            found = [item for item in items if isinstance(item, dict) and matches_query(item, query)]
            if not found:
                continue
            sections.append(f"### {SECTION_LABELS[endpoint]} ({len(found)}):")
            for item in found[: max(limit, 1)]:
                sections.append(
                    f"  ID: {extract_id(item.get('self')) or '?'}\n"
                    f"  Name: {display_name(item)}\n"
                    "  ---"
                )

        if not sections:
            return {"result": f'No results for "{query}".'}
        return {"result": f'Search results for "{query}":\n\n' + "\n".join(sections)}

    @mcp.tool()
    async def daylite_list_pipelines() -> dict:
        """
        List the opportunity and project pipelines with their stages.

        Use this when you need a pipeline or stage ID for creating or moving
        an opportunity or project.

        Returns:
            Dict with the formatted pipelines or error
        """
        if client is None:
            return missing_credentials_error("daylite_list_pipelines")

        try:
            pipelines = unwrap_items(await client.get("/pipelines"), "pipelines")
            if not pipelines:
                return {"result": "No pipelines found."}
            formatted = "\n---\n".join(format_pipeline(pipeline) for pipeline in pipelines)
            return {"result": f"{len(pipelines)} pipeline(s):\n\n{formatted}"}
        except Exception as e:
            return tool_error("daylite_list_pipelines", e)

    @mcp.tool()
    async def daylite_debug_raw(endpoint: str) -> dict:
        """
        Show the raw JSON returned by a Daylite REST endpoint, for troubleshooting.

        Args:
            endpoint: API path such as "/companies" or "/contacts/123"

        Returns:
            Dict with up to 8000 characters of pretty-printed JSON or error
        """
        if client is None:
            return missing_credentials_error("daylite_debug_raw")
        if not endpoint:
            return {"error": "endpoint is required"}

        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        try:
            data = await client.get(path, {"limit": 2})
            return {"result": json.dumps(data, indent=2, ensure_ascii=False)[:DEBUG_RAW_MAX_CHARS]}
        except Exception as e:
            return tool_error("daylite_debug_raw", e)
