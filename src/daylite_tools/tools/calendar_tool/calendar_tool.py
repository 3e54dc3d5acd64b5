"""
Daylite Calendar Tool - calendar collections on the Daylite CalDAV server.

Supports:
- Listing the calendars visible to the account
- Re-running discovery after calendars were added or renamed
"""

from __future__ import annotations

from fastmcp import FastMCP

from ...caldav_session import DayliteCalDAVSession
from ...credentials import missing_credentials_error
from ...models import Calendar
from .._common import tool_error


def format_calendars(calendars: list[Calendar]) -> str:
    lines = [
        f"{index}. {calendar.display_name or '(untitled)'} - {calendar.url}"
        for index, calendar in enumerate(calendars, start=1)
    ]
    return f"{len(calendars)} calendar(s) found:\n\n" + "\n".join(lines)


def register_tools(mcp: FastMCP, session: DayliteCalDAVSession | None = None) -> None:
    """Register Daylite calendar tools with the MCP server."""

    @mcp.tool()
    async def daylite_list_calendars() -> dict:
        """
        List the Daylite calendars available over CalDAV.

        Use this when you need to:
        - Find the calendar name to pass to appointment or task tools
        - Check which calendars the account can see

        Returns:
            Dict with the formatted calendar list or error
        """
        if session is None:
            return missing_credentials_error("daylite_list_calendars")

        try:
            calendars = await session.get_calendars()
            if not calendars:
                return {"result": "No calendars found."}
            return {"result": format_calendars(calendars)}
        except Exception as e:
            return tool_error("daylite_list_calendars", e)

    @mcp.tool()
    async def daylite_refresh_calendars() -> dict:
        """
        Log in again and reload the calendar list.

        Use this when a calendar was created or renamed in Daylite after the
        server started.

        Returns:
            Dict with the refreshed calendar list or error
        """
        if session is None:
            return missing_credentials_error("daylite_refresh_calendars")

        try:
            calendars = await session.refresh_calendars()
            if not calendars:
                return {"result": "No calendars found."}
            return {"result": format_calendars(calendars)}
        except Exception as e:
            return tool_error("daylite_refresh_calendars", e)
