"""
Daylite MCP tools.

CalDAV tool groups take a DayliteCalDAVSession, REST tool groups a
DayliteRestClient. Every group is registered even without its client; its
tools then answer with a "not configured" error and setup instructions.
"""

from __future__ import annotations

from fastmcp import FastMCP

from ..caldav_session import DayliteCalDAVSession
from ..credentials import CALDAV_TOOLS, REST_TOOLS
from ..rest_client import DayliteRestClient
from .appointments_tool import register_tools as register_appointments
from .calendar_tool import register_tools as register_calendar
from .companies_tool import register_tools as register_companies
from .contacts_tool import register_tools as register_contacts
from .opportunities_tool import register_tools as register_opportunities
from .projects_tool import register_tools as register_projects
from .search_tool import register_tools as register_search
from .tasks_tool import register_tools as register_tasks


def register_all_tools(
    mcp: FastMCP,
    session: DayliteCalDAVSession | None = None,
    client: DayliteRestClient | None = None,
) -> list[str]:
    """
    Register every Daylite tool group with the MCP server.

    Returns:
        Names of the registered tools, CalDAV groups first
    """
    register_calendar(mcp, session)
    register_appointments(mcp, session)
    register_tasks(mcp, session)

    register_contacts(mcp, client)
    register_companies(mcp, client)
    register_opportunities(mcp, client)
    register_projects(mcp, client)
    register_search(mcp, client)

    return [*CALDAV_TOOLS, *REST_TOOLS]


__all__ = ["register_all_tools"]
