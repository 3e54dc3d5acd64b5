"""
Daylite Appointments Tool - VEVENT appointments over CalDAV.

Supports:
- Listing appointments, optionally within a time window
- Reading one appointment by its CalDAV URL
- Creating, updating and deleting appointments

Appointments are addressed by the URL returned from
daylite_list_appointments; updates patch the stored iCalendar text so
properties this tool does not manage are preserved.
"""

from __future__ import annotations

from fastmcp import FastMCP

from ...caldav_session import DayliteCalDAVSession
from ...credentials import missing_credentials_error
from ...models import CalendarEvent
from .._common import tool_error


def format_event(event: CalendarEvent) -> str:
    lines = [f"Title: {event.summary}", f"URL: {event.url}"]
    if event.uid:
        lines.append(f"UID: {event.uid}")
    if event.etag:
        lines.append(f"ETag: {event.etag}")
    lines.append(f"Start: {event.dtstart}")
    if event.dtend:
        lines.append(f"End: {event.dtend}")
    if event.all_day:
        lines.append("All day: yes")
    if event.description:
        lines.append(f"Details: {event.description}")
    if event.location:
        lines.append(f"Location: {event.location}")
    if event.status:
        lines.append(f"Status: {event.status}")
    if event.attendees:
        lines.append(f"Attendees: {', '.join(event.attendees)}")
    return "\n".join(lines)


def register_tools(mcp: FastMCP, session: DayliteCalDAVSession | None = None) -> None:
    """Register Daylite appointment tools with the MCP server."""

    @mcp.tool()
    async def daylite_list_appointments(
        start_after: str | None = None,
        start_before: str | None = None,
        calendar: str | None = None,
    ) -> dict:
        """
        List appointments from a Daylite calendar.

        Use this when you need to:
        - See what is scheduled in a date range
        - Find the URL of an appointment to read, update or delete

        Args:
            start_after: Only appointments after this time (ISO 8601, e.g. "2025-01-01T00:00:00Z")
            start_before: Only appointments before this time (ISO 8601)
            calendar: Calendar name (default: the first calendar)

        Returns:
            Dict with the formatted appointments or error
        """
        if session is None:
            return missing_credentials_error("daylite_list_appointments")

        try:
            events = await session.list_events(calendar, start_after, start_before)
            if not events:
                return {"result": "No appointments found."}
            formatted = "\n\n---\n\n".join(format_event(event) for event in events)
            return {"result": f"{len(events)} appointment(s) found:\n\n{formatted}"}
        except Exception as e:
            return tool_error("daylite_list_appointments", e)

    @mcp.tool()
    async def daylite_get_appointment(url: str) -> dict:
        """
        Get a single appointment by its CalDAV URL.

        Args:
            url: The appointment URL (from daylite_list_appointments)

        Returns:
            Dict with the formatted appointment or error
        """
        if session is None:
            return missing_credentials_error("daylite_get_appointment")
        if not url:
            return {"error": "url is required"}

        try:
            event = await session.get_event(url)
            if event is None:
                return {"error": f"Appointment not found: {url}"}
            return {"result": format_event(event)}
        except Exception as e:
            return tool_error("daylite_get_appointment", e)

    @mcp.tool()
    async def daylite_create_appointment(
        summary: str,
        dtstart: str,
        dtend: str | None = None,
        description: str | None = None,
        location: str | None = None,
        all_day: bool = False,
        calendar: str | None = None,
    ) -> dict:
        """
        Create a new appointment in Daylite.

        Args:
            summary: Appointment title
            dtstart: Start time (ISO 8601, e.g. "2025-06-15T10:00:00"), or a date for all-day
            dtend: End time (ISO 8601)
            description: Optional details
            location: Optional location
            all_day: Create an all-day appointment (default: False)
            calendar: Calendar name (default: the first calendar)

        Returns:
            Dict with the new appointment's UID and URL or error
        """
        if session is None:
            return missing_credentials_error("daylite_create_appointment")
        if not summary:
            return {"error": "summary is required"}
        if not dtstart:
            return {"error": "dtstart is required"}

        try:
            event = await session.create_event(
                summary,
                dtstart,
                dtend,
                description=description,
                location=location,
                all_day=all_day,
                calendar_name=calendar,
            )
            return {
                "result": f'Appointment created: "{summary}" (UID: {event.uid})\nURL: {event.url}'
            }
        except Exception as e:
            return tool_error("daylite_create_appointment", e)

    @mcp.tool()
    async def daylite_update_appointment(
        url: str,
        etag: str | None = None,
        summary: str | None = None,
        dtstart: str | None = None,
        dtend: str | None = None,
        description: str | None = None,
        location: str | None = None,
        all_day: bool | None = None,
    ) -> dict:
        """
        Update an existing appointment. Only the given fields change.

        Args:
            url: The appointment URL (from daylite_list_appointments)
            etag: Last seen ETag; the update fails if the appointment changed since
            summary: New title
            dtstart: New start time (ISO 8601)
            dtend: New end time (ISO 8601)
            description: New details
            location: New location
            all_day: Force all-day (True) or timed (False) dates; detected when omitted

        Returns:
            Dict with confirmation or error
        """
        if session is None:
            return missing_credentials_error("daylite_update_appointment")
        if not url:
            return {"error": "url is required"}

        try:
            await session.update_event(
                url,
                etag=etag,
                summary=summary,
                dtstart=dtstart,
                dtend=dtend,
                description=description,
                location=location,
                all_day=all_day,
            )
            return {"result": "Appointment updated."}
        except Exception as e:
            return tool_error("daylite_update_appointment", e)

    @mcp.tool()
    async def daylite_delete_appointment(url: str, etag: str | None = None) -> dict:
        """
        Delete an appointment from Daylite.

        Args:
            url: The appointment URL (from daylite_list_appointments)
            etag: Last seen ETag; fetched from the server when omitted

        Returns:
            Dict with confirmation or error
        """
        if session is None:
            return missing_credentials_error("daylite_delete_appointment")
        if not url:
            return {"error": "url is required"}

        try:
            await session.delete_event(url, etag)
            return {"result": "Appointment deleted."}
        except Exception as e:
            return tool_error("daylite_delete_appointment", e)
