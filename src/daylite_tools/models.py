"""
Data models for Daylite calendar objects and REST credentials.

CalendarEvent and TaskItem are transient values materialized from a CalDAV
fetch; they keep the raw iCalendar text so updates can be applied as
in-place text patches.
"""

from __future__ import annotations

from dataclasses import dataclass, field

TASK_STATUSES = ("NEEDS-ACTION", "IN-PROCESS", "COMPLETED", "CANCELLED")


@dataclass
class Calendar:
    """A calendar collection discovered on the CalDAV server."""

    display_name: str
    url: str


@dataclass
class CalendarEvent:
    """A VEVENT."""

    uid: str
    url: str
    summary: str
    dtstart: str
    raw: str
    etag: str | None = None
    description: str | None = None
    location: str | None = None
    dtend: str | None = None
    all_day: bool = False
    status: str | None = None
    attendees: list[str] = field(default_factory=list)


@dataclass
class TaskItem:
    """A VTODO."""

    uid: str
    url: str
    summary: str
    raw: str
    etag: str | None = None
    description: str | None = None
    due: str | None = None
    dtstart: str | None = None
    priority: int | None = None
    status: str | None = None
    percent_complete: int | None = None
    completed: str | None = None


@dataclass
class RefreshTokenState:
    """
    Credential pair for the REST API.

    config_token never changes after startup; active_token may rotate after
    every exchange and is persisted whenever it does.
    """

    config_token: str
    active_token: str
    access_token: str | None = None
    expires_at: float = 0.0
