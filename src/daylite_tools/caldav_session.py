"""
CalDAV session for the Daylite calendar/task store.

Owns login, calendar discovery and object fetch/create/update/delete. The
session starts uninitialized; the first operation that touches calendars
logs in and caches the calendar list, which then stays a process-wide
snapshot until refresh_calendars() is called.

Protocol work is delegated to the caldav library:
- principal discovery and the calendar listing via DAVClient.principal()
- calendar-query REPORTs via Calendar.search(), asking for getetag as well
- new objects via Calendar.save_event() / save_todo()

Updates and deletes rewrite the raw iCalendar text and go out as plain
PUT / DELETE requests through DAVClient.request(), with If-Match carrying
the last known ETag.

caldav is synchronous, so every call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import caldav
from caldav.elements import dav
from caldav.lib import error as dav_error

from . import ical
from .config import CalDAVConfig
from .errors import (
    CalDAVError,
    CalendarNotFoundError,
    NoCalendarsError,
    ObjectNotFoundError,
)
from .models import Calendar, CalendarEvent, TaskItem

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 30

# Bounds substituted for a missing side of a time-range filter
OPEN_RANGE_START = "19700101T000000Z"
OPEN_RANGE_END = "20991231T235959Z"

_ICS_CONTENT_TYPE = "text/calendar; charset=utf-8"
_UTC_FORMAT = "%Y%m%dT%H%M%SZ"

# caldav raises one exception class per failure kind and keeps the HTTP
# status only in the reason text for most of them
_ERROR_STATUS: tuple[tuple[type[dav_error.DAVError], int], ...] = (
    (dav_error.AuthorizationError, 401),
    (dav_error.NotFoundError, 404),
)


def to_utc_bound(value: str) -> str:
    """Normalize an ISO 8601 bound to the UTC form time-range filters require."""
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        return ical.to_ical_datetime(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return ical.ical_timestamp(moment)


def time_range(start: str | None, end: str | None) -> tuple[str, str] | None:
    """No bounds -> no filter; one bound -> the other side stays open."""
    if not start and not end:
        return None
    return (
        to_utc_bound(start) if start else OPEN_RANGE_START,
        to_utc_bound(end) if end else OPEN_RANGE_END,
    )


def _as_datetime(bound: str) -> datetime:
    try:
        return datetime.strptime(bound, _UTC_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        # date-only bound from to_ical_datetime
        return datetime.strptime(bound[:8], "%Y%m%d").replace(tzinfo=UTC)


def search_arguments(component: str, range_: tuple[str, str] | None = None) -> dict[str, Any]:
    """Keyword arguments for caldav's Calendar.search() selecting one component type."""
    if component == "VTODO":
        arguments: dict[str, Any] = {"todo": True, "include_completed": True}
    else:
        arguments = {"event": True}
    if range_ is not None:
        arguments["start"] = _as_datetime(range_[0])
        arguments["end"] = _as_datetime(range_[1])
    return arguments


def caldav_error(error: dav_error.DAVError) -> CalDAVError:
    for error_class, status in _ERROR_STATUS:
        if isinstance(error, error_class):
            return CalDAVError(status, str(error.reason))
    return CalDAVError(None, str(error))


class DayliteCalDAVSession:
    """
    Stateful CalDAV client for one Daylite account.

    Calendar objects are never cached; only the calendar list is.
    """

    def __init__(
        self,
        config: CalDAVConfig,
        *,
        client: caldav.DAVClient | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self._config = config
        self._client = client or caldav.DAVClient(
            url=config.server_url,
            username=config.username,
            password=config.password,
            timeout=timeout,
        )
        self._calendars: list[Calendar] = []
        self._collections: dict[str, Any] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def server_url(self) -> str:
        return self._config.server_url

    async def aclose(self) -> None:
        await asyncio.to_thread(self._client.close)

    async def _call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking caldav call off the event loop."""
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except dav_error.DAVError as e:
            raise caldav_error(e) from e

    async def _request(
        self, method: str, url: str, body: str = "", headers: dict[str, str] | None = None
    ) -> Any:
        response = await self._call(self._client.request, url, method, body, headers or {})
        logger.debug(f"CalDAV {method} {url} -> {response.status}")
        return response

    # --- Login and calendars ---

    def _discover_calendars(self) -> list[Any]:
        return self._client.principal().calendars()

    async def login(self) -> list[Calendar]:
        """Log in and replace the cached calendar list."""
        collections = await self._call(self._discover_calendars)
        self._collections = {str(collection.url): collection for collection in collections}
        self._calendars = [
            Calendar(display_name=collection.name or "", url=str(collection.url))
            for collection in collections
        ]
        self._initialized = True
        logger.info(
            f"CalDAV login to {self._config.server_url} as {self._config.username}: "
            f"{len(self._calendars)} calendar(s)"
        )
        return self._calendars

    async def ensure_initialized(self) -> None:
        if not self._initialized:
            await self.login()

    async def get_calendars(self) -> list[Calendar]:
        await self.ensure_initialized()
        return self._calendars

    async def refresh_calendars(self) -> list[Calendar]:
        """Force a re-login regardless of the current state."""
        return await self.login()

    def get_calendar(self, display_name: str | None = None) -> Calendar:
        """
        Resolve a calendar from the cached list.

        Args:
            display_name: case-insensitive display name; None selects the
                first calendar in server order

        Raises:
            NoCalendarsError: the cached list is empty
            CalendarNotFoundError: no display name matches
        """
        if not self._calendars:
            raise NoCalendarsError()
        if not display_name:
            return self._calendars[0]
        wanted = display_name.lower()
        for calendar in self._calendars:
            if calendar.display_name.lower() == wanted:
                return calendar
        raise CalendarNotFoundError(
            display_name, [calendar.display_name for calendar in self._calendars]
        )

    # --- Objects ---

    async def _query(
        self, calendar: Calendar, component: str, range_: tuple[str, str] | None = None
    ) -> list[tuple[str, str | None, str]]:
        collection = self._collections[calendar.url]
        found = await self._call(
            collection.search, props=[dav.GetEtag()], **search_arguments(component, range_)
        )
        results = []
        for obj in found:
            if not obj.data:
                continue
            etag = (obj.props or {}).get(dav.GetEtag.tag)
            results.append((str(obj.url), etag, obj.data))
        return results

    async def fetch_object(self, url: str) -> tuple[str, str | None] | None:
        """
        Fetch one object by its own URL.

        Returns:
            (ical data, etag), or None when the server has no such object
        """
        await self.ensure_initialized()
        response = await self._request("GET", url)
        if response.status in (404, 410):
            return None
        if not 200 <= response.status < 300:
            raise CalDAVError(response.status, response.raw)
        return response.raw, response.headers.get("ETag")

    async def _create_object(
        self, calendar: Calendar, component: str, data: str
    ) -> tuple[str, str | None]:
        collection = self._collections[calendar.url]
        save = collection.save_todo if component == "VTODO" else collection.save_event
        created = await self._call(save, data)
        url = str(created.url)
        logger.info(f"CalDAV created {url}")
        return url, (created.props or {}).get(dav.GetEtag.tag)

    async def _update_object(
        self, url: str, etag: str | None, patch: Callable[[str], str]
    ) -> None:
        current = await self.fetch_object(url)
        if current is None:
            raise ObjectNotFoundError(url)
        data, current_etag = current

        headers = {"Content-Type": _ICS_CONTENT_TYPE}
        precondition = etag or current_etag or ""
        if precondition:
            headers["If-Match"] = precondition

        response = await self._request("PUT", url, patch(data), headers)
        if not 200 <= response.status < 300:
            raise CalDAVError(response.status, response.raw)
        logger.info(f"CalDAV updated {url}")

    async def delete_object(self, url: str, etag: str | None = None) -> None:
        """Delete by URL; the latest ETag is fetched unless one is supplied."""
        if not etag:
            current = await self.fetch_object(url)
            if current is None:
                raise ObjectNotFoundError(url)
            etag = current[1] or ""

        headers = {"If-Match": etag} if etag else {}
        response = await self._request("DELETE", url, "", headers)
        if not 200 <= response.status < 300:
            raise CalDAVError(response.status, response.raw)
        logger.info(f"CalDAV deleted {url}")

    # --- Events (VEVENT) ---

    async def list_events(
        self,
        calendar_name: str | None = None,
        start: str | None = None,
        end: str | None = None,
    ) -> list[CalendarEvent]:
        await self.ensure_initialized()
        calendar = self.get_calendar(calendar_name)
        objects = await self._query(calendar, "VEVENT", time_range(start, end))
        events = [ical.parse_event(url, etag, data) for url, etag, data in objects]
        return [event for event in events if event is not None]

    async def get_event(self, url: str) -> CalendarEvent | None:
        fetched = await self.fetch_object(url)
        if fetched is None:
            return None
        data, etag = fetched
        return ical.parse_event(url, etag, data)

    async def create_event(
        self,
        summary: str,
        dtstart: str,
        dtend: str | None = None,
        *,
        description: str | None = None,
        location: str | None = None,
        all_day: bool = False,
        calendar_name: str | None = None,
    ) -> CalendarEvent:
        await self.ensure_initialized()
        calendar = self.get_calendar(calendar_name)
        data = ical.build_event(
            str(uuid.uuid4()),
            summary,
            dtstart,
            dtend,
            description=description,
            location=location,
            all_day=all_day,
        )
        url, etag = await self._create_object(calendar, "VEVENT", data)
        return ical.parse_event(url, etag, data)

    async def update_event(
        self,
        url: str,
        *,
        etag: str | None = None,
        summary: str | None = None,
        dtstart: str | None = None,
        dtend: str | None = None,
        description: str | None = None,
        location: str | None = None,
        all_day: bool | None = None,
    ) -> None:
        def patch(data: str) -> str:
            return ical.apply_event_changes(
                data,
                summary=summary,
                dtstart=dtstart,
                dtend=dtend,
                description=description,
                location=location,
                all_day=all_day,
            )

        await self._update_object(url, etag, patch)

    async def delete_event(self, url: str, etag: str | None = None) -> None:
        await self.delete_object(url, etag)

    # --- Tasks (VTODO) ---

    async def list_tasks(self, calendar_name: str | None = None) -> list[TaskItem]:
        await self.ensure_initialized()
        calendar = self.get_calendar(calendar_name)
        objects = await self._query(calendar, "VTODO")
        tasks = [ical.parse_task(url, etag, data) for url, etag, data in objects]
        return [task for task in tasks if task is not None]

    async def get_task(self, url: str) -> TaskItem | None:
        fetched = await self.fetch_object(url)
        if fetched is None:
            return None
        data, etag = fetched
        return ical.parse_task(url, etag, data)

    async def create_task(
        self,
        summary: str,
        *,
        description: str | None = None,
        due: str | None = None,
        priority: int | None = None,
        calendar_name: str | None = None,
    ) -> TaskItem:
        await self.ensure_initialized()
        calendar = self.get_calendar(calendar_name)
        data = ical.build_todo(
            str(uuid.uuid4()), summary, description=description, due=due, priority=priority
        )
        url, etag = await self._create_object(calendar, "VTODO", data)
        return ical.parse_task(url, etag, data)

    async def update_task(
        self,
        url: str,
        *,
        etag: str | None = None,
        summary: str | None = None,
        description: str | None = None,
        due: str | None = None,
        priority: int | None = None,
        status: str | None = None,
        completed: bool = False,
    ) -> None:
        def patch(data: str) -> str:
            return ical.apply_task_changes(
                data,
                summary=summary,
                description=description,
                due=due,
                priority=priority,
                status=status,
                completed=completed,
            )

        await self._update_object(url, etag, patch)

    async def delete_task(self, url: str, etag: str | None = None) -> None:
        await self.delete_object(url, etag)
