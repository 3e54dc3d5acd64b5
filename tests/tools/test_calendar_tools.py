"""Tests for the CalDAV calendar, appointment and task tools."""

import pytest
from caldav.lib import error as dav_error

from daylite_tools import ical
from daylite_tools.tools.appointments_tool import register_tools as register_appointments
from daylite_tools.tools.calendar_tool import register_tools as register_calendar
from daylite_tools.tools.tasks_tool import register_tools as register_tasks
from daylite_tools.tools.tasks_tool.tasks_tool import priority_label

WORK = "/calendars/ann/work/"
WORK_URL = f"https://dav.example.com{WORK}"


@pytest.fixture
def caldav_tools(mcp, session, tool):
    register_calendar(mcp, session)
    register_appointments(mcp, session)
    register_tasks(mcp, session)
    return tool


class TestToolRegistration:
    """Tests for tool registration."""

    def test_all_tools_registered(self, mcp, session):
        """All 12 CalDAV tools are registered."""
        register_calendar(mcp, session)
        register_appointments(mcp, session)
        register_tasks(mcp, session)

        expected_tools = [
            "daylite_list_calendars",
            "daylite_refresh_calendars",
            "daylite_list_appointments",
            "daylite_get_appointment",
            "daylite_create_appointment",
            "daylite_update_appointment",
            "daylite_delete_appointment",
            "daylite_list_tasks",
            "daylite_get_task",
            "daylite_create_task",
            "daylite_update_task",
            "daylite_delete_task",
        ]

        for tool_name in expected_tools:
            assert tool_name in mcp._tool_manager._tools


class TestCredentialHandling:
    """Tests for tools registered without a CalDAV session."""

    @pytest.mark.asyncio
    async def test_no_session_returns_error(self, mcp, tool):
        """Tools without credentials return helpful error."""
        register_tasks(mcp, None)

        result = await tool("daylite_list_tasks")()

        assert "not configured" in result["error"]
        assert "DAYLITE_USERNAME" in result["help"]


class TestCalendars:
    """Tests for daylite_list_calendars and daylite_refresh_calendars."""

    @pytest.mark.asyncio
    async def test_list_calendars(self, caldav_tools):
        result = await caldav_tools("daylite_list_calendars")()

        assert result["result"].startswith("2 calendar(s) found:")
        assert "1. Work - https://dav.example.com/calendars/ann/work/" in result["result"]
        assert "2. Home" in result["result"]

    @pytest.mark.asyncio
    async def test_refresh_calendars(self, caldav_tools, dav_client):
        await caldav_tools("daylite_list_calendars")()
        dav_client.calendars = [("Shared", "/calendars/ann/shared/")]

        result = await caldav_tools("daylite_refresh_calendars")()

        assert "1. Shared" in result["result"]

    @pytest.mark.asyncio
    async def test_login_failure_is_error_dict(self, caldav_tools, dav_client):
        dav_client.errors["principal"] = dav_error.AuthorizationError(reason="Unauthorized")

        result = await caldav_tools("daylite_list_calendars")()

        assert "CalDAV error (HTTP 401)" in result["error"]


class TestAppointments:
    """Tests for the appointment tools."""

    @pytest.mark.asyncio
    async def test_list_empty(self, caldav_tools):
        result = await caldav_tools("daylite_list_appointments")()
        assert result == {"result": "No appointments found."}

    @pytest.mark.asyncio
    async def test_list_formats_events(self, caldav_tools, dav_client):
        dav_client.add_object(
            f"{WORK}a.ics",
            ical.build_event("a", "Review", "2025-06-15T10:00:00", location="Room 4"),
        )
        dav_client.add_object(
            f"{WORK}b.ics", ical.build_event("b", "Holiday", "2025-12-24", all_day=True)
        )

        result = await caldav_tools("daylite_list_appointments")()

        text = result["result"]
        assert text.startswith("2 appointment(s) found:")
        assert "Title: Review" in text
        assert f"URL: {WORK_URL}a.ics" in text
        assert "Location: Room 4" in text
        assert "All day: yes" in text
        assert "\n\n---\n\n" in text

    @pytest.mark.asyncio
    async def test_unknown_calendar(self, caldav_tools):
        result = await caldav_tools("daylite_list_appointments")(calendar="Other")
        assert result["error"] == 'Calendar "Other" not found. Available: Work, Home'

    @pytest.mark.asyncio
    async def test_get_missing(self, caldav_tools):
        result = await caldav_tools("daylite_get_appointment")(url=f"{WORK_URL}none.ics")
        assert "not found" in result["error"]

    @pytest.mark.asyncio
    async def test_create_and_get(self, caldav_tools):
        created = await caldav_tools("daylite_create_appointment")(
            summary="Planning", dtstart="2025-07-01T09:00:00", dtend="2025-07-01T10:00:00"
        )

        assert created["result"].startswith('Appointment created: "Planning" (UID: ')
        url = created["result"].split("URL: ")[1]
        fetched = await caldav_tools("daylite_get_appointment")(url=url)
        assert "Start: 20250701T090000" in fetched["result"]
        assert "End: 20250701T100000" in fetched["result"]

    @pytest.mark.asyncio
    async def test_create_requires_summary(self, caldav_tools):
        result = await caldav_tools("daylite_create_appointment")(summary="", dtstart="2025-07-01")
        assert result == {"error": "summary is required"}

    @pytest.mark.asyncio
    async def test_update_and_delete(self, caldav_tools, dav_client):
        dav_client.add_object(f"{WORK}a.ics", ical.build_event("a", "Old", "2025-06-15T10:00:00"))

        updated = await caldav_tools("daylite_update_appointment")(
            url=f"{WORK_URL}a.ics", summary="New"
        )
        assert updated == {"result": "Appointment updated."}
        assert "SUMMARY:New" in dav_client.objects[f"{WORK}a.ics"][0]

        deleted = await caldav_tools("daylite_delete_appointment")(url=f"{WORK_URL}a.ics")
        assert deleted == {"result": "Appointment deleted."}
        assert not dav_client.objects

    @pytest.mark.asyncio
    async def test_delete_missing(self, caldav_tools):
        result = await caldav_tools("daylite_delete_appointment")(url=f"{WORK_URL}none.ics")
        assert result["error"] == f"Object not found: {WORK_URL}none.ics"


class TestTasks:
    """Tests for the task tools."""

    def test_priority_labels(self):
        assert priority_label(0) == "Undefined"
        assert priority_label(1) == "Highest"
        assert priority_label(3) == "High"
        assert priority_label(5) == "Medium"
        assert priority_label(7) == "Low"
        assert priority_label(9) == "Lowest"

    @pytest.mark.asyncio
    async def test_list_formats_status_and_priority(self, caldav_tools, dav_client):
        dav_client.add_object(
            f"{WORK}t.ics", ical.build_todo("t", "Call back", due="2025-12-31", priority=1)
        )

        result = await caldav_tools("daylite_list_tasks")()

        text = result["result"]
        assert text.startswith("1 task(s) found:")
        assert "Status: Open" in text
        assert "Priority: Highest" in text
        assert "Due: 20251231" in text

    @pytest.mark.asyncio
    async def test_create_rejects_bad_priority(self, caldav_tools):
        result = await caldav_tools("daylite_create_task")(summary="x", priority=10)
        assert result == {"error": "priority must be between 0 and 9"}

    @pytest.mark.asyncio
    async def test_update_rejects_bad_status(self, caldav_tools):
        result = await caldav_tools("daylite_update_task")(url=f"{WORK_URL}t.ics", status="DONE")
        assert "status must be one of" in result["error"]

    @pytest.mark.asyncio
    async def test_complete_task(self, caldav_tools, dav_client):
        dav_client.add_object(f"{WORK}t.ics", ical.build_todo("t", "Call back"))

        result = await caldav_tools("daylite_update_task")(url=f"{WORK_URL}t.ics", completed=True)
        fetched = await caldav_tools("daylite_get_task")(url=f"{WORK_URL}t.ics")

        assert result == {"result": "Task updated."}
        assert "Status: Completed" in fetched["result"]
        assert "Progress: 100%" in fetched["result"]
        assert "Completed at: " in fetched["result"]

    @pytest.mark.asyncio
    async def test_create_and_delete(self, caldav_tools, dav_client):
        created = await caldav_tools("daylite_create_task")(summary="Send offer", calendar="Home")
        url = created["result"].split("URL: ")[1]

        assert url.startswith("https://dav.example.com/calendars/ann/home/")
        assert await caldav_tools("daylite_delete_task")(url=url) == {"result": "Task deleted."}
        assert not dav_client.objects
