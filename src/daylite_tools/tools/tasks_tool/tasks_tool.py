"""
Daylite Tasks Tool - VTODO tasks over CalDAV.

Supports:
- Listing tasks of a calendar
- Reading one task by its CalDAV URL
- Creating, updating, completing and deleting tasks
"""

from __future__ import annotations

from fastmcp import FastMCP

from ...caldav_session import DayliteCalDAVSession
from ...credentials import missing_credentials_error
from ...models import TASK_STATUSES, TaskItem
from .._common import tool_error

STATUS_LABELS = {
    "NEEDS-ACTION": "Open",
    "IN-PROCESS": "In progress",
    "COMPLETED": "Completed",
    "CANCELLED": "Cancelled",
}


def priority_label(priority: int) -> str:
    """RFC 5545 priority bands: 1 highest, 5 medium, 9 lowest, 0 undefined."""
    if priority == 0:
        return "Undefined"
    if priority == 1:
        return "Highest"
    if 2 <= priority <= 4:
        return "High"
    if priority == 5:
        return "Medium"
    if 6 <= priority <= 8:
        return "Low"
    if priority == 9:
        return "Lowest"
    return str(priority)


def format_task(task: TaskItem) -> str:
    lines = [f"Title: {task.summary}", f"URL: {task.url}"]
    if task.uid:
        lines.append(f"UID: {task.uid}")
    if task.etag:
        lines.append(f"ETag: {task.etag}")
    if task.description:
        lines.append(f"Details: {task.description}")
    if task.status:
        lines.append(f"Status: {STATUS_LABELS.get(task.status, task.status)}")
    if task.due:
        lines.append(f"Due: {task.due}")
    if task.dtstart:
        lines.append(f"Start: {task.dtstart}")
    if task.priority is not None:
        lines.append(f"Priority: {priority_label(task.priority)}")
    if task.percent_complete is not None:
        lines.append(f"Progress: {task.percent_complete}%")
    if task.completed:
        lines.append(f"Completed at: {task.completed}")
    return "\n".join(lines)


def _check_priority(priority: int | None) -> dict | None:
    if priority is not None and not 0 <= priority <= 9:
        return {"error": "priority must be between 0 and 9"}
    return None


def register_tools(mcp: FastMCP, session: DayliteCalDAVSession | None = None) -> None:
    """Register Daylite task tools with the MCP server."""

    @mcp.tool()
    async def daylite_list_tasks(calendar: str | None = None) -> dict:
        """
        List tasks from a Daylite calendar.

        Use this when you need to:
        - Review open and completed tasks
        - Find the URL of a task to read, update or delete

        Args:
            calendar: Calendar name (default: the first calendar)

        Returns:
            Dict with the formatted tasks or error
        """
        if session is None:
            return missing_credentials_error("daylite_list_tasks")

        try:
            tasks = await session.list_tasks(calendar)
            if not tasks:
                return {"result": "No tasks found."}
            formatted = "\n\n---\n\n".join(format_task(task) for task in tasks)
            return {"result": f"{len(tasks)} task(s) found:\n\n{formatted}"}
        except Exception as e:
            return tool_error("daylite_list_tasks", e)

    @mcp.tool()
    async def daylite_get_task(url: str) -> dict:
        """
        Get a single task by its CalDAV URL.

        Args:
            url: The task URL (from daylite_list_tasks)

        Returns:
            Dict with the formatted task or error
        """
        if session is None:
            return missing_credentials_error("daylite_get_task")
        if not url:
            return {"error": "url is required"}

        try:
            task = await session.get_task(url)
            if task is None:
                return {"error": f"Task not found: {url}"}
            return {"result": format_task(task)}
        except Exception as e:
            return tool_error("daylite_get_task", e)

    @mcp.tool()
    async def daylite_create_task(
        summary: str,
        description: str | None = None,
        due: str | None = None,
        priority: int | None = None,
        calendar: str | None = None,
    ) -> dict:
        """
        Create a new task in Daylite.

        Args:
            summary: Task title
            description: Optional details
            due: Due date or time (ISO 8601, e.g. "2025-12-31" or "2025-12-31T17:00:00")
            priority: 1 = highest, 5 = medium, 9 = lowest, 0 = undefined
            calendar: Calendar name (default: the first calendar)

        Returns:
            Dict with the new task's UID and URL or error
        """
        if session is None:
            return missing_credentials_error("daylite_create_task")
        if not summary:
            return {"error": "summary is required"}
        invalid = _check_priority(priority)
        if invalid:
            return invalid

        try:
            task = await session.create_task(
                summary,
                description=description,
                due=due,
                priority=priority,
                calendar_name=calendar,
            )
            return {"result": f'Task created: "{summary}" (UID: {task.uid})\nURL: {task.url}'}
        except Exception as e:
            return tool_error("daylite_create_task", e)

    @mcp.tool()
    async def daylite_update_task(
        url: str,
        etag: str | None = None,
        summary: str | None = None,
        description: str | None = None,
        due: str | None = None,
        priority: int | None = None,
        status: str | None = None,
        completed: bool = False,
    ) -> dict:
        """
        Update an existing task. Only the given fields change.

        Args:
            url: The task URL (from daylite_list_tasks)
            etag: Last seen ETag; the update fails if the task changed since
            summary: New title
            description: New details
            due: New due date (ISO 8601)
            priority: New priority (1 = highest, 5 = medium, 9 = lowest)
            status: One of NEEDS-ACTION, IN-PROCESS, COMPLETED, CANCELLED
            completed: Mark the task as completed

        Returns:
            Dict with confirmation or error
        """
        if session is None:
            return missing_credentials_error("daylite_update_task")
        if not url:
            return {"error": "url is required"}
        invalid = _check_priority(priority)
        if invalid:
            return invalid
        if status is not None and status not in TASK_STATUSES:
            return {"error": f"status must be one of {', '.join(TASK_STATUSES)}"}

        try:
            await session.update_task(
                url,
                etag=etag,
                summary=summary,
                description=description,
                due=due,
                priority=priority,
                status=status,
                completed=completed,
            )
            return {"result": "Task updated."}
        except Exception as e:
            return tool_error("daylite_update_task", e)

    @mcp.tool()
    async def daylite_delete_task(url: str, etag: str | None = None) -> dict:
        """
        Delete a task from Daylite.

        Args:
            url: The task URL (from daylite_list_tasks)
            etag: Last seen ETag; fetched from the server when omitted

        Returns:
            Dict with confirmation or error
        """
        if session is None:
            return missing_credentials_error("daylite_delete_task")
        if not url:
            return {"error": "url is required"}

        try:
            await session.delete_task(url, etag)
            return {"result": "Task deleted."}
        except Exception as e:
            return tool_error("daylite_delete_task", e)
