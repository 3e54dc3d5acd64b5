"""
Daylite Calendar Tool - list and refresh CalDAV calendars.
"""

from .calendar_tool import register_tools

__all__ = ["register_tools"]
