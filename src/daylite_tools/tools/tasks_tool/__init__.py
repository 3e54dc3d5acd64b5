"""
Daylite Tasks Tool - list, read, create, update and delete tasks.
"""

from .tasks_tool import register_tools

__all__ = ["register_tools"]
