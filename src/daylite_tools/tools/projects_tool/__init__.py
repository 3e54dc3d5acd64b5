"""
Daylite Projects Tool - manage projects via the Daylite REST API.
"""

from .projects_tool import register_tools

__all__ = ["register_tools"]
