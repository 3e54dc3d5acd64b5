"""
Daylite Opportunities Tool - manage sales opportunities via the Daylite REST API.
"""

from .opportunities_tool import register_tools

__all__ = ["register_tools"]
