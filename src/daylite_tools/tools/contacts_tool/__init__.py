"""
Daylite Contacts Tool - manage people records via the Daylite REST API.
"""

from .contacts_tool import register_tools

__all__ = ["register_tools"]
