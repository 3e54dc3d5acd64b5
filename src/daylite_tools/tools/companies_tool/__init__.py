"""
Daylite Companies Tool - manage organizations via the Daylite REST API.
"""

from .companies_tool import register_tools

__all__ = ["register_tools"]
