"""
Daylite Search Tool - search records, list pipelines, inspect raw API responses.
"""

from .search_tool import register_tools

__all__ = ["register_tools"]
