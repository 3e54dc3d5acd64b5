"""
Daylite Appointments Tool - list, read, create, update and delete appointments.
"""

from .appointments_tool import register_tools

__all__ = ["register_tools"]
