"""
Daylite Tools - MCP tools for the Daylite CRM.

Appointments and tasks go through the Daylite CalDAV server; contacts,
companies, opportunities and projects through the Daylite REST API.
"""

from .caldav_session import DayliteCalDAVSession
from .config import DayliteConfig, load_config
from .errors import DayliteError
from .rest_client import DayliteRestClient
from .server import create_server

__version__ = "0.1.0"

__all__ = [
    "DayliteCalDAVSession",
    "DayliteConfig",
    "DayliteError",
    "DayliteRestClient",
    "create_server",
    "load_config",
]
