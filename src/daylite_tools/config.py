"""
Process configuration for the Daylite MCP server.

Credentials come from the environment. Either set may be missing, but not
both:

- CalDAV (appointments, tasks): DAYLITE_USERNAME + DAYLITE_PASSWORD,
  optional DAYLITE_SERVER_URL
- REST API (contacts, companies, opportunities, projects): DAYLITE_REFRESH_TOKEN
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .credentials import CREDENTIAL_SPECS
from .errors import ConfigurationError

DEFAULT_CALDAV_SERVER_URL = "https://caldav.marketcircle.net"
REST_API_BASE = "https://api.marketcircle.net/v1"
TOKEN_FILE_NAME = ".daylite-refresh-token"


def default_token_file() -> Path:
    return Path.home() / TOKEN_FILE_NAME


@dataclass(frozen=True)
class CalDAVConfig:
    username: str
    password: str
    server_url: str = DEFAULT_CALDAV_SERVER_URL


@dataclass(frozen=True)
class RestConfig:
    refresh_token: str
    base_url: str = REST_API_BASE
    token_file: Path = field(default_factory=default_token_file)


@dataclass(frozen=True)
class DayliteConfig:
    caldav: CalDAVConfig | None = None
    rest: RestConfig | None = None

    @property
    def features(self) -> list[str]:
        enabled = []
        if self.caldav is not None:
            enabled.append("CalDAV (tasks, appointments)")
        if self.rest is not None:
            enabled.append("REST API (contacts, companies, opportunities, projects, search)")
        return enabled


def _missing_credentials_message() -> str:
    lines = ["No Daylite credentials configured.", ""]
    for spec in CREDENTIAL_SPECS.values():
        lines.append(f"  {spec.env_var}: {spec.description}")
    lines.append("")
    lines.append("Set DAYLITE_USERNAME and DAYLITE_PASSWORD for CalDAV,")
    lines.append("DAYLITE_REFRESH_TOKEN for the REST API, or both.")
    return "\n".join(lines)


def load_config(environ: Mapping[str, str] | None = None) -> DayliteConfig:
    """
    Build the configuration from the environment.

    Raises:
        ConfigurationError: neither credential set is present
    """
    env = os.environ if environ is None else environ

    username = env.get("DAYLITE_USERNAME", "").strip()
    password = env.get("DAYLITE_PASSWORD", "")
    refresh_token = env.get("DAYLITE_REFRESH_TOKEN", "").strip()

    caldav = None
    if username and password:
        server_url = env.get("DAYLITE_SERVER_URL", "").strip() or DEFAULT_CALDAV_SERVER_URL
        caldav = CalDAVConfig(username=username, password=password, server_url=server_url)

    rest = RestConfig(refresh_token=refresh_token) if refresh_token else None

    if caldav is None and rest is None:
        raise ConfigurationError(_missing_credentials_message())

    return DayliteConfig(caldav=caldav, rest=rest)
