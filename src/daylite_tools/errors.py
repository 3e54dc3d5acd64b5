"""
Error taxonomy for the Daylite clients.

Core components raise these; the tool layer catches them at the tool
boundary and turns them into error dicts.
"""

from __future__ import annotations

PERSONAL_TOKEN_HELP_URL = "https://developer.daylite.app/reference/personal-token"


class DayliteError(Exception):
    """Base class for every error raised by the Daylite clients."""


class ConfigurationError(DayliteError):
    """Required credentials are missing from the process environment."""


class NotFoundError(DayliteError):
    """A named calendar or an object locator did not match anything."""


class NoCalendarsError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("No calendars found. Is the CalDAV account configured correctly?")


class CalendarNotFoundError(NotFoundError):
    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f'Calendar "{name}" not found. Available: {", ".join(available)}')


class ObjectNotFoundError(NotFoundError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Object not found: {url}")


class UpstreamError(DayliteError):
    """A transport answered with a non-success HTTP status."""

    label = "Upstream error"

    def __init__(self, status_code: int | None, body: str = ""):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"{self.label}: {body}")
        else:
            super().__init__(f"{self.label} (HTTP {status_code}): {body}")


class CalDAVError(UpstreamError):
    label = "CalDAV error"


class DayliteAPIError(UpstreamError):
    label = "Daylite API error"


class CredentialError(DayliteError):
    """Every refresh-token exchange attempt failed."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or (
                "Token refresh failed with every available refresh token. "
                f"Generate a new personal token: {PERSONAL_TOKEN_HELP_URL}"
            )
        )
