"""
Credential registry for the Daylite tools.
"""

from .base import CredentialSpec
from .daylite import CALDAV_TOOLS, DAYLITE_CREDENTIALS, REST_TOOLS

CREDENTIAL_SPECS: dict[str, CredentialSpec] = {
    **DAYLITE_CREDENTIALS,
}


def specs_for_tool(tool_name: str) -> list[CredentialSpec]:
    """Return every credential spec that lists the given tool."""
    return [spec for spec in CREDENTIAL_SPECS.values() if tool_name in spec.tools]


def missing_credentials_error(tool_name: str) -> dict[str, str]:
    """Error dict returned by a tool whose credentials are not configured."""
    specs = specs_for_tool(tool_name)
    env_vars = " and ".join(spec.env_var for spec in specs)
    help_text = specs[0].instructions if specs else ""
    return {
        "error": f"Daylite credentials not configured for {tool_name}",
        "help": f"Set {env_vars} environment variable(s).\n{help_text}".strip(),
    }


__all__ = [
    "CALDAV_TOOLS",
    "CREDENTIAL_SPECS",
    "CredentialSpec",
    "DAYLITE_CREDENTIALS",
    "REST_TOOLS",
    "missing_credentials_error",
    "specs_for_tool",
]
