"""
Credential specification shared by every Daylite tool group.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CredentialSpec:
    """Describes one environment-supplied credential and the tools that need it."""

    env_var: str
    tools: list[str] = field(default_factory=list)
    description: str = ""
    instructions: str = ""
