"""
Helpers shared by the Daylite tool modules: error mapping and text formatting.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

import httpx

from ..errors import DayliteError

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_LIMIT = 50
ENTRY_SEPARATOR = "\n---\n"


def tool_error(tool_name: str, error: Exception) -> dict[str, str]:
    """Turn an exception raised inside a tool into the error dict it returns."""
    if isinstance(error, httpx.TimeoutException):
        logger.warning(f"{tool_name}: request timed out")
        return {"error": "Request timed out"}
    if isinstance(error, (httpx.RequestError, OSError)):
        logger.warning(f"{tool_name}: network error: {error}")
        return {"error": f"Network error: {error}"}
    if isinstance(error, DayliteError):
        logger.warning(f"{tool_name}: {error}")
        return {"error": str(error)}
    logger.exception(f"{tool_name}: unexpected error")
    return {"error": f"Unexpected error: {error}"}


def extract_id(self_url: str | None) -> str | None:
    """Record ID from a self reference such as /v1/contacts/1000."""
    if not self_url:
        return None
    return str(self_url).split("/")[-1] or None


def unwrap_items(data: Any, key: str | None = None) -> list[Any]:
    """Accept a bare list, {"data": [...]} or {key: [...]}; anything else is empty."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for candidate in ("data", key):
            if candidate and isinstance(data.get(candidate), list):
                return data[candidate]
    return []


def list_params(limit: int | None, offset: int | None) -> dict[str, int]:
    params = {}
    if limit:
        params["limit"] = limit
    if offset:
        params["offset"] = offset
    return params


def format_listing(
    items: list[Any],
    formatter: Callable[[Any], str],
    noun: str,
    limit: int | None = None,
) -> str:
    """Header with the total count, then each entry separated by ---."""
    display = items if limit else items[:DEFAULT_DISPLAY_LIMIT]
    header = f"{len(items)} {noun}"
    if len(display) < len(items):
        header += f" (showing first {len(display)})"
    return f"{header}:\n\n" + ENTRY_SEPARATOR.join(formatter(item) for item in display)


def display_name(item: dict[str, Any]) -> str:
    joined = " ".join(part for part in (item.get("first_name"), item.get("last_name")) if part)
    return item.get("name") or item.get("full_name") or joined or "(no name)"


def _entry_value(entry: Any, *keys: str) -> str:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        for key in keys:
            if entry.get(key):
                return str(entry[key])
    return ""


def format_labelled(entries: Iterable[Any], *keys: str) -> str:
    """Render email addresses or phone numbers as value (label) pairs."""
    parts = []
    for entry in entries:
        label = entry.get("label", "") if isinstance(entry, dict) else ""
        parts.append(f"{_entry_value(entry, *keys)} ({label or ''})")
    return ", ".join(parts)


def format_urls(entries: Iterable[Any]) -> str:
    return ", ".join(_entry_value(entry, "url", "address") for entry in entries)


def format_address(entries: list[Any]) -> str | None:
    if not entries or not isinstance(entries[0], dict):
        return None
    address = entries[0]
    return ", ".join(
        str(address[key]) for key in ("street", "postal_code", "city") if address.get(key)
    )


def format_roles(entries: Iterable[Any], key: str) -> str:
    """Linked records such as {"contact": "/v1/contacts/1", "role": "Owner"}."""
    return ", ".join(
        f"{entry.get(key)} ({entry.get('role') or ''})"
        for entry in entries
        if isinstance(entry, dict)
    )


def format_keywords(keywords: Iterable[Any]) -> str:
    return ", ".join(_entry_value(keyword, "name") for keyword in keywords)


def append_common_fields(lines: list[str], record: dict[str, Any]) -> None:
    """Keywords, flag and owner, shared by every REST record type."""
    if record.get("keywords"):
        lines.append(f"Keywords: {format_keywords(record['keywords'])}")
    if record.get("flagged"):
        lines.append("Flagged: yes")
    if record.get("owner"):
        lines.append(f"Owner: {record['owner']}")


def merge_entries(
    existing: list[Any] | None,
    value: str,
    key: str,
    *,
    match_keys: tuple[str, ...] | None = None,
    label: str = "work",
) -> list[Any]:
    """Append {key: value, "label": label} unless an entry already carries value."""
    entries = list(existing or [])
    keys = match_keys or (key,)
    if any(_entry_value(entry, *keys) == value for entry in entries):
        return entries
    return [*entries, {key: value, "label": label}]
