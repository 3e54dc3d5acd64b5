"""
iCalendar (RFC 5545) micro-parser and patcher.

Reads and rewrites single properties inside raw VEVENT/VTODO text without a
full parser. Updates are applied as targeted line substitutions on the
original text, so properties this module does not know about survive a
round trip untouched.

Reading:
- get_property: first value of a scalar property, or None when absent
- get_all_properties / get_attendees: every value of a repeatable property

Writing:
- build_event / build_todo: new VCALENDAR blocks with CRLF line endings
- set_property: replace a property line, or insert it before the END line
- apply_event_changes / apply_task_changes / mark_completed: field-level edits
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import UTC, datetime

from .models import CalendarEvent, TaskItem

CRLF = "\r\n"
PRODID = "-//Daylite MCP Server//EN"
NO_TITLE = "(No title)"

_FOLD_RE = re.compile(r"\r?\n[ \t]")
_LINE_BREAK_RE = re.compile(r"\r?\n")
_FRACTION_RE = re.compile(r"\.\d+")
_DATE_PUNCTUATION_RE = re.compile(r"[-:T]")
_TEXT_ESCAPE_RE = re.compile(r"\\([\\;,nN])")


# --- Reading ---


def unfold(text: str) -> str:
    """Join continuation lines (a line break followed by a space or tab)."""
    return _FOLD_RE.sub("", text)


def _lines(text: str) -> list[str]:
    lines = _LINE_BREAK_RE.split(unfold(text))
    while lines and not lines[-1]:
        lines.pop()
    return lines


def _split_value(rest: str) -> tuple[str, str] | None:
    """Split ';PARAM=x;PARAM2=y:VALUE' at the colon that ends the parameters."""
    in_quotes = False
    for idx, char in enumerate(rest):
        if char == '"':
            in_quotes = not in_quotes
        elif char == ":" and not in_quotes:
            return rest[1:idx], rest[idx + 1 :]
    return None


def _parse_line(line: str, name: str) -> tuple[str, str] | None:
    """Return (params, value) when the line holds the named property."""
    if line[: len(name)].upper() != name.upper():
        return None
    rest = line[len(name) :]
    if rest.startswith(":"):
        return "", rest[1:]
    if rest.startswith(";"):
        return _split_value(rest)
    return None


def _own_lines(lines: list[str], component: str | None) -> Iterator[tuple[int, str]]:
    """
    Yield (index, line) for the lines that belong directly to a component.

    Lines of nested components (VALARM inside VEVENT) and of sibling
    components (VTIMEZONE) are skipped. Without a component every line is
    yielded.
    """
    if component is None:
        yield from enumerate(lines)
        return

    begin = f"BEGIN:{component.upper()}"
    inside = False
    depth = 0
    for idx, line in enumerate(lines):
        upper = line.upper()
        if not inside:
            inside = upper == begin
            continue
        if upper.startswith("BEGIN:"):
            depth += 1
        elif upper.startswith("END:"):
            if depth == 0:
                return
            depth -= 1
        elif depth == 0:
            yield idx, line


def _end_index(lines: list[str], component: str) -> int | None:
    begin = f"BEGIN:{component.upper()}"
    inside = False
    depth = 0
    for idx, line in enumerate(lines):
        upper = line.upper()
        if not inside:
            inside = upper == begin
            continue
        if upper.startswith("BEGIN:"):
            depth += 1
        elif upper.startswith("END:"):
            if depth == 0:
                return idx
            depth -= 1
    return None


def _find(text: str, name: str, component: str | None = None) -> tuple[str, str] | None:
    for _, line in _own_lines(_lines(text), component):
        parsed = _parse_line(line, name)
        if parsed is not None:
            return parsed
    return None


def get_property(text: str, name: str, component: str | None = None) -> str | None:
    """
    Return the value of the first `name` property, or None when it is absent.

    Handles both `NAME:value` and `NAME;PARAM=x:value`. Folded lines are
    unfolded before the search.
    """
    found = _find(text, name, component)
    return found[1] if found is not None else None


def get_property_params(text: str, name: str, component: str | None = None) -> list[str]:
    """Return the parameters of the first `name` property (e.g. ['VALUE=DATE'])."""
    found = _find(text, name, component)
    if found is None or not found[0]:
        return []
    return found[0].split(";")


def get_all_properties(text: str, name: str, component: str | None = None) -> list[str]:
    """Return the value of every `name` property, in document order."""
    values = []
    for _, line in _own_lines(_lines(text), component):
        parsed = _parse_line(line, name)
        if parsed is not None:
            values.append(parsed[1])
    return values


def get_attendees(text: str, component: str | None = None) -> list[str]:
    """Return attendee addresses with any leading mailto: scheme removed."""
    attendees = []
    for value in get_all_properties(text, "ATTENDEE", component):
        if value[:7].lower() == "mailto:":
            value = value[7:]
        attendees.append(value)
    return attendees


def is_all_day(text: str, component: str | None = "VEVENT") -> bool:
    """True when DTSTART is a date-only value or carries VALUE=DATE."""
    found = _find(text, "DTSTART", component)
    if found is None:
        return False
    params, value = found
    return len(value) == 8 or any(p.upper() == "VALUE=DATE" for p in params.split(";"))


def _unescape_char(match: re.Match[str]) -> str:
    char = match.group(1)
    return "\n" if char in "nN" else char


def unescape_text(value: str | None) -> str | None:
    """Decode TEXT escapes in one pass, so '\\\\n' stays a backslash and an n."""
    if value is None:
        return None
    return _TEXT_ESCAPE_RE.sub(_unescape_char, value)


def _to_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_event(url: str, etag: str | None, data: str | None) -> CalendarEvent | None:
    """Materialize a CalendarEvent, or None when the text holds no VEVENT."""
    if not data or "VEVENT" not in data:
        return None

    def prop(name: str) -> str | None:
        return get_property(data, name, "VEVENT")

    return CalendarEvent(
        uid=prop("UID") or "",
        url=url,
        etag=etag or None,
        summary=unescape_text(prop("SUMMARY")) or NO_TITLE,
        description=unescape_text(prop("DESCRIPTION")),
        location=unescape_text(prop("LOCATION")),
        dtstart=prop("DTSTART") or "",
        dtend=prop("DTEND"),
        all_day=is_all_day(data, "VEVENT"),
        status=prop("STATUS"),
        attendees=get_attendees(data, "VEVENT"),
        raw=data,
    )


def parse_task(url: str, etag: str | None, data: str | None) -> TaskItem | None:
    """Materialize a TaskItem, or None when the text holds no VTODO."""
    if not data or "VTODO" not in data:
        return None

    def prop(name: str) -> str | None:
        return get_property(data, name, "VTODO")

    return TaskItem(
        uid=prop("UID") or "",
        url=url,
        etag=etag or None,
        summary=unescape_text(prop("SUMMARY")) or NO_TITLE,
        description=unescape_text(prop("DESCRIPTION")),
        due=prop("DUE"),
        dtstart=prop("DTSTART"),
        priority=_to_int(prop("PRIORITY")),
        status=prop("STATUS"),
        percent_complete=_to_int(prop("PERCENT-COMPLETE")),
        completed=prop("COMPLETED"),
        raw=data,
    )


# --- Writing ---


def escape_text(value: str) -> str:
    """Encode a TEXT value; newlines become the two-character sequence \\n."""
    value = value.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,")
    return value.replace("\r\n", "\n").replace("\n", "\\n")


def to_ical_datetime(value: str, all_day: bool = False) -> str:
    """
    Convert ISO 8601 to the iCalendar basic format.

    '2025-06-15T10:00:00.000Z' -> '20250615T100000Z'
    '2025-06-15T10:00:00' with all_day -> '20250615'

    Timezone designators are passed through unchanged.
    """
    if all_day:
        return _DATE_PUNCTUATION_RE.sub("", value)[:8]
    return _FRACTION_RE.sub("", value.replace("-", "").replace(":", ""), count=1)


def ical_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp in the form used by DTSTAMP and COMPLETED."""
    moment = now or datetime.now(UTC)
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime("%Y%m%dT%H%M%SZ")


def _date_params(value: str, all_day: bool) -> str:
    return "VALUE=DATE" if all_day or len(value) == 8 else ""


def _prop_line(name: str, value: str, params: str = "") -> str:
    return f"{name};{params}:{value}" if params else f"{name}:{value}"


def _wrap(component: str, body: list[str]) -> str:
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        f"BEGIN:{component}",
        *body,
        f"END:{component}",
        "END:VCALENDAR",
    ]
    return CRLF.join(lines) + CRLF


def build_event(
    uid: str,
    summary: str,
    dtstart: str,
    dtend: str | None = None,
    *,
    description: str | None = None,
    location: str | None = None,
    all_day: bool = False,
    now: datetime | None = None,
) -> str:
    """Build a VCALENDAR holding one VEVENT; date-only values get VALUE=DATE."""
    start_value = to_ical_datetime(dtstart, all_day)
    body = [
        f"UID:{uid}",
        _prop_line("DTSTART", start_value, _date_params(start_value, all_day)),
    ]
    if dtend:
        end_value = to_ical_datetime(dtend, all_day)
        body.append(_prop_line("DTEND", end_value, _date_params(end_value, all_day)))
    body.append(f"SUMMARY:{escape_text(summary)}")
    if description:
        body.append(f"DESCRIPTION:{escape_text(description)}")
    if location:
        body.append(f"LOCATION:{escape_text(location)}")
    body.append(f"DTSTAMP:{ical_timestamp(now)}")
    return _wrap("VEVENT", body)


def build_todo(
    uid: str,
    summary: str,
    *,
    description: str | None = None,
    due: str | None = None,
    priority: int | None = None,
    now: datetime | None = None,
) -> str:
    """Build a VCALENDAR holding one VTODO with STATUS:NEEDS-ACTION."""
    body = [f"UID:{uid}"]
    if due:
        due_value = to_ical_datetime(due)
        body.append(_prop_line("DUE", due_value, _date_params(due_value, False)))
    body.append(f"SUMMARY:{escape_text(summary)}")
    body.append("STATUS:NEEDS-ACTION")
    if description:
        body.append(f"DESCRIPTION:{escape_text(description)}")
    if priority is not None:
        body.append(f"PRIORITY:{priority}")
    body.append(f"DTSTAMP:{ical_timestamp(now)}")
    return _wrap("VTODO", body)


def _detect_component(lines: list[str]) -> str:
    for line in lines:
        upper = line.upper()
        if upper in ("BEGIN:VEVENT", "BEGIN:VTODO"):
            return upper[len("BEGIN:") :]
    raise ValueError("iCalendar data holds neither a VEVENT nor a VTODO")


def set_property(
    text: str,
    name: str,
    value: str,
    params: str = "",
    component: str | None = None,
) -> str:
    """
    Set a property on the object's own lines.

    The first line holding `name` (whatever its parameters) is replaced;
    when there is none, the new line goes immediately before END:<component>.
    The result is unfolded and uses CRLF line endings.
    """
    lines = _lines(text)
    component = component or _detect_component(lines)
    new_line = _prop_line(name, value, params)

    for idx, line in _own_lines(lines, component):
        if _parse_line(line, name) is not None:
            lines[idx] = new_line
            break
    else:
        end = _end_index(lines, component)
        if end is None:
            raise ValueError(f"iCalendar data has no END:{component} line")
        lines.insert(end, new_line)

    return CRLF.join(lines) + CRLF


def apply_event_changes(
    text: str,
    *,
    summary: str | None = None,
    dtstart: str | None = None,
    dtend: str | None = None,
    description: str | None = None,
    location: str | None = None,
    all_day: bool | None = None,
) -> str:
    """
    Patch the given VEVENT fields in place; None leaves a field alone.

    An explicit all_day also converts whichever of DTSTART/DTEND is not
    being replaced, so both ends always agree on date vs date-time.
    """
    retype = all_day is not None
    if all_day is None:
        all_day = is_all_day(text, "VEVENT")

    if summary is not None:
        text = set_property(text, "SUMMARY", escape_text(summary), component="VEVENT")
    if description is not None:
        text = set_property(text, "DESCRIPTION", escape_text(description), component="VEVENT")
    if location is not None:
        text = set_property(text, "LOCATION", escape_text(location), component="VEVENT")
    for name, new_value in (("DTSTART", dtstart), ("DTEND", dtend)):
        if new_value is not None:
            value = to_ical_datetime(new_value, all_day)
            text = set_property(
                text, name, value, _date_params(value, all_day), component="VEVENT"
            )
        elif retype:
            text = _retype_date_property(text, name, all_day)
    return text


def _retype_date_property(text: str, name: str, all_day: bool) -> str:
    """Rewrite an existing DATE / DATE-TIME property as the other kind."""
    found = _find(text, name, "VEVENT")
    if found is None:
        return text
    params, value = found
    kept = [
        param
        for param in params.split(";")
        if param
        and not param.upper().startswith("VALUE=")
        and not (all_day and param.upper().startswith("TZID="))
    ]
    if all_day:
        value = to_ical_datetime(value, True)
        kept.append("VALUE=DATE")
    elif len(value) == 8:
        value = f"{value}T000000"
    return set_property(text, name, value, ";".join(kept), component="VEVENT")


def mark_completed(text: str, now: datetime | None = None) -> str:
    """STATUS:COMPLETED, COMPLETED:<now>, PERCENT-COMPLETE:100."""
    text = set_property(text, "STATUS", "COMPLETED", component="VTODO")
    text = set_property(text, "COMPLETED", ical_timestamp(now), component="VTODO")
    return set_property(text, "PERCENT-COMPLETE", "100", component="VTODO")


def apply_task_changes(
    text: str,
    *,
    summary: str | None = None,
    description: str | None = None,
    due: str | None = None,
    priority: int | None = None,
    status: str | None = None,
    completed: bool = False,
    now: datetime | None = None,
) -> str:
    """Patch the given VTODO fields in place; completed=True wins over status."""
    if summary is not None:
        text = set_property(text, "SUMMARY", escape_text(summary), component="VTODO")
    if description is not None:
        text = set_property(text, "DESCRIPTION", escape_text(description), component="VTODO")
    if due is not None:
        due_value = to_ical_datetime(due)
        text = set_property(
            text, "DUE", due_value, _date_params(due_value, False), component="VTODO"
        )
    if priority is not None:
        text = set_property(text, "PRIORITY", str(priority), component="VTODO")
    if status is not None:
        text = set_property(text, "STATUS", status, component="VTODO")
    if completed:
        text = mark_completed(text, now)
    return text
