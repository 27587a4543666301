"""VEVENT normalization: canonical field order and DESCRIPTION repair.

Google Calendar is picky about Outlook feeds in two ways this module deals
with: descriptions that end in a dangling escape or line break, and
properties in an unusual order. Nested components such as VALARM are kept
as opaque units and emitted after the event's own properties.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from icsproxy.calendar.content_line import field_name, find_value_separator

logger = logging.getLogger(__name__)

EVENT_FIELD_ORDER: tuple[str, ...] = (
    "UID",
    "DTSTAMP",
    "DTSTART",
    "DTEND",
    "DURATION",
    "RRULE",
    "RDATE",
    "EXDATE",
    "EXRULE",
    "RECURRENCE-ID",
    "SUMMARY",
    "DESCRIPTION",
    "LOCATION",
    "CLASS",
    "PRIORITY",
    "TRANSP",
    "STATUS",
    "SEQUENCE",
    "ORGANIZER",
    "ATTENDEE",
    "CREATED",
    "LAST-MODIFIED",
    "URL",
)

EXTENSION_PREFIX = "X-"

DESCRIPTION_FIRST_SEGMENT = 75
DESCRIPTION_CONTINUATION_SEGMENT = 74

_TRAILING_ESCAPE_RE = re.compile(r"\\\s*\Z")
_TRAILING_NEWLINE_RE = re.compile(r"\n\s*\Z")


@dataclass
class _Field:
    name: str
    lines: list[str] = field(default_factory=list)


def _is_continuation(line: str) -> bool:
    return line.startswith((" ", "\t")) or find_value_separator(line) == -1


def _marker(line: str) -> str:
    return line.strip().upper()


def _split_event(lines: list[str]) -> tuple[list[_Field], list[list[str]]]:
    """Group event lines into property fields and nested components."""
    fields: list[_Field] = []
    components: list[list[str]] = []
    nested: list[str] = []
    depth = 0

    for line in lines:
        marker = _marker(line)
        if depth:
            nested.append(line)
            if marker.startswith("BEGIN:"):
                depth += 1
            elif marker.startswith("END:"):
                depth -= 1
                if depth == 0:
                    components.append(nested)
                    nested = []
            continue

        if marker.startswith("BEGIN:"):
            depth = 1
            nested = [line]
            continue

        if _is_continuation(line):
            if fields:
                fields[-1].lines.append(line)
            else:
                logger.debug("Continuation line before any field in VEVENT: %r", line)
                fields.append(_Field(name="", lines=[line]))
            continue

        fields.append(_Field(name=field_name(line), lines=[line]))

    if nested:
        logger.warning("Unterminated %s inside VEVENT, keeping it as is", _marker(nested[0]))
        components.append(nested)

    return fields, components


def clean_description(text: str) -> str:
    """Strip a trailing escape continuation and stray trailing newlines."""
    text = _TRAILING_ESCAPE_RE.sub("", text)
    return _TRAILING_NEWLINE_RE.sub("", text)


def repair_description(lines: list[str]) -> list[str]:
    """Reassemble a (possibly folded) DESCRIPTION and re-segment it.

    Args:
        lines: The DESCRIPTION property line followed by its continuation lines

    Returns:
        Re-segmented lines (``PREFIX:`` + 75 characters, then a space + 74
        characters per continuation), or an empty list when the cleaned
        description is blank.
    """
    if not lines:
        return []

    first = lines[0]
    sep = find_value_separator(first)
    prefix = first[:sep] if sep != -1 else "DESCRIPTION"
    parts = [first[sep + 1 :] if sep != -1 else first]
    for line in lines[1:]:
        parts.append(line[1:] if line.startswith((" ", "\t")) else line)

    text = clean_description("".join(parts))
    if not text.strip():
        logger.debug("Dropping empty DESCRIPTION")
        return []

    repaired = [f"{prefix}:{text[:DESCRIPTION_FIRST_SEGMENT]}"]
    for idx in range(DESCRIPTION_FIRST_SEGMENT, len(text), DESCRIPTION_CONTINUATION_SEGMENT):
        repaired.append(" " + text[idx : idx + DESCRIPTION_CONTINUATION_SEGMENT])
    return repaired


def normalize_event(lines: list[str]) -> list[str]:
    """Normalize the body of one VEVENT.

    Args:
        lines: Lines between BEGIN:VEVENT and END:VEVENT (markers excluded)

    Returns:
        The body with fields in canonical order: known fields in
        EVENT_FIELD_ORDER, then other fields, then X- fields, then nested
        components. Repeated fields keep their relative order.
    """
    fields, components = _split_event(lines)

    canonical: dict[str, list[_Field]] = {name: [] for name in EVENT_FIELD_ORDER}
    others: list[_Field] = []
    extensions: list[_Field] = []

    for item in fields:
        if item.name.startswith(EXTENSION_PREFIX):
            extensions.append(item)
        elif item.name in canonical:
            canonical[item.name].append(item)
        else:
            others.append(item)

    result: list[str] = []
    for name in EVENT_FIELD_ORDER:
        for item in canonical[name]:
            if name == "DESCRIPTION":
                result.extend(repair_description(item.lines))
            else:
                result.extend(item.lines)
    for item in others:
        result.extend(item.lines)
    for item in extensions:
        result.extend(item.lines)
    for component in components:
        result.extend(component)
    return result
