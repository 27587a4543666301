"""VTIMEZONE block synthesis and placement.

The block is a fixed Central European style definition (last Sunday of March
and October, +0100/+0200). Google Calendar only needs a VTIMEZONE to be
present for the TZID the events reference; it resolves the actual rules from
the IANA name itself. This is not a timezone rule database.
"""

from __future__ import annotations

import logging
from typing import Optional

from icsproxy.calendar.content_line import parse_content_line

logger = logging.getLogger(__name__)

BEGIN_VTIMEZONE = "BEGIN:VTIMEZONE"
END_VTIMEZONE = "END:VTIMEZONE"
BEGIN_VEVENT = "BEGIN:VEVENT"


def build_vtimezone(tzid: str) -> list[str]:
    """Return the lines of a VTIMEZONE block declaring ``tzid``."""
    return [
        BEGIN_VTIMEZONE,
        f"TZID:{tzid}",
        f"X-LIC-LOCATION:{tzid}",
        "BEGIN:DAYLIGHT",
        "TZOFFSETFROM:+0100",
        "TZOFFSETTO:+0200",
        "TZNAME:GMT+2",
        "DTSTART:19700329T020000",
        "RRULE:FREQ=YEARLY;BYMONTH=3;BYDAY=-1SU",
        "END:DAYLIGHT",
        "BEGIN:STANDARD",
        "TZOFFSETFROM:+0200",
        "TZOFFSETTO:+0100",
        "TZNAME:GMT+1",
        "DTSTART:19701025T030000",
        "RRULE:FREQ=YEARLY;BYMONTH=10;BYDAY=-1SU",
        "END:STANDARD",
        END_VTIMEZONE,
    ]


def _marker(line: str) -> str:
    return line.strip().upper()


def declared_timezones(lines: list[str]) -> list[str]:
    """Return the TZID values declared by the VTIMEZONE blocks in ``lines``."""
    declared: list[str] = []
    inside = False
    for line in lines:
        marker = _marker(line)
        if marker == BEGIN_VTIMEZONE:
            inside = True
        elif marker == END_VTIMEZONE:
            inside = False
        elif inside:
            parsed = parse_content_line(line)
            if parsed is not None and parsed.name.upper() == "TZID":
                declared.append(parsed.value.strip().strip('"'))
    return declared


def _find_first_block(lines: list[str]) -> Optional[tuple[int, int]]:
    start = next((i for i, line in enumerate(lines) if _marker(line) == BEGIN_VTIMEZONE), None)
    if start is None:
        return None
    end = next(
        (i for i in range(start + 1, len(lines)) if _marker(lines[i]) == END_VTIMEZONE), None
    )
    if end is None:
        return start, -1
    return start, end


def integrate_vtimezone(lines: list[str], tzid: str) -> list[str]:
    """Make sure the document declares a VTIMEZONE for ``tzid``.

    If no block declares ``tzid`` already, the first VTIMEZONE block is
    replaced by the synthesized one; without any VTIMEZONE the block goes in
    front of the first VEVENT, or at the very end when there are no events.

    Args:
        lines: Logical lines of the transformed document
        tzid: Target timezone identifier

    Returns:
        A new list of lines; ``lines`` itself is not modified.
    """
    if tzid in declared_timezones(lines):
        logger.debug("VTIMEZONE for %s already present", tzid)
        return list(lines)

    block = build_vtimezone(tzid)
    found = _find_first_block(lines)
    if found is not None:
        start, end = found
        if end == -1:
            logger.warning("Unterminated VTIMEZONE block at line %d, not replacing it", start)
            return list(lines)
        logger.debug("Replacing VTIMEZONE block at lines %d-%d with %s", start, end, tzid)
        return [*lines[:start], *block, *lines[end + 1 :]]

    event_idx = next((i for i, line in enumerate(lines) if _marker(line) == BEGIN_VEVENT), None)
    if event_idx is None:
        logger.debug("No VEVENT found, appending VTIMEZONE for %s", tzid)
        return [*lines, *block]
    logger.debug("Inserting VTIMEZONE for %s before first VEVENT", tzid)
    return [*lines[:event_idx], *block, *lines[event_idx:]]
