"""Classification and timezone rewriting of date-time property lines.

Rules, applied to DTSTART, DTEND, RECURRENCE-ID and EXDATE:
- VALUE=DATE (all-day) -> untouched
- trailing Z (UTC) -> converted to the target zone wall clock, TZID=target
- existing TZID -> untouched, or converted from that zone when overriding
- floating -> TZID=target attached, digits untouched

Any value that does not parse is left exactly as it came in.
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from icsproxy.calendar.content_line import ContentLine, get_param, param_key, parse_content_line
from icsproxy.core.timezone_utils import get_zone, resolve_source_zone

logger = logging.getLogger(__name__)

DATETIME_PROPERTIES = frozenset({"DTSTART", "DTEND", "RECURRENCE-ID", "EXDATE"})

_FORMAT_WITH_SECONDS = "%Y%m%dT%H%M%S"
_FORMAT_WITHOUT_SECONDS = "%Y%m%dT%H%M"
_WITH_SECONDS_RE = re.compile(r"^\d{8}T\d{6}$")
_WITHOUT_SECONDS_RE = re.compile(r"^\d{8}T\d{4}$")


class DateTimeClass(str, Enum):
    """Semantic class of a date-time property value."""

    ALL_DAY = "all_day"
    UTC = "utc"
    ZONED = "zoned"
    FLOATING = "floating"


@dataclass(frozen=True)
class TransformOptions:
    """Timezone policy for one transform call.

    Attributes:
        target_tz: IANA identifier every rewritten value ends up in
        override_existing: convert values that already carry a TZID
    """

    target_tz: str
    override_existing: bool = True


def is_datetime_line(line: str) -> bool:
    """Return True if ``line`` is one of the date-time bearing properties."""
    parsed = parse_content_line(line)
    return parsed is not None and parsed.name.upper() in DATETIME_PROPERTIES


def _is_all_day(params: list[str]) -> bool:
    return any(p.upper().replace(" ", "") == "VALUE=DATE" for p in params)


def _classify(parsed: ContentLine) -> DateTimeClass:
    if _is_all_day(parsed.params):
        return DateTimeClass.ALL_DAY
    if parsed.value.strip().endswith("Z"):
        return DateTimeClass.UTC
    if get_param(parsed.params, "TZID"):
        return DateTimeClass.ZONED
    return DateTimeClass.FLOATING


def classify_datetime_line(line: str) -> Optional[DateTimeClass]:
    """Classify a date-time property line.

    Returns:
        The value's DateTimeClass, or None if ``line`` is not a date-time property
    """
    parsed = parse_content_line(line)
    if parsed is None or parsed.name.upper() not in DATETIME_PROPERTIES:
        return None
    return _classify(parsed)


def _parse_digits(digits: str, tz: datetime.tzinfo) -> Optional[tuple[datetime.datetime, str]]:
    """Parse a basic-format date-time, returning the aware datetime and its format."""
    if _WITH_SECONDS_RE.match(digits):
        fmt = _FORMAT_WITH_SECONDS
    elif _WITHOUT_SECONDS_RE.match(digits):
        fmt = _FORMAT_WITHOUT_SECONDS
    else:
        return None
    try:
        naive = datetime.datetime.strptime(digits, fmt)
    except ValueError:
        return None
    return naive.replace(tzinfo=tz), fmt


def _convert_values(
    values: list[str], source: datetime.tzinfo, target: datetime.tzinfo
) -> Optional[list[str]]:
    converted = []
    for digits in values:
        parsed = _parse_digits(digits, source)
        if parsed is None:
            return None
        moment, fmt = parsed
        converted.append(moment.astimezone(target).strftime(fmt))
    return converted


def with_tzid(params: list[str], tzid: str) -> list[str]:
    """Drop any TZID parameter and insert ``TZID=tzid`` first, keeping the rest in order."""
    kept = [p for p in params if param_key(p) != "TZID"]
    return [f"TZID={tzid}", *kept]


def rewrite_datetime_line(line: str, options: TransformOptions) -> str:
    """Rewrite one date-time property line according to ``options``.

    Args:
        line: Unfolded property line
        options: Timezone policy

    Returns:
        The rewritten line, or ``line`` itself when no rewrite applies or the
        value cannot be parsed.
    """
    parsed = parse_content_line(line)
    if parsed is None or parsed.name.upper() not in DATETIME_PROPERTIES:
        return line

    kind = _classify(parsed)
    if kind is DateTimeClass.ALL_DAY:
        return line

    raw_values = [v.strip() for v in parsed.value.split(",")]
    zulu = [v.endswith("Z") for v in raw_values]
    if any(zulu) and not all(zulu):
        logger.debug("Mixed UTC and local values, leaving line unchanged: %s", line)
        return line

    if kind is DateTimeClass.UTC:
        source: datetime.tzinfo = datetime.UTC
    elif kind is DateTimeClass.ZONED:
        if not options.override_existing:
            return line
        source = resolve_source_zone(get_param(parsed.params, "TZID") or "")
    else:
        # Floating: the wall clock reading stays, only its zone is declared
        return ContentLine(
            parsed.name, with_tzid(parsed.params, options.target_tz), parsed.value
        ).render()

    target = get_zone(options.target_tz)
    if target is None:
        logger.debug("Target timezone %r unresolvable, leaving line unchanged", options.target_tz)
        return line

    digits = [v[:-1] if v.endswith("Z") else v for v in raw_values]
    converted = _convert_values(digits, source, target)
    if converted is None:
        logger.debug("Unparseable date-time value, leaving line unchanged: %s", line)
        return line

    return ContentLine(
        parsed.name, with_tzid(parsed.params, options.target_tz), ",".join(converted)
    ).render()
