"""Timezone name translation and resolution utilities for icsproxy."""

from __future__ import annotations

import datetime
import logging
import re
import zoneinfo
from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType

logger = logging.getLogger(__name__)

# Default target timezone when neither request nor config supplies one
DEFAULT_TARGET_TIMEZONE = "Europe/Zurich"

# Windows (Outlook/Exchange) timezone names to IANA identifier mapping.
# Western Europe entries resolve to Zurich since the upstream feeds are Swiss.
LEGACY_TZ_MAP: Mapping[str, str] = MappingProxyType(
    {
        # Western Europe
        "W. Europe Standard Time": "Europe/Zurich",
        "Romance Standard Time": "Europe/Zurich",
        "Central Europe Standard Time": "Europe/Zurich",
        "Central European Standard Time": "Europe/Zurich",
        # Other European zones
        "GMT Standard Time": "Europe/London",
        "E. Europe Standard Time": "Europe/Bucharest",
        "Russian Standard Time": "Europe/Moscow",
        # US
        "Eastern Standard Time": "America/New_York",
        "Central Standard Time": "America/Chicago",
        "Mountain Standard Time": "America/Denver",
        "Pacific Standard Time": "America/Los_Angeles",
    }
)

# Loose region/locality shape check; not a full IANA validation
_IANA_SHAPE_RE = re.compile(r"\w+/[-_A-Za-z0-9+]+")


def is_likely_iana(name: object) -> bool:
    """Return True if ``name`` looks like an IANA ``Region/Locality`` identifier.

    The check is intentionally loose (a search, not a full match), it only
    filters obvious garbage such as Windows names or empty strings.

    Examples:
        >>> is_likely_iana("Europe/Zurich")
        True
        >>> is_likely_iana("W. Europe Standard Time")
        False
    """
    if not isinstance(name, str):
        return False
    return _IANA_SHAPE_RE.search(name) is not None


def legacy_tz_to_iana(tz_name: str) -> str:
    """Translate a legacy (Windows) timezone name to its IANA equivalent.

    Unknown names are returned unchanged so callers can try them directly.

    Args:
        tz_name: Timezone name as found in a TZID parameter

    Returns:
        IANA identifier from LEGACY_TZ_MAP, or ``tz_name`` itself
    """
    return LEGACY_TZ_MAP.get(tz_name, tz_name)


@lru_cache(maxsize=64)
def get_zone(tz_name: str) -> zoneinfo.ZoneInfo | None:
    """Load a ZoneInfo for ``tz_name``, returning None if it cannot be resolved.

    Results are cached; ZoneInfo instances are immutable so sharing them across
    concurrent transforms is safe.
    """
    if not tz_name:
        return None
    try:
        return zoneinfo.ZoneInfo(tz_name)
    # OSError: names of tz directories such as America/Indiana
    except (zoneinfo.ZoneInfoNotFoundError, ValueError, OSError):
        logger.debug("Timezone %r could not be resolved", tz_name)
        return None


def resolve_source_zone(tz_name: str) -> datetime.tzinfo:
    """Resolve the zone a TZID-qualified wall clock value is expressed in.

    Resolution order:
      1. translate legacy names through LEGACY_TZ_MAP
      2. use the (translated) name directly if it looks like an IANA identifier
         and loads
      3. otherwise fall back to UTC

    Args:
        tz_name: Raw TZID parameter value (quotes already stripped)

    Returns:
        tzinfo to interpret the wall clock digits in
    """
    mapped = legacy_tz_to_iana(tz_name)
    if is_likely_iana(mapped):
        zone = get_zone(mapped)
        if zone is not None:
            return zone
    logger.debug("Source timezone %r (mapped to %r) unresolvable, using UTC", tz_name, mapped)
    return datetime.UTC
