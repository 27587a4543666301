"""Shared fixtures for icsproxy tests."""

from collections.abc import AsyncIterator, Generator
from typing import Any

import pytest

from icsproxy.core.http_client import close_all_clients


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Tests exercising the HTTP application")


@pytest.fixture(autouse=True)
def clean_proxy_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Remove ICSPROXY_* and legacy variables so host settings cannot leak into tests."""
    for name in (
        "ICSPROXY_SOURCE_URL",
        "SOURCE_ICS_URL",
        "ICSPROXY_TARGET_TZ",
        "TARGET_TZ",
        "ICSPROXY_OVERRIDE",
        "ICSPROXY_WEB_HOST",
        "ICSPROXY_WEB_PORT",
        "PORT",
        "ICSPROXY_CACHE_MAX_AGE",
        "ICSPROXY_REQUEST_TIMEOUT",
        "ICSPROXY_LOG_LEVEL",
        "ICSPROXY_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
async def cleanup_shared_http_clients() -> AsyncIterator[None]:
    """Close shared httpx clients after every test to prevent resource leaks."""
    yield
    await close_all_clients()


# ==================== ICS Test Data Fixtures ====================


@pytest.fixture
def outlook_ics() -> str:
    """
    Return a typical Outlook-published feed (CRLF line endings).

    Contents:
        - Outlook PRODID and a Windows-named VTIMEZONE block
        - A UTC event with attendees, a VALARM and an X- property
        - A Windows-TZID event at 09:00 "W. Europe Standard Time"
        - An all-day event
    """
    lines = [
        "BEGIN:VCALENDAR",
        "PRODID:-//Microsoft Corporation//Outlook 16.0 MIMEDIR//EN",
        "VERSION:2.0",
        "METHOD:PUBLISH",
        "BEGIN:VTIMEZONE",
        "TZID:W. Europe Standard Time",
        "BEGIN:STANDARD",
        "DTSTART:16010101T030000",
        "TZOFFSETFROM:+0200",
        "TZOFFSETTO:+0100",
        "RRULE:FREQ=YEARLY;BYDAY=-1SU;BYMONTH=10",
        "END:STANDARD",
        "BEGIN:DAYLIGHT",
        "DTSTART:16010101T020000",
        "TZOFFSETFROM:+0100",
        "TZOFFSETTO:+0200",
        "RRULE:FREQ=YEARLY;BYDAY=-1SU;BYMONTH=3",
        "END:DAYLIGHT",
        "END:VTIMEZONE",
        "BEGIN:VEVENT",
        "SUMMARY:Team Meeting",
        "X-MICROSOFT-CDO-BUSYSTATUS:BUSY",
        "ATTENDEE;CN=Alice:mailto:alice@example.com",
        "DTEND:20240115T110000Z",
        "ATTENDEE;CN=Bob:mailto:bob@example.com",
        "DTSTART:20240115T100000Z",
        "UID:event-001@example.com",
        "BEGIN:VALARM",
        "ACTION:DISPLAY",
        "TRIGGER:-PT15M",
        "END:VALARM",
        "DTSTAMP:20240110T080000Z",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:event-002@example.com",
        "DTSTART;TZID=W. Europe Standard Time:20240716T090000",
        "DTEND;TZID=W. Europe Standard Time:20240716T100000",
        "SUMMARY:Local standup",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:event-003@example.com",
        "DTSTART;VALUE=DATE:20240120",
        "DTEND;VALUE=DATE:20240121",
        "SUMMARY:Holiday",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"


@pytest.fixture
def all_day_ics() -> str:
    """
    Return a canonical document that the transform must leave byte-identical.

    Already Google PRODID, Europe/Zurich VTIMEZONE, one all-day event in
    canonical field order.
    """
    lines = [
        "BEGIN:VCALENDAR",
        "PRODID:-//Google Inc//Google Calendar 70.9054//EN",
        "VERSION:2.0",
        "BEGIN:VTIMEZONE",
        "TZID:Europe/Zurich",
        "X-LIC-LOCATION:Europe/Zurich",
        "END:VTIMEZONE",
        "BEGIN:VEVENT",
        "UID:holiday@example.com",
        "DTSTART;VALUE=DATE:20240801",
        "DTEND;VALUE=DATE:20240802",
        "SUMMARY:National Day",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"
