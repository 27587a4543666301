"""Unit tests for icsproxy.calendar.content_line."""

import pytest

from icsproxy.calendar.content_line import (
    ContentLine,
    field_name,
    find_value_separator,
    get_param,
    param_value,
    parse_content_line,
)

pytestmark = pytest.mark.unit


class TestParseContentLine:
    """Tests for parse_content_line()."""

    def test_parse_when_simple_property_then_splits_name_and_value(self) -> None:
        assert parse_content_line("SUMMARY:Team sync") == ContentLine("SUMMARY", [], "Team sync")

    def test_parse_when_params_present_then_keeps_raw_params_in_order(self) -> None:
        parsed = parse_content_line("DTSTART;VALUE=DATE-TIME;TZID=Europe/Zurich:20240101T090000")

        assert parsed is not None
        assert parsed.name == "DTSTART"
        assert parsed.params == ["VALUE=DATE-TIME", "TZID=Europe/Zurich"]
        assert parsed.value == "20240101T090000"

    def test_parse_when_quoted_param_contains_colon_then_value_split_after_quotes(self) -> None:
        line = 'DTSTART;TZID="(UTC+01:00) Amsterdam; Berlin":20240101T090000'
        parsed = parse_content_line(line)

        assert parsed is not None
        assert parsed.params == ['TZID="(UTC+01:00) Amsterdam; Berlin"']
        assert parsed.value == "20240101T090000"

    def test_parse_when_value_contains_colons_then_only_first_separator_used(self) -> None:
        parsed = parse_content_line("URL:https://example.com:8443/x")

        assert parsed is not None
        assert parsed.value == "https://example.com:8443/x"

    def test_parse_when_no_separator_then_returns_none(self) -> None:
        assert parse_content_line("not a property") is None

    def test_render_when_parsed_then_round_trips(self) -> None:
        line = 'ATTENDEE;CN="Doe, Jane";ROLE=REQ-PARTICIPANT:mailto:jane@example.com'
        parsed = parse_content_line(line)

        assert parsed is not None
        assert parsed.render() == line


class TestFieldHelpers:
    """Tests for field_name() and parameter helpers."""

    def test_field_name_when_lowercase_then_uppercased(self) -> None:
        assert field_name("dtstart;tzid=UTC:20240101T000000") == "DTSTART"

    def test_field_name_when_no_separator_then_empty(self) -> None:
        assert field_name(" continuation") == ""

    def test_find_value_separator_when_only_quoted_colon_then_minus_one(self) -> None:
        assert find_value_separator('X;P="a:b"') == -1

    def test_param_value_strips_quotes(self) -> None:
        assert param_value('TZID="W. Europe Standard Time"') == "W. Europe Standard Time"

    def test_get_param_is_case_insensitive(self) -> None:
        assert get_param(["value=DATE", "tzid=Europe/Berlin"], "TZID") == "Europe/Berlin"

    def test_get_param_when_missing_then_none(self) -> None:
        assert get_param(["VALUE=DATE"], "TZID") is None
