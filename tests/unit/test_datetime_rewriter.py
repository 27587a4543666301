"""Unit tests for date-time classification and timezone rewriting."""

import datetime
import zoneinfo

import pytest

from icsproxy.calendar.datetime_rewriter import (
    DateTimeClass,
    TransformOptions,
    classify_datetime_line,
    is_datetime_line,
    rewrite_datetime_line,
    with_tzid,
)

pytestmark = pytest.mark.unit

ZURICH = TransformOptions(target_tz="Europe/Zurich")
ZURICH_KEEP = TransformOptions(target_tz="Europe/Zurich", override_existing=False)


class TestClassification:
    """Tests for is_datetime_line() and classify_datetime_line()."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("DTSTART;VALUE=DATE:20240101", DateTimeClass.ALL_DAY),
            ("DTEND;VALUE=DATE;X-FOO=1:20240102", DateTimeClass.ALL_DAY),
            ("DTSTART:20240101T120000Z", DateTimeClass.UTC),
            ("DTSTART;TZID=Europe/Berlin:20240101T120000", DateTimeClass.ZONED),
            ("DTSTART:20240101T120000", DateTimeClass.FLOATING),
        ],
    )
    def test_classify_datetime_line(self, line: str, expected: DateTimeClass) -> None:
        assert classify_datetime_line(line) is expected

    def test_classify_when_not_datetime_property_then_none(self) -> None:
        assert classify_datetime_line("SUMMARY:20240101T120000Z") is None

    def test_is_datetime_line_covers_recurrence_fields(self) -> None:
        assert is_datetime_line("RECURRENCE-ID:20240101T120000Z")
        assert is_datetime_line("EXDATE:20240101T120000Z")
        assert is_datetime_line("dtend:20240101T120000Z")
        assert not is_datetime_line("DTSTAMP:20240101T120000Z")


class TestUtcValues:
    """Tests for UTC (trailing Z) values."""

    def test_rewrite_when_winter_utc_then_converted_to_cet(self) -> None:
        result = rewrite_datetime_line("DTSTART:20240101T120000Z", ZURICH)
        assert result == "DTSTART;TZID=Europe/Zurich:20240101T130000"

    def test_rewrite_when_summer_utc_then_converted_to_cest(self) -> None:
        result = rewrite_datetime_line("DTEND:20240716T120000Z", ZURICH)
        assert result == "DTEND;TZID=Europe/Zurich:20240716T140000"

    def test_rewrite_when_new_york_target_then_uses_target_offset(self) -> None:
        options = TransformOptions(target_tz="America/New_York")
        result = rewrite_datetime_line("DTSTART:20240101T120000Z", options)
        assert result == "DTSTART;TZID=America/New_York:20240101T070000"

    def test_rewrite_when_no_seconds_then_keeps_precision(self) -> None:
        result = rewrite_datetime_line("DTSTART:20240101T1200Z", ZURICH)
        assert result == "DTSTART;TZID=Europe/Zurich:20240101T1300"

    def test_rewrite_when_other_params_then_tzid_inserted_first(self) -> None:
        result = rewrite_datetime_line("DTSTART;X-FOO=bar:20240101T120000Z", ZURICH)
        assert result == "DTSTART;TZID=Europe/Zurich;X-FOO=bar:20240101T130000"

    def test_rewrite_when_override_disabled_then_utc_still_converted(self) -> None:
        result = rewrite_datetime_line("DTSTART:20240101T120000Z", ZURICH_KEEP)
        assert result == "DTSTART;TZID=Europe/Zurich:20240101T130000"

    def test_rewrite_preserves_the_instant(self) -> None:
        result = rewrite_datetime_line("DTSTART:20240330T233000Z", ZURICH)
        wall_clock = result.rsplit(":", 1)[1]

        local = datetime.datetime.strptime(wall_clock, "%Y%m%dT%H%M%S").replace(
            tzinfo=zoneinfo.ZoneInfo("Europe/Zurich")
        )
        assert local.astimezone(datetime.UTC) == datetime.datetime(
            2024, 3, 30, 23, 30, tzinfo=datetime.UTC
        )


class TestZonedValues:
    """Tests for values that already carry a TZID."""

    def test_rewrite_when_override_disabled_then_unchanged(self) -> None:
        line = "DTSTART;TZID=America/New_York:20240101T090000"
        assert rewrite_datetime_line(line, ZURICH_KEEP) == line

    def test_rewrite_when_iana_source_then_converted(self) -> None:
        result = rewrite_datetime_line("DTSTART;TZID=America/New_York:20240716T090000", ZURICH)
        assert result == "DTSTART;TZID=Europe/Zurich:20240716T150000"

    def test_rewrite_when_windows_source_then_mapped_and_converted(self) -> None:
        result = rewrite_datetime_line(
            "DTSTART;TZID=Eastern Standard Time:20240716T090000", ZURICH
        )
        assert result == "DTSTART;TZID=Europe/Zurich:20240716T150000"

    def test_rewrite_when_quoted_windows_source_then_mapped(self) -> None:
        result = rewrite_datetime_line(
            'DTSTART;TZID="Pacific Standard Time":20240101T090000', ZURICH
        )
        assert result == "DTSTART;TZID=Europe/Zurich:20240101T180000"

    def test_rewrite_when_source_equals_target_then_wall_clock_kept(self) -> None:
        result = rewrite_datetime_line(
            "DTSTART;TZID=W. Europe Standard Time:20240716T090000", ZURICH
        )
        assert result == "DTSTART;TZID=Europe/Zurich:20240716T090000"

    def test_rewrite_when_unknown_source_then_treated_as_utc(self) -> None:
        result = rewrite_datetime_line("DTSTART;TZID=Custom Zone:20240101T120000", ZURICH)
        assert result == "DTSTART;TZID=Europe/Zurich:20240101T130000"


class TestFloatingAndAllDay:
    """Tests for floating and all-day values."""

    def test_rewrite_when_floating_then_tzid_attached_digits_kept(self) -> None:
        result = rewrite_datetime_line("DTSTART:20240101T090000", ZURICH)
        assert result == "DTSTART;TZID=Europe/Zurich:20240101T090000"

    def test_rewrite_when_all_day_then_unchanged(self) -> None:
        line = "DTSTART;VALUE=DATE:20240101"
        assert rewrite_datetime_line(line, ZURICH) == line

    def test_rewrite_when_all_day_with_other_params_then_unchanged(self) -> None:
        line = "DTEND;X-FOO=1;VALUE=DATE:20240102"
        assert rewrite_datetime_line(line, ZURICH) == line


class TestMultiValueAndFailures:
    """Tests for EXDATE lists and unparseable values."""

    def test_rewrite_when_exdate_list_then_each_value_converted(self) -> None:
        result = rewrite_datetime_line("EXDATE:20240101T120000Z,20240708T120000Z", ZURICH)
        assert result == "EXDATE;TZID=Europe/Zurich:20240101T130000,20240708T140000"

    def test_rewrite_when_mixed_utc_and_local_then_unchanged(self) -> None:
        line = "EXDATE:20240101T120000Z,20240108T120000"
        assert rewrite_datetime_line(line, ZURICH) == line

    def test_rewrite_when_value_unparseable_then_unchanged(self) -> None:
        line = "DTSTART:2024-01-01T12:00:00Z"
        assert rewrite_datetime_line(line, ZURICH) == line

    def test_rewrite_when_impossible_date_then_unchanged(self) -> None:
        line = "DTSTART:20241345T120000Z"
        assert rewrite_datetime_line(line, ZURICH) == line

    def test_rewrite_when_target_unresolvable_then_utc_unchanged(self) -> None:
        line = "DTSTART:20240101T120000Z"
        options = TransformOptions(target_tz="Mars/Olympus_Mons")
        assert rewrite_datetime_line(line, options) == line

    def test_rewrite_when_not_datetime_property_then_unchanged(self) -> None:
        assert rewrite_datetime_line("SUMMARY:Lunch", ZURICH) == "SUMMARY:Lunch"


class TestWithTzid:
    """Tests for with_tzid()."""

    def test_with_tzid_replaces_existing_tzid(self) -> None:
        assert with_tzid(["X-A=1", 'TZID="Old"', "X-B=2"], "Europe/Zurich") == [
            "TZID=Europe/Zurich",
            "X-A=1",
            "X-B=2",
        ]
