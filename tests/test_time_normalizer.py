"""
Unit tests for time-of-day normalization.
"""

from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from crossings.core.errors import TimestampUnparseable
from crossings.ingest.time_normalizer import (
    format_store_timestamp,
    normalize_timestamp,
    parse_time_of_day,
    resolve_time_of_day,
)

NEW_YORK = ZoneInfo("America/New_York")


class TestParseTimeOfDay:
    def test_twelve_hour_format(self):
        assert parse_time_of_day("11:45 PM") == time(23, 45)
        assert parse_time_of_day("9:05 AM") == time(9, 5)
        assert parse_time_of_day("12:00 AM") == time(0, 0)

    def test_meridiem_case_and_padding(self):
        assert parse_time_of_day(" 11:45 pm ") == time(23, 45)

    @pytest.mark.parametrize("value", [None, "", "23:45", "25:10 PM", "noon", 1145])
    def test_rejects_malformed(self, value):
        with pytest.raises(TimestampUnparseable):
            parse_time_of_day(value)


class TestResolveTimeOfDay:
    """Anchoring a wall-clock time to an absolute UTC minute."""

    def test_rolls_back_after_new_york_midnight_boundary(self, reference):
        # Reference is 19:10 EST on Jan 1; 11:45 PM that day is still ahead
        result = resolve_time_of_day("11:45 PM", reference, NEW_YORK)
        assert format_store_timestamp(result) == "2024-01-01 04:45:00+00"

    def test_past_time_stays_on_reference_day(self, reference):
        result = resolve_time_of_day("6:30 PM", reference, NEW_YORK)
        assert format_store_timestamp(result) == "2024-01-01 23:30:00+00"

    def test_rollback_is_exactly_one_day(self, reference):
        local_reference = reference.astimezone(NEW_YORK)
        naive = datetime.combine(
            local_reference.date(), time(23, 45), tzinfo=NEW_YORK
        ).astimezone(timezone.utc)

        result = resolve_time_of_day("11:45 PM", reference, NEW_YORK)
        assert naive - result == timedelta(hours=24)

    def test_uses_daylight_offset_in_summer(self):
        # 23:10 EDT on Jul 1
        reference = datetime(2024, 7, 2, 3, 10, tzinfo=timezone.utc)
        result = resolve_time_of_day("11:45 PM", reference, NEW_YORK)
        assert format_store_timestamp(result) == "2024-07-01 03:45:00+00"

    def test_same_minute_is_not_in_the_future(self):
        reference = datetime(2024, 1, 2, 0, 10, 30, tzinfo=timezone.utc)
        result = resolve_time_of_day("7:10 PM", reference, NEW_YORK)
        assert result == datetime(2024, 1, 2, 0, 10, tzinfo=timezone.utc)

    def test_truncates_to_minute(self, reference):
        result = resolve_time_of_day("6:30 PM", reference, NEW_YORK)
        assert result.second == 0 and result.microsecond == 0
        assert result.tzinfo == timezone.utc

    def test_repeated_fall_back_hour_compares_instants(self):
        # 1:40 EST on Nov 3, the second pass through 1 AM; 1:50 EDT already happened
        reference = datetime(2024, 11, 3, 6, 40, tzinfo=timezone.utc)
        result = resolve_time_of_day("1:50 AM", reference, NEW_YORK)
        assert result == datetime(2024, 11, 3, 5, 50, tzinfo=timezone.utc)
        assert result <= reference

    def test_fall_back_day_still_rolls_back_future_times(self):
        reference = datetime(2024, 11, 3, 6, 40, tzinfo=timezone.utc)
        result = resolve_time_of_day("3:00 AM", reference, NEW_YORK)
        assert format_store_timestamp(result) == "2024-11-02 07:00:00+00"

    def test_naive_reference_is_treated_as_utc(self, reference):
        naive = reference.replace(tzinfo=None)
        assert resolve_time_of_day("11:45 PM", naive, NEW_YORK) == resolve_time_of_day(
            "11:45 PM", reference, NEW_YORK
        )


class TestNormalizeTimestamp:
    def test_malformed_yields_none(self, reference):
        assert normalize_timestamp("not a time", reference, NEW_YORK) is None
        assert normalize_timestamp(None, reference, NEW_YORK) is None

    def test_valid_matches_resolve(self, reference):
        assert normalize_timestamp("6:30 PM", reference, NEW_YORK) == resolve_time_of_day(
            "6:30 PM", reference, NEW_YORK
        )


class TestFormatStoreTimestamp:
    def test_converts_to_utc(self):
        value = datetime(2024, 1, 1, 18, 45, tzinfo=NEW_YORK)
        assert format_store_timestamp(value) == "2024-01-01 23:45:00+00"

    def test_naive_values_are_utc(self):
        # SQLite hands back naive datetimes
        assert format_store_timestamp(datetime(2024, 1, 1, 23, 45, 12)) == (
            "2024-01-01 23:45:00+00"
        )
