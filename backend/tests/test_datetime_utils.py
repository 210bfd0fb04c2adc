"""
Tests for datetime utilities module.
"""
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from iqscalar.core.datetime_utils import (
    ensure_timezone_aware,
    parse_date_string,
    shift_date_string,
    today_string,
    utc_now,
)


class TestEnsureTimezoneAware:
    """Tests for ensure_timezone_aware function."""

    def test_naive_datetime_becomes_utc(self):
        result = ensure_timezone_aware(datetime(2024, 1, 15, 12, 30, 45))

        assert result.tzinfo == timezone.utc
        assert (result.year, result.month, result.day) == (2024, 1, 15)
        assert (result.hour, result.minute, result.second) == (12, 30, 45)

    def test_aware_datetime_returned_as_is(self):
        aware = datetime(2024, 1, 15, 12, 30, tzinfo=timezone(timedelta(hours=5)))
        assert ensure_timezone_aware(aware) is aware

    def test_none_raises(self):
        with pytest.raises(ValueError, match="cannot be None"):
            ensure_timezone_aware(None)

    def test_round_trip_through_isoformat(self):
        stamp = utc_now()
        assert ensure_timezone_aware(datetime.fromisoformat(stamp.isoformat())) == stamp


class TestUtcNow:
    def test_is_timezone_aware(self):
        assert utc_now().tzinfo == timezone.utc


class TestDateStrings:
    """Tests for YYYY-MM-DD calendar keys."""

    def test_today_string_uses_utc_date(self):
        late_evening = datetime(2024, 6, 10, 23, 59, tzinfo=timezone.utc)
        with patch("iqscalar.core.datetime_utils.utc_now", return_value=late_evening):
            assert today_string() == "2024-06-10"

    def test_parse(self):
        assert parse_date_string("2024-02-29") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["2024-02-30", "yesterday", "2024/06/10", ""])
    def test_parse_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_date_string(value)

    @pytest.mark.parametrize(
        "value,days,expected",
        [
            ("2024-06-10", -1, "2024-06-09"),
            ("2024-03-01", -1, "2024-02-29"),
            ("2023-12-31", 1, "2024-01-01"),
            ("2024-06-10", 0, "2024-06-10"),
            ("2024-06-10", -365, "2023-06-11"),
        ],
    )
    def test_shift(self, value, days, expected):
        assert shift_date_string(value, days) == expected
