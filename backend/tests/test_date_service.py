"""
Tests for DateService and WeeklyWindow.

Tests cover:
1. Day keys from datetimes, ISO strings and epoch milliseconds
2. Day key arithmetic across month and year boundaries
3. Window slot lookup at the window edges
4. Chart labels
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from backend.services.date_service import DateService, WeeklyWindow
from backend.exceptions import InvalidTimestampException


class TestDayKey:
    """Tests for day_key and to_local_datetime"""

    def test_naive_datetime(self):
        assert DateService.day_key(datetime(2024, 6, 10, 23, 59, 59)) == "2024-06-10"

    def test_midnight_belongs_to_new_day(self):
        assert DateService.day_key(datetime(2024, 6, 11, 0, 0, 0)) == "2024-06-11"

    def test_date_object(self):
        assert DateService.day_key(date(2024, 2, 29)) == "2024-02-29"

    def test_naive_iso_string(self):
        assert DateService.day_key("2024-06-10T08:30:00") == "2024-06-10"

    def test_utc_iso_string_uses_local_calendar(self):
        """Trailing Z is accepted and converted to the local day"""
        value = "2024-06-10T12:00:00Z"
        expected = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc).astimezone().strftime("%Y-%m-%d")

        assert DateService.day_key(value) == expected

    def test_aware_datetime_converted_to_local(self):
        value = datetime(2024, 6, 10, 12, 0, tzinfo=timezone(timedelta(hours=5)))

        result = DateService.to_local_datetime(value)

        assert result.tzinfo is None
        assert result == value.astimezone().replace(tzinfo=None)

    def test_epoch_milliseconds(self):
        local = datetime(2024, 6, 10, 9, 15)
        millis = int(local.timestamp() * 1000)

        assert DateService.day_key(millis) == "2024-06-10"

    @pytest.mark.parametrize("value", [None, "", "not a date", "2024-13-01", True, object()])
    def test_invalid_values_raise(self, value):
        with pytest.raises(InvalidTimestampException):
            DateService.day_key(value)


class TestDayArithmetic:
    """Tests for add_days, parse_day_key and week_start"""

    def test_add_days_crosses_month(self):
        assert DateService.add_days("2024-06-01", -1) == "2024-05-31"

    def test_add_days_crosses_year(self):
        assert DateService.add_days("2023-12-31", 1) == "2024-01-01"

    def test_add_days_leap_year(self):
        assert DateService.add_days("2024-02-28", 1) == "2024-02-29"

    def test_parse_day_key_rejects_garbage(self):
        with pytest.raises(ValueError):
            DateService.parse_day_key("06/10/2024")

    def test_week_start_is_midnight_six_days_back(self, now):
        assert DateService.week_start(now) == datetime(2024, 6, 4, 0, 0, 0)

    def test_get_day_range(self):
        start, end = DateService.get_day_range(date(2024, 6, 10))

        assert start == datetime(2024, 6, 10, 0, 0)
        assert end == datetime(2024, 6, 11, 0, 0)


class TestWeeklyWindow:
    """Tests for the trailing 7-day window"""

    def test_day_keys_end_today(self, now):
        window = WeeklyWindow(now)

        assert window.day_keys == [
            "2024-06-04", "2024-06-05", "2024-06-06", "2024-06-07",
            "2024-06-08", "2024-06-09", "2024-06-10",
        ]
        assert window.today_key == "2024-06-10"
        assert len(window) == 7

    def test_start_is_local_midnight(self, now):
        assert WeeklyWindow(now).start == datetime(2024, 6, 4, 0, 0)

    def test_index_for_first_and_last_slot(self, now):
        window = WeeklyWindow(now)

        assert window.index_for(datetime(2024, 6, 4, 0, 0, 0)) == 0
        assert window.index_for(datetime(2024, 6, 10, 23, 59, 59)) == 6

    def test_index_for_outside_window(self, now):
        window = WeeklyWindow(now)

        assert window.index_for(datetime(2024, 6, 3, 23, 59, 59)) == -1
        assert window.index_for(datetime(2024, 6, 11, 0, 0, 0)) == -1

    def test_index_for_missing_or_invalid(self, now):
        window = WeeklyWindow(now)

        assert window.index_for(None) == -1
        assert window.index_for("garbage") == -1

    def test_window_spans_month_boundary(self):
        window = WeeklyWindow(datetime(2024, 3, 2, 10, 0))

        assert window.day_keys[0] == "2024-02-25"
        assert window.index_for(datetime(2024, 2, 29, 12, 0)) == 4

    def test_labels(self, now):
        labels = WeeklyWindow(now).labels()

        assert labels[0] == "Tue 6/4"
        assert labels[-1] == "Mon 6/10"
        assert len(labels) == 7
