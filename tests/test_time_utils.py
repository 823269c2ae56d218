"""Tests for clock arithmetic helpers."""

from datetime import date, datetime, timezone

import pytest

from app.core.exceptions import InvalidArgumentError
from app.utils.time_utils import (
    add_duration,
    business_today,
    combine_business_datetime,
    minutes_to_time,
    overlaps,
    parse_date,
    time_to_minutes,
    window_end_to_minutes,
)


class TestTimeConversion:
    def test_time_to_minutes(self):
        assert time_to_minutes("00:00") == 0
        assert time_to_minutes("09:30") == 570
        assert time_to_minutes("23:59") == 1439

    def test_minutes_to_time_is_zero_padded(self):
        assert minutes_to_time(0) == "00:00"
        assert minutes_to_time(65) == "01:05"

    def test_round_trip_every_minute_of_the_day(self):
        for hour in range(24):
            for minute in range(60):
                value = f"{hour:02d}:{minute:02d}"
                assert minutes_to_time(time_to_minutes(value)) == value

    @pytest.mark.parametrize("value", ["24:00", "12:60", "9-30", "", "ab:cd", "12:30:00", None])
    def test_invalid_times_rejected(self, value):
        with pytest.raises(InvalidArgumentError):
            time_to_minutes(value)

    @pytest.mark.parametrize("minutes", [-1, 1440, 5000])
    def test_minutes_out_of_day_rejected(self, minutes):
        with pytest.raises(InvalidArgumentError):
            minutes_to_time(minutes)

    def test_window_end_accepts_end_of_day(self):
        assert window_end_to_minutes("24:00") == 1440
        assert window_end_to_minutes("18:30") == 1110
        with pytest.raises(InvalidArgumentError):
            window_end_to_minutes("24:30")

    def test_add_duration(self):
        assert add_duration("09:00", 45) == "09:45"
        with pytest.raises(InvalidArgumentError):
            add_duration("23:30", 30)


class TestOverlap:
    def test_back_to_back_intervals_do_not_overlap(self):
        assert not overlaps("09:00", "10:00", "10:00", "11:00")
        assert not overlaps("10:00", "11:00", "09:00", "10:00")

    def test_partial_and_containing_overlap(self):
        assert overlaps("09:30", "10:30", "10:00", "11:00")
        assert overlaps("09:00", "12:00", "10:00", "11:00")


class TestDates:
    def test_parse_date(self):
        assert parse_date("2026-01-25") == date(2026, 1, 25)
        assert parse_date(date(2026, 1, 25)) == date(2026, 1, 25)
        assert parse_date(datetime(2026, 1, 25, 8, 0)) == date(2026, 1, 25)

    @pytest.mark.parametrize("value", ["25/01/2026", "2026-13-01", "", None])
    def test_parse_date_rejects_bad_input(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_date(value)

    def test_business_today_uses_fixed_offset(self):
        # 02:00 UTC is still the previous day at UTC-3
        now = datetime(2026, 3, 10, 2, 0, tzinfo=timezone.utc)
        assert business_today(now) == date(2026, 3, 9)

    def test_combine_business_datetime(self):
        value = combine_business_datetime(date(2026, 3, 10), "09:00")
        assert value.astimezone(timezone.utc) == datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
