"""Tests for candidate start time generation."""

import pytest

from app.core.exceptions import InvalidArgumentError
from app.schemas.availability import TimeWindow
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.slot_generator import generate_start_times, slots_needed


def windows(*pairs):
    return [TimeWindow(start=start, end=end) for start, end in pairs]


class TestSlotsNeeded:
    def test_rounds_up(self):
        assert slots_needed(60, 30) == 2
        assert slots_needed(45, 30) == 2
        assert slots_needed(30, 30) == 1
        assert slots_needed(20, 30) == 1

    @pytest.mark.parametrize("duration,interval", [(0, 30), (60, 0), (-5, 30)])
    def test_rejects_non_positive(self, duration, interval):
        with pytest.raises(InvalidArgumentError):
            slots_needed(duration, interval)


class TestGenerateStartTimes:
    def test_block_must_fit_inside_window(self):
        result = generate_start_times(windows(("09:00", "12:00")), 30, 60)
        assert result == ["09:00", "09:30", "10:00", "10:30", "11:00"]

    def test_duration_rounded_to_grid(self):
        # 45 minutes occupies two 30 minute cells
        result = generate_start_times(windows(("09:00", "10:30")), 30, 45)
        assert result == ["09:00", "09:30"]

    def test_union_of_windows_is_sorted_and_deduplicated(self):
        result = generate_start_times(windows(("14:00", "15:00"), ("09:00", "10:00"), ("09:00", "10:00")), 30, 30)
        assert result == ["09:00", "09:30", "14:00", "14:30"]

    def test_block_never_spans_two_windows(self):
        result = generate_start_times(windows(("09:00", "10:00"), ("10:00", "11:00")), 30, 90)
        assert result == []

    def test_window_shorter_than_service(self):
        assert generate_start_times(windows(("09:00", "09:30")), 30, 60) == []

    def test_no_windows(self):
        assert generate_start_times([], 30, 60) == []

    def test_window_closing_at_midnight(self):
        assert TimeWindow(start="22:00", end="24:00").end_minutes == 1440
        # an appointment may not end at or past midnight
        assert generate_start_times(windows(("23:00", "24:00")), 30, 30) == ["23:00"]
        assert generate_start_times(windows(("23:00", "24:00")), 30, 60) == []

    def test_midnight_only_valid_as_window_end(self):
        with pytest.raises(InvalidArgumentError):
            TimeWindow(start="24:00", end="24:00")

    def test_invalid_window_rejected(self):
        with pytest.raises(ValueError):
            TimeWindow(start="12:00", end="09:00")


class TestFilterFree:
    def test_reference_scenario(self):
        candidates = generate_start_times(windows(("09:00", "12:00")), 30, 60)
        result = AvailabilityService.filter_free(candidates, [("10:00", "11:00")], 60)
        assert result == ["09:00", "11:00"]

    def test_nothing_booked(self):
        assert AvailabilityService.filter_free(["09:00", "09:30"], [], 30) == ["09:00", "09:30"]
