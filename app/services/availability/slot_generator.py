# app/services/availability/slot_generator.py
"""
Slot Generation

Candidate start times are laid on the day's configured slot interval. A
start is accepted when the ceil(duration / interval) consecutive grid cells
beginning there all fall inside the same time window. The output is the
union over all windows, sorted; "HH:MM" is zero-padded so string order is
time order.
"""
import math
from typing import Iterable, List

from app.core.exceptions import InvalidArgumentError
from app.schemas.availability import TimeWindow
from app.utils.time_utils import MINUTES_PER_DAY, minutes_to_time


def slots_needed(duration_minutes: int, interval_minutes: int) -> int:
    """Number of consecutive grid cells a service occupies."""
    if interval_minutes <= 0:
        raise InvalidArgumentError(f"Slot interval must be positive, got {interval_minutes}")
    if duration_minutes <= 0:
        raise InvalidArgumentError(f"Service duration must be positive, got {duration_minutes}")
    return math.ceil(duration_minutes / interval_minutes)


def generate_start_times(
        windows: Iterable[TimeWindow],
        interval_minutes: int,
        duration_minutes: int
) -> List[str]:
    """
    Enumerate candidate start times for one day.

    Args:
        windows: the day's time windows (may overlap each other)
        interval_minutes: configured grid step
        duration_minutes: service duration

    Returns:
        Sorted, de-duplicated "HH:MM" start times.
    """
    block = slots_needed(duration_minutes, interval_minutes) * interval_minutes
    starts = set()

    for window in windows:
        current = window.start_minutes
        # appointments never run past midnight
        while current + block <= window.end_minutes and current + duration_minutes < MINUTES_PER_DAY:
            starts.add(minutes_to_time(current))
            current += interval_minutes

    return sorted(starts)
