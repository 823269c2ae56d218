# app/utils/time_utils.py
"""
Clock arithmetic on "HH:MM" strings and dates in the business offset.

Times are minutes since midnight of a single calendar day; nothing here
rolls over into the next day.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from app.config.settings import get_settings
from app.core.exceptions import InvalidArgumentError

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight."""
    if not isinstance(value, str):
        raise InvalidArgumentError(f"Invalid time: {value!r}")

    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise InvalidArgumentError(f"Invalid time format, expected HH:MM: {value!r}")

    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidArgumentError(f"Time out of range: {value!r}")

    return hours * 60 + minutes


def window_end_to_minutes(value: str) -> int:
    """Like time_to_minutes, but also accepts "24:00" as the end of the day."""
    if value == "24:00":
        return MINUTES_PER_DAY
    return time_to_minutes(value)


def minutes_to_time(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM"."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidArgumentError(f"Minutes out of range for a single day: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_duration(start: str, duration_minutes: int) -> str:
    """End time for an appointment starting at `start`."""
    return minutes_to_time(time_to_minutes(start) + duration_minutes)


def overlaps(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open overlap: back-to-back intervals do not overlap."""
    return (
        time_to_minutes(start_a) < time_to_minutes(end_b)
        and time_to_minutes(end_a) > time_to_minutes(start_b)
    )


def parse_date(value) -> date:
    """Accept a date or a "YYYY-MM-DD" string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Invalid date format, expected YYYY-MM-DD: {value!r}") from None


def business_timezone() -> timezone:
    return timezone(timedelta(hours=get_settings().BUSINESS_UTC_OFFSET_HOURS))


def business_now(now: Optional[datetime] = None) -> datetime:
    """Current wall-clock time in the business offset."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(business_timezone())


def business_today(now: Optional[datetime] = None) -> date:
    return business_now(now).date()


def combine_business_datetime(day: date, clock: str) -> datetime:
    """Aware datetime for a calendar day and "HH:MM" in the business offset."""
    minutes = time_to_minutes(clock)
    return datetime(
        day.year, day.month, day.day,
        minutes // 60, minutes % 60,
        tzinfo=business_timezone(),
    )
