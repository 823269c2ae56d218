"""
Availability sources as a tagged union.

A day's schedule comes either from the weekly template or from an explicit
calendar date. Both carry time windows and a slot interval; the resolver
only needs `is_open` and the windows, whatever the kind.
"""
from datetime import date
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from app.utils.time_utils import time_to_minutes, window_end_to_minutes


class TimeWindow(BaseModel):
    """Open interval of a day, "HH:MM" to "HH:MM" with start < end; "24:00" closes the day"""
    start: str
    end: str

    @model_validator(mode="after")
    def check_order(self):
        if time_to_minutes(self.start) >= window_end_to_minutes(self.end):
            raise ValueError(f"Time window start must be before end: {self.start}-{self.end}")
        return self

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return window_end_to_minutes(self.end)


class _DaySchedule(BaseModel):
    time_windows: List[TimeWindow] = Field(default_factory=list)
    slot_interval_minutes: int = Field(30, gt=0)

    @property
    def is_open(self) -> bool:
        return bool(self.time_windows)


class WeeklyAvailability(_DaySchedule):
    kind: Literal["weekly"] = "weekly"
    day_of_week: int = Field(..., ge=0, le=6)  # 0=Monday
    is_available: bool = True

    @property
    def is_open(self) -> bool:
        return self.is_available and bool(self.time_windows)


class DatedAvailability(_DaySchedule):
    kind: Literal["dated"] = "dated"
    date: date


AvailabilitySource = Annotated[
    Union[WeeklyAvailability, DatedAvailability],
    Field(discriminator="kind"),
]


class ExceptionOverride(BaseModel):
    """Calendar exception applied on top of the resolved source"""
    type: Literal["blocked", "custom"]
    time_windows: List[TimeWindow] = Field(default_factory=list)
    reason: str = ""

    @field_validator("time_windows", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []
