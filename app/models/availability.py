# app/models/availability.py
"""
Availability configuration.

Two shapes of the same concept coexist: a weekly template keyed by weekday and
explicit calendar dates with their own windows. Calendar exceptions block a
date or replace its windows. The resolver turns rows into the tagged union in
app.schemas.availability.
"""
from sqlalchemy import Column, String, Integer, Boolean, Date, JSON, ForeignKey, UniqueConstraint
import uuid
from app.models.base import Base


class AvailabilityRule(Base):
    """Weekly template: one row per business and weekday"""
    __tablename__ = "availability_rules"
    __table_args__ = (
        UniqueConstraint("business_id", "day_of_week", name="uq_availability_rule_day"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)

    day_of_week = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday
    is_available = Column(Boolean, default=True, nullable=False)
    time_windows = Column(JSON, default=list, nullable=False)  # [{"start": "09:00", "end": "13:00"}]
    slot_interval_minutes = Column(Integer, default=30, nullable=False)

    def to_source(self):
        from app.schemas.availability import WeeklyAvailability

        return WeeklyAvailability(
            day_of_week=self.day_of_week,
            is_available=self.is_available,
            time_windows=self.time_windows or [],
            slot_interval_minutes=self.slot_interval_minutes,
        )


class AvailabilityDate(Base):
    """Explicit calendar date with its own windows; wins over the weekly rule"""
    __tablename__ = "availability_dates"
    __table_args__ = (
        UniqueConstraint("business_id", "date", name="uq_availability_date"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)

    date = Column(Date, nullable=False, index=True)
    time_windows = Column(JSON, default=list, nullable=False)
    slot_interval_minutes = Column(Integer, default=30, nullable=False)

    def to_source(self):
        from app.schemas.availability import DatedAvailability

        return DatedAvailability(
            date=self.date,
            time_windows=self.time_windows or [],
            slot_interval_minutes=self.slot_interval_minutes,
        )


class CalendarException(Base):
    """Specific date overrides (holidays, time-off, special hours)"""
    __tablename__ = "calendar_exceptions"

    BLOCKED = "blocked"
    CUSTOM = "custom"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)

    date = Column(Date, nullable=False, index=True)
    type = Column(String(20), nullable=False)  # blocked, custom
    reason = Column(String, nullable=True)  # "Holiday", "Vacation", etc.
    time_windows = Column(JSON, nullable=True)  # custom only
