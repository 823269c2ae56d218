# ===== app/services/availability/availability_service.py =====
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session, sessionmaker

from app.config.settings import get_settings
from app.core.exceptions import InactiveError, NotFoundError
from app.models.appointment import Appointment, AppointmentStatus
from app.models.availability import AvailabilityDate, AvailabilityRule, CalendarException
from app.models.service import Service
from app.schemas.availability import AvailabilitySource, ExceptionOverride, TimeWindow
from app.services.availability.slot_generator import generate_start_times
from app.utils.time_utils import add_duration, overlaps, parse_date
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DaySchedule:
    """Windows and grid step that apply to one business day"""
    windows: Tuple[TimeWindow, ...]
    interval_minutes: int
    source_kind: str


class AvailabilityService:
    """Turns a day's configured windows into bookable start times"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_available_slots(self, business_id: str, service_id: str, day) -> List[str]:
        """
        Bookable start times for (business, service, date).

        Reads run outside a write transaction: the result is display data
        that the appointment writer re-validates before inserting.
        """
        day = parse_date(day)
        session = self.session_factory()
        try:
            service = self.get_bookable_service(session, business_id, service_id)
            candidates = self.candidate_start_times(session, business_id, day, service.duration_minutes)
            if not candidates:
                return []

            booked = self.confirmed_intervals(session, business_id, day)
            slots = self.filter_free(candidates, booked, service.duration_minutes)

            logger.info(
                f"{len(slots)}/{len(candidates)} slots free for business {business_id} "
                f"service {service_id} on {day.isoformat()}"
            )
            return slots
        finally:
            session.close()

    @staticmethod
    def get_bookable_service(session: Session, business_id: str, service_id: str) -> Service:
        service = session.get(Service, service_id)
        if service is None or service.business_id != business_id:
            raise NotFoundError("Service not found")
        if not service.is_active:
            raise InactiveError("Service is inactive")
        return service

    @staticmethod
    def resolve_source(session: Session, business_id: str, day: date) -> Optional[AvailabilitySource]:
        """Explicit date entry first, weekly template for that weekday otherwise."""
        dated = session.query(AvailabilityDate).filter(
            AvailabilityDate.business_id == business_id,
            AvailabilityDate.date == day
        ).first()
        if dated is not None:
            return dated.to_source()

        rule = session.query(AvailabilityRule).filter(
            AvailabilityRule.business_id == business_id,
            AvailabilityRule.day_of_week == day.weekday()
        ).first()
        if rule is not None:
            return rule.to_source()

        return None

    @staticmethod
    def resolve_exception(session: Session, business_id: str, day: date) -> Optional[ExceptionOverride]:
        exception = session.query(CalendarException).filter(
            CalendarException.business_id == business_id,
            CalendarException.date == day
        ).first()
        if exception is None:
            return None
        return ExceptionOverride(
            type=exception.type,
            time_windows=exception.time_windows,
            reason=exception.reason or "",
        )

    @classmethod
    def resolve_day(cls, session: Session, business_id: str, day: date) -> Optional[DaySchedule]:
        """
        Schedule for one date, or None when the business is closed.

        A blocked exception closes the day; a custom exception swaps in its
        own windows and keeps the source's interval.
        """
        source = cls.resolve_source(session, business_id, day)
        exception = cls.resolve_exception(session, business_id, day)

        if exception is not None and exception.type == CalendarException.BLOCKED:
            return None

        if exception is not None and exception.type == CalendarException.CUSTOM:
            interval = (
                source.slot_interval_minutes if source is not None
                else get_settings().DEFAULT_SLOT_INTERVAL_MINUTES
            )
            if not exception.time_windows:
                return None
            return DaySchedule(tuple(exception.time_windows), interval, "exception")

        if source is None or not source.is_open:
            return None

        return DaySchedule(tuple(source.time_windows), source.slot_interval_minutes, source.kind)

    @classmethod
    def candidate_start_times(
            cls,
            session: Session,
            business_id: str,
            day: date,
            duration_minutes: int
    ) -> List[str]:
        schedule = cls.resolve_day(session, business_id, day)
        if schedule is None:
            return []
        return generate_start_times(schedule.windows, schedule.interval_minutes, duration_minutes)

    @staticmethod
    def confirmed_intervals(session: Session, business_id: str, day: date) -> List[Tuple[str, str]]:
        """[start, end) of every confirmed appointment of the day"""
        rows = session.query(Appointment.start_time, Appointment.end_time).filter(
            Appointment.business_id == business_id,
            Appointment.date == day,
            Appointment.status == AppointmentStatus.CONFIRMED
        ).all()
        return [(row.start_time, row.end_time) for row in rows]

    @staticmethod
    def filter_free(
            candidates: Sequence[str],
            booked: Sequence[Tuple[str, str]],
            duration_minutes: int
    ) -> List[str]:
        """Keep starts whose [start, start+duration) misses every booked interval."""
        free = []
        for start in candidates:
            end = add_duration(start, duration_minutes)
            if not any(overlaps(start, end, b_start, b_end) for b_start, b_end in booked):
                free.append(start)
        return sorted(free)
