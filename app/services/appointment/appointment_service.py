# ============================================================================
# app/services/appointment/appointment_service.py
# ============================================================================
"""
Appointment writer and lifecycle transitions.

A booking is admitted only for the session at the front of the queue and is
re-validated against the live schedule inside one transaction. Leaving the
queue and notifying the owner happen after the commit and never undo it.
"""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import (
    DuplicateDateError,
    InvalidArgumentError,
    InvalidStateError,
    LimitExceededError,
    NotFoundError,
    SlotUnavailableError,
    UnauthorizedError,
)
from app.models.appointment import Appointment, AppointmentStatus, NotificationKind
from app.models.problem_client import NO_SHOWS_BEFORE_BLOCK, ProblemClient
from app.models.queue import QueueClient, QueueClientStatus
from app.schemas.task_payloads import OwnerNotificationPayload
from app.services.availability.availability_service import AvailabilityService
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.queue.queue_service import QueueService
from app.utils.time_utils import (
    MINUTES_PER_DAY,
    business_today,
    combine_business_datetime,
    minutes_to_time,
    overlaps,
    parse_date,
    time_to_minutes,
)
from app.utils.transactions import TransactionRunner

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\d{8,15}$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def validate_client_data(name: str, phone: str) -> tuple:
    """Normalized (name, phone); InvalidArgumentError on bad input."""
    name = (name or "").strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise InvalidArgumentError(
            f"Invalid name: must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )

    phone = phone or ""
    if not PHONE_PATTERN.match(phone):
        raise InvalidArgumentError("Invalid phone: must contain 8-15 digits")

    return name, phone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AppointmentService:
    """Creates, cancels and closes appointments"""

    def __init__(
            self,
            runner: TransactionRunner,
            queue_service: QueueService,
            dispatcher: NotificationDispatcher
    ):
        self.runner = runner
        self.queue_service = queue_service
        self.dispatcher = dispatcher

    def create_appointment(
            self,
            business_id: str,
            service_id: str,
            date,
            start_time: str,
            client_name: str,
            client_phone: str,
            session_id: str
    ) -> str:
        """
        Book a slot for the session at position 1 of the business queue.

        Returns:
            the new appointment id
        """
        client_name, client_phone = validate_client_data(client_name, client_phone)
        day = parse_date(date)
        start_time = minutes_to_time(time_to_minutes(start_time))
        max_future = get_settings().MAX_FUTURE_APPOINTMENTS

        def work(session: Session) -> Appointment:
            queue_client = session.get(QueueClient, (business_id, session_id))
            if (queue_client is None or queue_client.position != 1
                    or queue_client.status == QueueClientStatus.EXPIRED):
                raise UnauthorizedError("It is not your turn to book yet")

            service = AvailabilityService.get_bookable_service(session, business_id, service_id)
            duration = service.duration_minutes

            if time_to_minutes(start_time) + duration >= MINUTES_PER_DAY:
                raise SlotUnavailableError()
            end_time = minutes_to_time(time_to_minutes(start_time) + duration)

            candidates = AvailabilityService.candidate_start_times(session, business_id, day, duration)
            if start_time not in candidates:
                raise SlotUnavailableError("This time is outside the business opening hours")

            for booked_start, booked_end in AvailabilityService.confirmed_intervals(session, business_id, day):
                if overlaps(start_time, end_time, booked_start, booked_end):
                    raise SlotUnavailableError()

            client_upcoming = session.query(Appointment).filter(
                Appointment.business_id == business_id,
                Appointment.client_phone == client_phone,
                Appointment.status == AppointmentStatus.CONFIRMED,
                Appointment.date >= business_today()
            ).all()

            if len(client_upcoming) >= max_future:
                raise LimitExceededError(
                    f"You cannot have more than {max_future} future appointments"
                )
            if any(appt.date == day for appt in client_upcoming):
                raise DuplicateDateError()

            now = _utcnow()
            appointment = Appointment(
                business_id=business_id,
                service_id=service.id,
                service_name=service.name,
                duration_minutes=duration,
                date=day,
                start_time=start_time,
                end_time=end_time,
                client_name=client_name,
                client_phone=client_phone,
                status=AppointmentStatus.CONFIRMED,
                notifications_sent=[],
                created_at=now,
                updated_at=now,
            )
            session.add(appointment)
            session.flush()
            return appointment

        appointment = self.runner.run(work)
        logger.info(
            f"Appointment {appointment.id} booked for business {business_id} "
            f"on {day.isoformat()} at {start_time}"
        )

        try:
            self.queue_service.remove_from_queue(business_id, session_id)
        except Exception as e:
            # the stale-client sweep frees the front of the queue eventually
            logger.error(f"Could not release queue slot for session {session_id}: {e}")

        self.dispatcher.dispatch(OwnerNotificationPayload(
            type=NotificationKind.NEW_APPOINTMENT,
            business_id=business_id,
            appointment_id=appointment.id,
            client_name=appointment.client_name,
            client_phone=appointment.client_phone,
            service_name=appointment.service_name,
            date=day.isoformat(),
            start_time=start_time,
        ))

        return appointment.id

    def cancel_appointment(self, appointment_id: str, caller_business_id: str) -> Appointment:
        """Owner cancellation of a confirmed appointment."""

        def work(session: Session) -> Appointment:
            appointment = session.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment not found")
            if appointment.business_id != caller_business_id:
                raise UnauthorizedError("Unauthorized")
            if appointment.status != AppointmentStatus.CONFIRMED:
                raise InvalidStateError("Appointment cannot be cancelled")

            now = _utcnow()
            appointment.status = AppointmentStatus.CANCELLED
            appointment.cancelled_at = now
            appointment.cancelled_by = "owner"
            appointment.updated_at = now
            return appointment

        appointment = self.runner.run(work)
        logger.info(f"Appointment {appointment_id} cancelled by owner of {caller_business_id}")
        return appointment

    def record_attendance(
            self,
            appointment_id: str,
            attended: bool,
            caller_business_id: Optional[str] = None
    ) -> Appointment:
        """
        Close a confirmed appointment as attended or no-show.

        When caller_business_id is given the appointment must belong to it.

        A no-show is added to the business's problem-client register in the
        same transaction; the client is flagged blocked after repeated no-shows.
        """

        def work(session: Session) -> Appointment:
            appointment = session.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment not found")
            if caller_business_id is not None and appointment.business_id != caller_business_id:
                raise UnauthorizedError("Unauthorized")
            if appointment.status != AppointmentStatus.CONFIRMED:
                raise InvalidStateError("Appointment is already closed")

            now = _utcnow()
            appointment.status = (
                AppointmentStatus.COMPLETED_ATTENDED if attended
                else AppointmentStatus.COMPLETED_NO_SHOW
            )
            appointment.completed_at = now
            appointment.updated_at = now

            if not attended:
                self._register_no_show(session, appointment, now)
            return appointment

        appointment = self.runner.run(work)
        logger.info(f"Appointment {appointment_id} closed as {appointment.status}")
        return appointment

    def mark_notification_sent(self, appointment_id: str, kind: str) -> None:
        """Record a sent notification; allowed whatever the status."""

        def work(session: Session) -> None:
            appointment = session.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment not found")
            sent = list(appointment.notifications_sent or [])
            if kind not in sent:
                appointment.notifications_sent = sent + [kind]

        self.runner.run(work)

    def expire_past_appointments(self, now: Optional[datetime] = None) -> int:
        """Confirmed appointments ended more than the grace period ago become expired."""
        now = now or _utcnow()
        cutoff = now - timedelta(minutes=get_settings().APPOINTMENT_EXPIRY_GRACE_MINUTES)

        def work(session: Session) -> int:
            candidates = session.query(Appointment).filter(
                Appointment.status == AppointmentStatus.CONFIRMED,
                Appointment.date <= business_today(now)
            ).all()

            expired = 0
            for appointment in candidates:
                if combine_business_datetime(appointment.date, appointment.end_time) < cutoff:
                    appointment.status = AppointmentStatus.EXPIRED
                    appointment.updated_at = now
                    expired += 1
            return expired

        expired = self.runner.run(work)
        if expired:
            logger.info(f"Expired {expired} past appointments")
        return expired

    @staticmethod
    def _register_no_show(session: Session, appointment: Appointment, now: datetime) -> None:
        record = session.get(ProblemClient, (appointment.business_id, appointment.client_phone))
        if record is None:
            record = ProblemClient(
                business_id=appointment.business_id,
                client_phone=appointment.client_phone,
                client_name=appointment.client_name,
                no_show_count=0,
                appointment_ids=[],
                is_blocked=False,
                added_at=now,
            )
            session.add(record)

        record.client_name = appointment.client_name
        record.no_show_count = (record.no_show_count or 0) + 1
        record.appointment_ids = list(record.appointment_ids or []) + [appointment.id]
        record.last_no_show_at = now
        record.is_blocked = record.no_show_count >= NO_SHOWS_BEFORE_BLOCK
