# ============================================================================
# app/services/appointment/appointment_query_service.py
# Read-only appointment queries for the dashboard and the scheduled jobs
# ============================================================================
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.appointment import Appointment, AppointmentStatus, NotificationKind
from app.models.business import Business
from app.models.problem_client import ProblemClient
from app.utils.time_utils import business_today, combine_business_datetime


class AppointmentQueryService:
    """Service layer for appointment reads."""

    @staticmethod
    def list_appointments_for_date(
            db: Session,
            business_id: str,
            day: date,
            status: Optional[str] = None
    ) -> List[Appointment]:
        """Appointments of one day ordered by start time."""
        query = db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.date == day
        )
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.start_time.asc()).all()

    @staticmethod
    def list_problem_clients(db: Session, business_id: str) -> List[ProblemClient]:
        return db.query(ProblemClient).filter(
            ProblemClient.business_id == business_id
        ).order_by(desc(ProblemClient.no_show_count), desc(ProblemClient.last_no_show_at)).all()

    @staticmethod
    def owner_chat_for_appointment(db: Session, appointment_id: str) -> Optional[Tuple[str, Optional[str]]]:
        """(business_id, telegram_chat_id) of the business an appointment belongs to."""
        row = db.query(Appointment.business_id, Business.telegram_chat_id).join(
            Business, Business.id == Appointment.business_id
        ).filter(Appointment.id == appointment_id).first()
        return (row[0], row[1]) if row else None

    @staticmethod
    def _confirmed_around(db: Session, now: datetime) -> List[Appointment]:
        today = business_today(now)
        return db.query(Appointment).filter(
            Appointment.status == AppointmentStatus.CONFIRMED,
            Appointment.date >= today - timedelta(days=1),
            Appointment.date <= today + timedelta(days=1)
        ).all()

    @staticmethod
    def find_due_reminders(db: Session, now: datetime) -> List[Appointment]:
        """
        Confirmed appointments starting about REMINDER_LEAD_MINUTES from now
        that have not had a reminder yet.
        """
        settings = get_settings()
        lead = timedelta(minutes=settings.REMINDER_LEAD_MINUTES)
        window = timedelta(minutes=settings.REMINDER_WINDOW_MINUTES)
        earliest, latest = now + lead - window, now + lead + window

        return [
            appt for appt in AppointmentQueryService._confirmed_around(db, now)
            if NotificationKind.REMINDER not in (appt.notifications_sent or [])
            and earliest <= combine_business_datetime(appt.date, appt.start_time) <= latest
        ]

    @staticmethod
    def find_due_attendance_requests(db: Session, now: datetime) -> List[Appointment]:
        """Confirmed appointments that started within the last ATTENDANCE_WINDOW_MINUTES."""
        window = timedelta(minutes=get_settings().ATTENDANCE_WINDOW_MINUTES)

        return [
            appt for appt in AppointmentQueryService._confirmed_around(db, now)
            if NotificationKind.CONFIRMATION_REQUEST not in (appt.notifications_sent or [])
            and now - window <= combine_business_datetime(appt.date, appt.start_time) <= now
        ]
