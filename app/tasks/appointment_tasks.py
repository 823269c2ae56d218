# ===== app/tasks/appointment_tasks.py =====
"""Periodic appointment jobs: owner reminders, attendance prompts, expiry"""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.orm import sessionmaker

from app.config.celery_config import celery_app
from app.config.database import get_worker_session_factory
from app.models.appointment import Appointment, NotificationKind
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.notification.owner_notifier import OwnerNotifier
from app.services.registry import build_services

logger = logging.getLogger(__name__)


def notify_due(
        session_factory: sessionmaker,
        notifier: OwnerNotifier,
        finder: Callable,
        kind: str,
        now: Optional[datetime] = None
) -> int:
    """Send `kind` for every appointment `finder` returns; failures are skipped until the next run."""
    now = now or datetime.now(timezone.utc)

    db = session_factory()
    try:
        due: List[Appointment] = finder(db, now)
    finally:
        db.close()

    sent = 0
    for appointment in due:
        try:
            if notifier.deliver(OwnerNotifier.payload_for(appointment, kind)):
                sent += 1
        except Exception as e:
            logger.error(f"Could not send {kind} for appointment {appointment.id}: {e}")

    if due:
        logger.info(f"Sent {sent}/{len(due)} {kind} notifications")
    return sent


def _worker_notifier():
    session_factory = get_worker_session_factory()
    services = build_services(session_factory)
    return session_factory, services, OwnerNotifier(session_factory, services.appointments.mark_notification_sent)


@celery_app.task
def send_appointment_reminders():
    session_factory, _, notifier = _worker_notifier()
    sent = notify_due(
        session_factory, notifier,
        AppointmentQueryService.find_due_reminders,
        NotificationKind.REMINDER
    )
    return {"status": "success", "sent": sent}


@celery_app.task
def request_attendance_confirmations():
    session_factory, _, notifier = _worker_notifier()
    sent = notify_due(
        session_factory, notifier,
        AppointmentQueryService.find_due_attendance_requests,
        NotificationKind.CONFIRMATION_REQUEST
    )
    return {"status": "success", "sent": sent}


@celery_app.task
def expire_appointments():
    services = build_services(get_worker_session_factory())
    expired = services.appointments.expire_past_appointments()
    return {"status": "success", "expired": expired}
