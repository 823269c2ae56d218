# app/services/registry.py
"""Wiring of the booking services around one session factory"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from app.services.appointment.appointment_service import AppointmentService
from app.services.availability.availability_service import AvailabilityService
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.queue.queue_service import QueueService
from app.utils.transactions import TransactionRunner


@dataclass
class BookingServices:
    runner: TransactionRunner
    availability: AvailabilityService
    queue: QueueService
    appointments: AppointmentService


def build_services(
        session_factory: sessionmaker,
        dispatcher: Optional[NotificationDispatcher] = None
) -> BookingServices:
    runner = TransactionRunner(session_factory)
    queue = QueueService(runner)
    return BookingServices(
        runner=runner,
        availability=AvailabilityService(session_factory),
        queue=queue,
        appointments=AppointmentService(runner, queue, dispatcher or NotificationDispatcher()),
    )
