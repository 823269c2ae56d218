# app/models/__init__.py
from .base import Base
from .business import Business
from .user import User
from .service import Service
from .availability import AvailabilityRule, AvailabilityDate, CalendarException
from .appointment import Appointment, AppointmentStatus, NotificationKind
from .queue import BookingQueue, QueueClient, QueueClientStatus
from .problem_client import ProblemClient

__all__ = [
    "Base",
    "Business",
    "User",
    "Service",
    "AvailabilityRule",
    "AvailabilityDate",
    "CalendarException",
    "Appointment",
    "AppointmentStatus",
    "NotificationKind",
    "BookingQueue",
    "QueueClient",
    "QueueClientStatus",
    "ProblemClient",
]
