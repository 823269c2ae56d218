# app/schemas/__init__.py
from .availability import (
    TimeWindow,
    WeeklyAvailability,
    DatedAvailability,
    AvailabilitySource,
    ExceptionOverride,
)
from .booking import (
    AvailableSlotsResponse,
    JoinQueueRequest,
    JoinQueueResponse,
    QueueStatusResponse,
    AckResponse,
    CreateAppointmentRequest,
    CreateAppointmentResponse,
    AppointmentResponse,
    AppointmentListResponse,
    ProblemClientResponse,
)
from .task_payloads import OwnerNotificationPayload

__all__ = [
    "TimeWindow",
    "WeeklyAvailability",
    "DatedAvailability",
    "AvailabilitySource",
    "ExceptionOverride",
    "AvailableSlotsResponse",
    "JoinQueueRequest",
    "JoinQueueResponse",
    "QueueStatusResponse",
    "AckResponse",
    "CreateAppointmentRequest",
    "CreateAppointmentResponse",
    "AppointmentResponse",
    "AppointmentListResponse",
    "ProblemClientResponse",
    "OwnerNotificationPayload",
]
