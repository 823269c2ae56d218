"""Request/response models for the public booking flow and the dashboard"""
from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Availability
# ============================================================================

class AvailableSlotsResponse(BaseModel):
    business_id: str
    service_id: str
    date: str
    slots: List[str] = Field(default_factory=list, description='Start times, e.g. ["09:00", "11:00"]')


# ============================================================================
# Queue
# ============================================================================

class JoinQueueRequest(BaseModel):
    session_id: str = Field(..., min_length=1, max_length=100)


class JoinQueueResponse(BaseModel):
    position: int
    session_id: str


class QueueStatusResponse(BaseModel):
    session_id: str
    position: int
    status: str


class AckResponse(BaseModel):
    success: bool = True


# ============================================================================
# Appointments
# ============================================================================

class CreateAppointmentRequest(BaseModel):
    """
    Booking submitted by the client at the front of the queue.
    Name and phone rules are enforced by the service so every caller
    gets the same InvalidArgument error.
    """
    business_id: str
    service_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    start_time: str = Field(..., description="HH:MM")
    client_name: str
    client_phone: str
    session_id: str


class CreateAppointmentResponse(BaseModel):
    appointment_id: str


class AppointmentResponse(BaseModel):
    id: str
    business_id: str
    service_id: str
    service_name: str
    duration_minutes: int
    date: str
    start_time: str
    end_time: str
    client_name: str
    client_phone: str
    status: str
    notifications_sent: List[str] = Field(default_factory=list)
    cancelled_by: Optional[str] = None


class AppointmentListResponse(BaseModel):
    business_id: str
    date: str
    total_appointments: int
    appointments: List[AppointmentResponse]


class ProblemClientResponse(BaseModel):
    client_phone: str
    client_name: str
    no_show_count: int
    appointment_ids: List[str]
    is_blocked: bool
    last_no_show_at: Optional[str] = None
