# ============================================================================
# FILE: app/api/v1/dashboard/appointments.py
# Session authenticated endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config.database import get_db
from app.models.user import User
from app.api.dependencies import get_current_owner, get_services
from app.schemas.booking import AppointmentListResponse, AppointmentResponse, ProblemClientResponse
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.registry import BookingServices
from app.utils.time_utils import parse_date

router = APIRouter(tags=["dashboard-appointments"])


class AttendanceRequest(BaseModel):
    attended: bool


@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(
        date: str = Query(..., description="Day to list, YYYY-MM-DD"),
        status: Optional[str] = Query(None, description="Filter by status"),
        current_user: User = Depends(get_current_owner),
        db: Session = Depends(get_db)
):
    """A day's appointments for your business, ordered by start time."""
    day = parse_date(date)
    appointments = AppointmentQueryService.list_appointments_for_date(
        db=db,
        business_id=current_user.business_id,
        day=day,
        status=status
    )
    return AppointmentListResponse(
        business_id=current_user.business_id,
        date=day.isoformat(),
        total_appointments=len(appointments),
        appointments=[AppointmentResponse(**appt.to_dict()) for appt in appointments]
    )


@router.post("/appointments/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
        appointment_id: str = Path(..., description="The appointment ID"),
        current_user: User = Depends(get_current_owner),
        services: BookingServices = Depends(get_services)
):
    appointment = services.appointments.cancel_appointment(appointment_id, current_user.business_id)
    return AppointmentResponse(**appointment.to_dict())


@router.post("/appointments/{appointment_id}/attendance", response_model=AppointmentResponse)
def record_attendance(
        body: AttendanceRequest,
        appointment_id: str = Path(..., description="The appointment ID"),
        current_user: User = Depends(get_current_owner),
        services: BookingServices = Depends(get_services)
):
    """Same transition as the Telegram buttons, for owners working from the dashboard."""
    appointment = services.appointments.record_attendance(
        appointment_id, body.attended, caller_business_id=current_user.business_id
    )
    return AppointmentResponse(**appointment.to_dict())


@router.get("/problem-clients", response_model=List[ProblemClientResponse])
def list_problem_clients(
        current_user: User = Depends(get_current_owner),
        db: Session = Depends(get_db)
):
    clients = AppointmentQueryService.list_problem_clients(db, current_user.business_id)
    return [ProblemClientResponse(**client.to_dict()) for client in clients]
