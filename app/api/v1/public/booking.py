# ============================================================================
# FILE: app/api/v1/public/booking.py
# Public booking endpoints - thin HTTP layer over the booking services
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path, status

from app.api.dependencies import get_services
from app.schemas.booking import (
    AvailableSlotsResponse,
    CreateAppointmentRequest,
    CreateAppointmentResponse,
)
from app.services.registry import BookingServices

router = APIRouter(tags=["public-booking"])


@router.get("/businesses/{business_id}/availability", response_model=AvailableSlotsResponse)
def get_available_slots(
        business_id: str = Path(..., description="The business ID"),
        service_id: str = Query(..., description="Service to book"),
        date: str = Query(..., description="Day to list, YYYY-MM-DD"),
        services: BookingServices = Depends(get_services)
):
    """Free start times for a service on a day. Display only: booking re-checks."""
    slots = services.availability.get_available_slots(business_id, service_id, date)
    return AvailableSlotsResponse(
        business_id=business_id,
        service_id=service_id,
        date=date,
        slots=slots
    )


@router.post(
    "/appointments",
    response_model=CreateAppointmentResponse,
    status_code=status.HTTP_201_CREATED
)
def create_appointment(
        body: CreateAppointmentRequest,
        services: BookingServices = Depends(get_services)
):
    """Book a slot. Only the session at position 1 of the business queue may book."""
    appointment_id = services.appointments.create_appointment(
        business_id=body.business_id,
        service_id=body.service_id,
        date=body.date,
        start_time=body.start_time,
        client_name=body.client_name,
        client_phone=body.client_phone,
        session_id=body.session_id,
    )
    return CreateAppointmentResponse(appointment_id=appointment_id)
