# ============================================================================
# FILE: app/api/v1/public/queue.py
# Booking queue endpoints polled by the public booking page
# ============================================================================
from fastapi import APIRouter, Depends, Path, Request

from app.api.dependencies import get_client_ip, get_services
from app.schemas.booking import (
    AckResponse,
    JoinQueueRequest,
    JoinQueueResponse,
    QueueStatusResponse,
)
from app.services.registry import BookingServices

router = APIRouter(prefix="/businesses/{business_id}/queue", tags=["public-queue"])


@router.post("", response_model=JoinQueueResponse)
def join_queue(
        body: JoinQueueRequest,
        request: Request,
        business_id: str = Path(..., description="The business ID"),
        services: BookingServices = Depends(get_services)
):
    """Join the queue; joining again with the same session returns the same position."""
    result = services.queue.join_queue(business_id, body.session_id, get_client_ip(request))
    return JoinQueueResponse(position=result.position, session_id=result.session_id)


@router.get("/{session_id}", response_model=QueueStatusResponse)
def get_queue_position(
        business_id: str = Path(...),
        session_id: str = Path(...),
        services: BookingServices = Depends(get_services)
):
    client = services.queue.get_position(business_id, session_id)
    return QueueStatusResponse(
        session_id=client.session_id,
        position=client.position,
        status=client.status
    )


@router.post("/{session_id}/heartbeat", response_model=AckResponse)
def heartbeat(
        business_id: str = Path(...),
        session_id: str = Path(...),
        services: BookingServices = Depends(get_services)
):
    services.queue.update_activity(business_id, session_id)
    return AckResponse()


@router.delete("/{session_id}", response_model=AckResponse)
def leave_queue(
        business_id: str = Path(...),
        session_id: str = Path(...),
        services: BookingServices = Depends(get_services)
):
    """Leave the queue. Leaving twice is not an error."""
    removed = services.queue.remove_from_queue(business_id, session_id)
    return AckResponse(success=removed)
