# app/core/exceptions.py
"""Domain errors raised by the booking services and rendered by the API"""
from fastapi import FastAPI, status
from starlette.requests import Request
from starlette.responses import JSONResponse


class BookingError(Exception):
    """Base class for errors a booking client or owner can act on"""

    code = "booking_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The request could not be completed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class InvalidArgumentError(BookingError):
    code = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"


class NotFoundError(BookingError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InactiveError(BookingError):
    code = "inactive"
    status_code = status.HTTP_409_CONFLICT
    default_message = "This service is not currently available"


class UnauthorizedError(BookingError):
    code = "unauthorized"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not authorized to make a reservation at this time"


class QueueFullError(BookingError):
    code = "queue_full"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Queue is full. Please try again later."


class SlotUnavailableError(BookingError):
    code = "slot_unavailable"
    status_code = status.HTTP_409_CONFLICT
    default_message = "This time slot is no longer available"


class LimitExceededError(BookingError):
    code = "limit_exceeded"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You have reached the maximum number of future appointments"


class DuplicateDateError(BookingError):
    code = "duplicate_date"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You already have an appointment on this date"


class InvalidStateError(BookingError):
    code = "invalid_state"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Appointment cannot be modified in its current status"


class TransientError(BookingError):
    code = "transient"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "The system is busy, please try again"


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)
