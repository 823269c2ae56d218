# app/webhooks/telegram_handler.py
"""Telegram bot webhook - attendance buttons sent with confirmation requests"""
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Request, HTTPException, Depends
from pydantic import ValidationError

from app.api.dependencies import get_services
from app.config.settings import get_settings
from app.core.exceptions import BookingError
from app.schemas.webhook_events import TelegramCallbackQuery, TelegramUpdate
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.notification.telegram_service import TelegramDeliveryError
from app.services.registry import BookingServices

router = APIRouter()
logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def _owning_business(request: Request, callback: TelegramCallbackQuery, appointment_id: str) -> Optional[str]:
    """Business id of the appointment when the button was pressed in that business's chat"""
    db = request.app.state.session_factory()
    try:
        owner = AppointmentQueryService.owner_chat_for_appointment(db, appointment_id)
    finally:
        db.close()

    if owner is None:
        return None
    business_id, chat_id = owner
    if not chat_id or chat_id != callback.chat_id():
        return None
    return business_id


@router.post("")
def handle_telegram_update(
        request: Request,
        payload: Dict[str, Any] = Body(...),
        services: BookingServices = Depends(get_services)
):
    """Record attendance from an owner's button press and acknowledge it"""
    secret = get_settings().TELEGRAM_WEBHOOK_SECRET
    if secret and request.headers.get(SECRET_HEADER) != secret:
        raise HTTPException(status_code=403, detail="Invalid webhook secret")

    try:
        update = TelegramUpdate(**payload)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed Telegram update: {str(e)[:200]}")
        raise HTTPException(status_code=400, detail="Malformed update")

    callback = update.callback_query
    action = callback.attendance_action() if callback else None
    if action is None:
        return {"ok": True, "handled": False}

    kind, appointment_id = action
    business_id = _owning_business(request, callback, appointment_id)
    if business_id is None:
        logger.warning(
            f"Rejected attendance callback for appointment {appointment_id} "
            f"from chat {callback.chat_id()}"
        )
        return {"ok": True, "handled": False}

    try:
        services.appointments.record_attendance(
            appointment_id, attended=(kind == "attended"), caller_business_id=business_id
        )
        reply = "✅ Attendance recorded" if kind == "attended" else "❌ No-show recorded"
    except BookingError as e:
        logger.info(f"Attendance for {appointment_id} not recorded: {e.message}")
        reply = "This appointment was already updated"

    try:
        request.app.state.telegram.answer_callback_query(callback.id, reply)
    except TelegramDeliveryError as e:
        logger.error(f"Could not answer Telegram callback {callback.id}: {e}")

    return {"ok": True, "handled": True}
