# app/services/notification/telegram_service.py
"""Owner notifications over the Telegram Bot API"""
import logging
from typing import Any, Dict, Optional

import httpx

from app.config.settings import get_settings
from app.schemas.task_payloads import OwnerNotificationPayload

logger = logging.getLogger(__name__)


class TelegramDeliveryError(Exception):
    """Telegram rejected or never received a request"""


def format_date(value: str) -> str:
    """ "2026-01-25" -> "25/01/2026" """
    year, month, day = value.split("-")
    return f"{day}/{month}/{year}"


class TelegramService:
    """Sends owner notifications and answers inline-keyboard callbacks"""

    def __init__(self, bot_token: Optional[str] = None, http_client: Optional[httpx.Client] = None):
        settings = get_settings()
        self.bot_token = bot_token if bot_token is not None else settings.TELEGRAM_BOT_TOKEN
        self.api_url = settings.TELEGRAM_API_URL.rstrip("/")
        self.http_client = http_client or httpx.Client(timeout=settings.TELEGRAM_TIMEOUT_SECONDS)

    @staticmethod
    def build_message(payload: OwnerNotificationPayload) -> tuple:
        """Text and optional reply markup for a notification"""
        keyboard = None

        if payload.type == "new_appointment":
            text = (
                "🔔 New booking\n\n"
                f"Client: {payload.client_name}\n"
                f"Phone: {payload.client_phone or '-'}\n"
                f"Service: {payload.service_name}\n"
                f"Date: {format_date(payload.date)}\n"
                f"Time: {payload.start_time}"
            )
        elif payload.type == "reminder":
            text = (
                "⏰ Reminder\n\n"
                "You have an appointment in 1 hour with:\n"
                f"Client: {payload.client_name}\n"
                f"Service: {payload.service_name}\n"
                f"Time: {payload.start_time}"
            )
        else:
            text = (
                "✅ Attendance confirmation\n\n"
                "Did the client show up?\n\n"
                f"Client: {payload.client_name}\n"
                f"Service: {payload.service_name}\n"
                f"Time: {payload.start_time}"
            )
            keyboard = {
                "inline_keyboard": [[
                    {"text": "Attended", "callback_data": f"attended:{payload.appointment_id}"},
                    {"text": "No show", "callback_data": f"no_show:{payload.appointment_id}"},
                ]]
            }

        return text, keyboard

    def send_notification(self, chat_id: Optional[str], payload: OwnerNotificationPayload) -> bool:
        """
        Notify the owner chat. Returns False when the business has no chat
        configured; raises TelegramDeliveryError when delivery fails.
        """
        if not chat_id:
            logger.info(f"Business {payload.business_id} has no Telegram chat configured")
            return False

        text, keyboard = self.build_message(payload)
        body: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if keyboard:
            body["reply_markup"] = keyboard

        self._call("sendMessage", body)
        logger.info(f"Sent {payload.type} notification to business {payload.business_id}")
        return True

    def answer_callback_query(self, callback_query_id: str, text: str) -> None:
        self._call("answerCallbackQuery", {"callback_query_id": callback_query_id, "text": text})

    def _call(self, method: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if not self.bot_token:
            raise TelegramDeliveryError("TELEGRAM_BOT_TOKEN is not configured")

        url = f"{self.api_url}/bot{self.bot_token}/{method}"
        try:
            response = self.http_client.post(url, json=body)
        except httpx.TimeoutException:
            raise TelegramDeliveryError(f"Telegram {method} timed out") from None
        except httpx.RequestError as e:
            raise TelegramDeliveryError(f"Telegram {method} request error: {str(e)[:200]}") from e

        if not 200 <= response.status_code < 300:
            raise TelegramDeliveryError(
                f"Telegram {method} failed: HTTP {response.status_code}: {response.text[:200]}"
            )
        return response.json()
