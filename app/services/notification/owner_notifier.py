# app/services/notification/owner_notifier.py
"""Delivers an owner notification and records it on the appointment"""
import logging
from typing import Callable, Optional

from sqlalchemy.orm import sessionmaker

from app.models.business import Business
from app.schemas.task_payloads import OwnerNotificationPayload
from app.services.notification.telegram_service import TelegramService

logger = logging.getLogger(__name__)


class OwnerNotifier:
    """
    Looks up the business chat, sends through Telegram and marks the
    notification as sent. Delivery errors propagate so the calling task can
    retry; the sent marker is written only after a successful send.
    """

    def __init__(
            self,
            session_factory: sessionmaker,
            mark_sent: Callable[[str, str], None],
            telegram: Optional[TelegramService] = None
    ):
        self.session_factory = session_factory
        self.mark_sent = mark_sent
        self.telegram = telegram or TelegramService()

    def chat_id_for(self, business_id: str) -> Optional[str]:
        session = self.session_factory()
        try:
            business = session.get(Business, business_id)
            return business.telegram_chat_id if business else None
        finally:
            session.close()

    def deliver(self, payload: OwnerNotificationPayload) -> bool:
        chat_id = self.chat_id_for(payload.business_id)
        sent = self.telegram.send_notification(chat_id, payload)
        if sent and payload.appointment_id:
            self.mark_sent(payload.appointment_id, payload.type)
        return sent

    @staticmethod
    def payload_for(appointment, kind: str) -> OwnerNotificationPayload:
        return OwnerNotificationPayload(
            type=kind,
            business_id=appointment.business_id,
            appointment_id=appointment.id,
            client_name=appointment.client_name,
            client_phone=appointment.client_phone,
            service_name=appointment.service_name,
            date=appointment.date.isoformat(),
            start_time=appointment.start_time,
        )
