# app/services/notification/dispatcher.py
"""
Fire-and-forget hand-off of owner notifications to the worker.

Booking and cancellation never wait on delivery: dispatch() only enqueues,
and any failure to enqueue is logged and reported as False.
"""
import logging

from app.schemas.task_payloads import OwnerNotificationPayload

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Enqueues owner notifications on the Celery notifications queue"""

    def dispatch(self, payload: OwnerNotificationPayload) -> bool:
        try:
            from app.tasks.notification_tasks import send_owner_notification

            send_owner_notification.delay(payload.model_dump(mode="json"))
            return True
        except Exception as e:
            logger.error(
                f"Could not enqueue {payload.type} notification for business "
                f"{payload.business_id}: {e}"
            )
            return False
