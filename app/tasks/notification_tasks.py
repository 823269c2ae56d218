# ===== app/tasks/notification_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.config.database import get_worker_session_factory
from app.schemas.task_payloads import OwnerNotificationPayload
from app.services.notification.owner_notifier import OwnerNotifier
from app.services.registry import build_services

logger = logging.getLogger(__name__)


def get_owner_notifier() -> OwnerNotifier:
    session_factory = get_worker_session_factory()
    services = build_services(session_factory)
    return OwnerNotifier(session_factory, services.appointments.mark_notification_sent)


@celery_app.task(bind=True, max_retries=3)
def send_owner_notification(self, payload: dict):
    """
    Deliver an owner notification enqueued by the booking flow

    Args:
        payload: OwnerNotificationPayload as JSON
    """
    notification = OwnerNotificationPayload(**payload)
    try:
        sent = get_owner_notifier().deliver(notification)
        return {"status": "sent" if sent else "skipped", "type": notification.type}

    except Exception as exc:
        logger.error(
            f"Failed to deliver {notification.type} notification for business "
            f"{notification.business_id}: {exc}"
        )
        # 1min, 2min, 4min
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))
