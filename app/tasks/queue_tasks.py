# ===== app/tasks/queue_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.config.database import get_worker_session_factory
from app.services.registry import build_services

logger = logging.getLogger(__name__)


@celery_app.task
def cleanup_expired_queue_clients():
    """Drop queue sessions whose heartbeat stopped"""
    services = build_services(get_worker_session_factory())
    removed = services.queue.cleanup_expired_clients()
    return {"status": "success", "removed": removed}
