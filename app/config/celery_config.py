# app/config/celery_config.py
"""Celery application and periodic job schedule"""
from celery import Celery
from celery.schedules import crontab

from app.config.settings import get_settings

TASK_MODULES = [
    "app.tasks.notification_tasks",
    "app.tasks.queue_tasks",
    "app.tasks.appointment_tasks",
]


def create_celery_app() -> Celery:
    """Create and configure the Celery application"""
    settings = get_settings()

    app = Celery(
        "slot_booking",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=TASK_MODULES,
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        task_routes={
            "app.tasks.notification_tasks.*": {"queue": "notifications"},
            "app.tasks.queue_tasks.*": {"queue": "maintenance"},
            "app.tasks.appointment_tasks.*": {"queue": "maintenance"},
        },
        beat_schedule={
            "cleanup-expired-queue-clients": {
                "task": "app.tasks.queue_tasks.cleanup_expired_queue_clients",
                "schedule": crontab(minute="*"),
            },
            "send-appointment-reminders": {
                "task": "app.tasks.appointment_tasks.send_appointment_reminders",
                "schedule": crontab(minute="*/5"),
            },
            "request-attendance-confirmations": {
                "task": "app.tasks.appointment_tasks.request_attendance_confirmations",
                "schedule": crontab(minute="*/2"),
            },
            "expire-appointments": {
                "task": "app.tasks.appointment_tasks.expire_appointments",
                "schedule": crontab(minute="*/10"),
            },
        },
    )

    return app


celery_app = create_celery_app()
