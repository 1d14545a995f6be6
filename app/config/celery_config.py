"""Celery application factory and schedule"""
from celery import Celery
from celery.schedules import crontab

from app.config.settings import get_settings


def create_celery_app() -> Celery:
    """Create and configure the Celery application"""
    settings = get_settings()

    app = Celery(
        "booking",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=[
            "app.tasks.notification_tasks",
            "app.tasks.booking_tasks",
        ],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        beat_schedule={
            "complete-elapsed-bookings": {
                "task": "app.tasks.booking_tasks.complete_elapsed_bookings",
                "schedule": crontab(minute="*/15"),  # Every 15 minutes
            },
        },
    )

    return app


celery_app = create_celery_app()
