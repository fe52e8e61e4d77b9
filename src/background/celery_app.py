"""
Celery application configuration and setup.
"""

from celery import Celery
from celery.schedules import crontab

from src.config.settings import settings

celery_app = Celery(
    "field_dispatch",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_routes={
        "publish_outbox_events_task": {"queue": "outbox"},
        "cleanup_outbox_events_task": {"queue": "maintenance"},
    },
    # Worker configuration
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    worker_hijack_root_logger=False,
    # Task configuration
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    result_expires=3600,
    task_default_queue="default",
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    task_soft_time_limit=settings.CELERY_TASK_SOFT_TIME_LIMIT,
    task_reject_on_worker_lost=settings.CELERY_TASK_REJECT_ON_WORKER_LOST,
    beat_schedule={
        "publish-outbox-events": {
            "task": "publish_outbox_events_task",
            "schedule": float(settings.CELERY_PUBLISH_OUTBOX_EVENTS_INTERVAL_SECONDS),
            "options": {"queue": "outbox"},
        },
        "cleanup-outbox-events": {
            "task": "cleanup_outbox_events_task",
            "schedule": crontab(
                minute=0,
                hour=f"*/{settings.CELERY_CLEANUP_OUTBOX_EVENTS_INTERVAL_HOURS}",
            ),
            "options": {"queue": "maintenance"},
        },
    },
)

celery_app.conf.task_annotations = {
    "publish_outbox_events_task": {
        "rate_limit": settings.CELERY_PUBLISH_OUTBOX_EVENTS_TASK_RATE_LIMIT,
    },
}

celery_app.autodiscover_tasks(["src.background.tasks"], related_name="outbox_tasks")

if __name__ == "__main__":
    celery_app.start()
