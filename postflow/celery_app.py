from celery import Celery
from celery.schedules import crontab

from .core.config import settings

# Create Celery instance
celery_app = Celery(
    "postflow",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["postflow.tasks"]
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    result_expires=3600,  # 1 hour
    task_routes={
        "postflow.tasks.process_inbound_email": {"queue": "outreach"},
        "postflow.tasks.deliver_pending_notifications": {"queue": "emails"},
        "postflow.tasks.refresh_derived_prices": {"queue": "maintenance"},
        "postflow.tasks.expire_credits": {"queue": "maintenance"},
        "postflow.tasks.auto_approve_reviews": {"queue": "maintenance"},
    },
    beat_schedule={
        "deliver-publisher-notifications": {
            "task": "postflow.tasks.deliver_pending_notifications",
            "schedule": 300.0,
        },
        "auto-approve-reviews": {
            "task": "postflow.tasks.auto_approve_reviews",
            "schedule": 900.0,
        },
        "expire-credits": {
            "task": "postflow.tasks.expire_credits",
            "schedule": crontab(hour=2, minute=0),
        },
        "refresh-derived-prices": {
            "task": "postflow.tasks.refresh_derived_prices",
            "schedule": crontab(hour=3, minute=0),
        },
    },
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    worker_max_tasks_per_child=1000,
)
