"""Celery configuration"""

from celery import Celery
from celery.schedules import crontab

from sayitright.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "sayitright_tasks",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Asia/Seoul",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes
    task_soft_time_limit=240,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)

celery_app.conf.beat_schedule = {
    "cleanup-expired-verification-codes": {
        "task": "sayitright.tasks.maintenance.cleanup_expired_verification_codes",
        "schedule": crontab(minute=0),  # hourly
    },
}

celery_app.autodiscover_tasks(["sayitright.tasks"], related_name="maintenance")
