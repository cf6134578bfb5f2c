"""Celery application bootstrap for queue consumers and cron jobs.

Invariants:
    - Broker/backend URLs and the beat schedule come from settings
    - JSON-only serialization

Design Decisions:
    - One app for workers and beat: `celery -A app.workers.celery_app worker|beat`
"""

from celery import Celery

from app.config import get_settings
from app.workers.schedule import build_beat_schedule

settings = get_settings()

celery_app = Celery(
    "scaffold",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_track_started=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,
    result_expires=3600,
    task_always_eager=settings.celery_task_always_eager,
    broker_connection_retry_on_startup=True,
    timezone="UTC",
    enable_utc=True,
    beat_schedule=build_beat_schedule(settings),
)
