"""
Celery Application Configuration

Hosts the matching task when MATCHING_DISPATCH=celery:
- Redis as message broker and result backend
- Task autodiscovery from pulsehustle.tasks

Usage:
    # Start worker:
    celery -A pulsehustle.celery worker --loglevel=info

    # Enqueue a matching job:
    from pulsehustle.tasks.matching import process_matching_job_task
    process_matching_job_task.apply_async(args=[job_id], countdown=0.1)
"""

from celery import Celery
from pulsehustle.config import get_settings

settings = get_settings()

celery_app = Celery(
    "pulsehustle",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    worker_prefetch_multiplier=1,  # Fair task distribution
    worker_concurrency=4,

    result_expires=3600,
    task_track_started=True,

    task_acks_late=True,  # Acknowledge after completion
    task_reject_on_worker_lost=True,

    task_routes={
        "pulsehustle.tasks.matching.process_matching_job_task": {"queue": "matching"},
    },
    task_default_queue="default",
)

celery_app.autodiscover_tasks(["pulsehustle.tasks"])
