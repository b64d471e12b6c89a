"""
Background Tasks for Matching

The worker process has no event loop or engine of its own, so each task
run builds a short-lived engine, processes the job and disposes of it.

A job that fails is already marked ``failed`` by the service; the task
records the failure and does not retry, since a retry would score a job
that is no longer pending.
"""

import asyncio
import logging
import time
from typing import Optional

from prometheus_client import Counter, Histogram
from sqlalchemy.ext.asyncio import create_async_engine

from pulsehustle.celery import celery_app
from pulsehustle.config import get_settings
from pulsehustle.database import create_session_factory, to_async_url

logger = logging.getLogger(__name__)

TASK_DURATION = Histogram(
    "worker_task_duration_seconds",
    "Wall time of a worker task run, engine setup included",
    ["task_name"],
    namespace="pulsehustle",
)

TASK_FAILURES = Counter(
    "worker_task_failures_total",
    "Worker task runs that raised",
    ["task_name"],
    namespace="pulsehustle",
)


async def run_matching_job(job_id: str, database_url: Optional[str] = None) -> dict:
    """Process one matching job against its own engine."""
    from pulsehustle.platform import Platform

    settings = get_settings()
    engine = create_async_engine(to_async_url(database_url or settings.database_url))
    try:
        platform = Platform(create_session_factory(engine), settings=settings, dispatch_mode="inline")
        job = await platform.matching.process_matching_job(job_id)
        return {"job_id": job.id, "status": job.status, "matches": len(job.matched_profiles or [])}
    finally:
        await engine.dispose()


@celery_app.task(bind=True)
def process_matching_job_task(self, job_id: str) -> dict:
    """
    Score and rank profiles for a matching job.

    Returns:
        Dict with job id, final status and match count
    """
    start_time = time.time()

    try:
        return asyncio.run(run_matching_job(job_id))

    except Exception as exc:
        TASK_FAILURES.labels(task_name="process_matching_job").inc()
        logger.error(f"Matching task failed for job {job_id}: {exc}")
        raise

    finally:
        duration = time.time() - start_time
        TASK_DURATION.labels(task_name="process_matching_job").observe(duration)
