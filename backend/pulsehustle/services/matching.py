"""
AI Matching Service - gig/worker matching jobs

Flow:
    create_matching_job(gig_id)
        → inserts a ``pending`` job
        → dispatches process_matching_job(job_id) (fire-and-forget)
    process_matching_job(job_id)
        → processing → score every profile → top K → completed
        → on any failure: failed (completed_at set) and the error re-raised
    get_gig_matches(gig_id)
        → profiles of the latest completed job, best score first
        → creates a job and reports "pending" when none has completed

Dispatch modes (MATCHING_DISPATCH setting):
    background  asyncio task started after ``matching_delay_seconds``
    celery      Celery task with ``countdown=matching_delay_seconds``
    inline      processed before dispatch() returns (tests, scripts)
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from sqlalchemy import select

from pulsehustle.database import utcnow
from pulsehustle.errors import NotFoundError, ValidationError
from pulsehustle.middleware.metrics import record_matching_job
from pulsehustle.models import Gig, MatchingJob, Profile
from pulsehustle.services.matcher import MatchScorer

logger = logging.getLogger(__name__)

DISPATCH_MODES = ("background", "celery", "inline")
PROFILE_SUMMARY_FIELDS = ("id", "username", "full_name", "avatar_url", "skills", "hourly_rate")


class MatchingDispatcher:
    """
    Runs matching jobs away from the request that created them.

    ``dispatch`` returns a handle: the ``asyncio.Task`` in background mode,
    the Celery ``AsyncResult`` in celery mode, and None inline.
    """

    def __init__(self, mode: str = "background", delay: float = 0.1):
        if mode not in DISPATCH_MODES:
            raise ValueError(f"Unknown matching dispatch mode: {mode}")
        self.mode = mode
        self.delay = delay
        self._processor: Optional[Callable[[str], Awaitable[Any]]] = None
        self._tasks: Set[asyncio.Task] = set()

    def bind(self, processor: Callable[[str], Awaitable[Any]]) -> None:
        self._processor = processor

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def dispatch(self, job_id: str):
        if self.mode == "celery":
            from pulsehustle.tasks.matching import process_matching_job_task

            return process_matching_job_task.apply_async(args=[job_id], countdown=self.delay)

        if self.mode == "inline":
            await self._run(job_id)
            return None

        task = asyncio.create_task(self._run_later(job_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every background job dispatched so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run_later(self, job_id: str) -> None:
        await asyncio.sleep(self.delay)
        await self._run(job_id)

    async def _run(self, job_id: str) -> None:
        if self._processor is None:
            raise RuntimeError("MatchingDispatcher has no processor bound")
        try:
            await self._processor(job_id)
        except Exception as e:
            # The job row already records the failure
            logger.error(f"Matching job {job_id} failed: {e}")


class MatchingService:
    def __init__(
        self,
        gateway,
        operations,
        scorer: MatchScorer,
        dispatcher: MatchingDispatcher,
        top_k: int = 5,
        cache=None,
    ):
        self.gateway = gateway
        self.operations = operations
        self.scorer = scorer
        self.dispatcher = dispatcher
        self.top_k = top_k
        self.cache = cache
        dispatcher.bind(self.process_matching_job)

    async def create_matching_job(self, gig_id: str) -> MatchingJob:
        if not gig_id:
            raise ValidationError("Gig ID is required")

        gig = await self.gateway.get(Gig, gig_id)
        if not gig:
            raise NotFoundError(f"Gig with ID {gig_id} not found")

        job = await self.gateway.insert(MatchingJob, gig_id=gig_id, status="pending")
        await self.operations.log("create", "ai_matching_jobs", {"job_id": job.id, "gig_id": gig_id})

        if self.cache is not None:
            await self.cache.invalidate_matches(gig_id)

        await self.dispatcher.dispatch(job.id)
        return job

    async def process_matching_job(self, job_id: str) -> MatchingJob:
        if not job_id:
            raise ValidationError("Job ID is required")

        job = await self.gateway.get(MatchingJob, job_id)
        if not job:
            raise NotFoundError(f"Job with ID {job_id} not found")

        start_time = time.perf_counter()
        try:
            await self.gateway.update(MatchingJob, job_id, status="processing")

            gig = await self.gateway.get(Gig, job.gig_id)
            if not gig:
                raise NotFoundError(f"Gig with ID {job.gig_id} not found")

            profiles = await self.gateway.all(select(Profile))
            scores = [
                {"profile_id": profile.id, "score": float(self.scorer.score(profile, gig))}
                for profile in profiles
            ]
            scores.sort(key=lambda entry: entry["score"], reverse=True)
            top = scores[:self.top_k]

            job = await self.gateway.update(
                MatchingJob,
                job_id,
                status="completed",
                matched_profiles=[entry["profile_id"] for entry in top],
                matching_score=top,
                completed_at=utcnow(),
            )
        except Exception:
            try:
                await self.gateway.update(MatchingJob, job_id, status="failed", completed_at=utcnow())
            except Exception as e:
                logger.error(f"Could not mark matching job {job_id} failed: {e}")
            record_matching_job("failed", time.perf_counter() - start_time)
            raise

        record_matching_job("completed", time.perf_counter() - start_time)
        logger.info(f"Matching job {job_id} completed with {len(top)} matches")

        await self.operations.log(
            "update",
            "ai_matching_jobs",
            {"job_id": job_id, "status": "completed", "matches_count": len(top)},
        )
        if self.cache is not None:
            await self.cache.invalidate_matches(job.gig_id)

        return job

    async def latest_completed_job(self, gig_id: str) -> Optional[MatchingJob]:
        return await self.gateway.first(
            select(MatchingJob)
            .where(MatchingJob.gig_id == gig_id, MatchingJob.status == "completed")
            .order_by(MatchingJob.completed_at.desc())
            .limit(1)
        )

    async def get_gig_matches(self, gig_id: str) -> Dict[str, Any]:
        """
        Returns:
            {"status": "pending" | "completed", "message": str,
             "job_id": str, "matches": [profile summary + match_score, ...]}
        """
        if not gig_id:
            raise ValidationError("Gig ID is required")

        job = await self.latest_completed_job(gig_id)
        if not job:
            new_job = await self.create_matching_job(gig_id)
            return {
                "status": "pending",
                "message": "Matching job created",
                "job_id": new_job.id,
                "matches": [],
            }

        matches = None
        if self.cache is not None:
            matches = await self.cache.get_matches(gig_id)

        if matches is None:
            matches = await self._join_profiles(job)
            if self.cache is not None:
                await self.cache.set_matches(gig_id, matches)

        return {
            "status": "completed",
            "message": "Matches found",
            "job_id": job.id,
            "matches": matches,
        }

    async def _join_profiles(self, job: MatchingJob) -> List[Dict[str, Any]]:
        profile_ids = list(job.matched_profiles or [])
        if not profile_ids:
            return []

        profiles = await self.gateway.all(select(Profile).where(Profile.id.in_(profile_ids)))
        scores = {entry["profile_id"]: entry["score"] for entry in (job.matching_score or [])}

        matches = []
        for profile in profiles:
            summary = {field: getattr(profile, field) for field in PROFILE_SUMMARY_FIELDS}
            summary["match_score"] = scores.get(profile.id)
            matches.append(summary)

        matches.sort(key=lambda m: m["match_score"] if m["match_score"] is not None else -1, reverse=True)
        return matches
