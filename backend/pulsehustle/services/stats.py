"""
Stats Service - platform-wide counters

Maintains the singleton ``stats`` row:

    - get_platform_stats(): full recompute from gigs and completed payments,
      written back as a full overwrite
    - record_job_creation() / record_job_completion(): event-driven
      increments applied with one atomic UPDATE each
    - record_social_share(): share row plus the gig's share_count, committed
      together

Counters are never read, modified in Python and written back; concurrent
creations and completions therefore cannot lose updates.
"""

import logging
from datetime import date
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select, func

from pulsehustle.errors import NotFoundError, ValidationError
from pulsehustle.models import Gig, Payment, PlatformStats, SocialShare
from pulsehustle.models.stats import ANNUAL_PROJECTION, STATS_ROW_ID, WEEKLY_GOAL
from pulsehustle.services.pricing import split_pay

logger = logging.getLogger(__name__)

LAUNCH_DATE = date(2024, 4, 8)


class PlatformStatsResponse(BaseModel):
    jobs_created: int
    jobs_completed: int
    total_earnings: float
    worker_earnings: float
    platform_fees: float
    weekly_goal: int = WEEKLY_GOAL
    annual_projection: int = ANNUAL_PROJECTION
    launch_date: date = LAUNCH_DATE

    class Config:
        from_attributes = True


class StatsService:
    def __init__(self, gateway, operations):
        self.gateway = gateway
        self.operations = operations

    async def get_platform_stats(self) -> PlatformStatsResponse:
        await self.operations.log("get_stats", "stats", {})

        async with self.gateway.transaction() as uow:
            jobs_created = await uow.scalar(select(func.count(Gig.id))) or 0
            jobs_completed = await uow.scalar(
                select(func.count(Gig.id)).where(Gig.status == "completed")
            ) or 0
            total_earnings = await uow.scalar(
                select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.status == "completed")
            ) or 0

        worker_earnings, platform_fees = split_pay(total_earnings)
        values = dict(
            jobs_created=jobs_created,
            jobs_completed=jobs_completed,
            total_earnings=float(total_earnings),
            worker_earnings=worker_earnings,
            platform_fees=platform_fees,
            weekly_goal=WEEKLY_GOAL,
            annual_projection=ANNUAL_PROJECTION,
        )

        await self.gateway.ensure(PlatformStats, STATS_ROW_ID)
        await self.gateway.update(PlatformStats, STATS_ROW_ID, **values)

        return PlatformStatsResponse(**values)

    async def get_counters(self) -> Optional[PlatformStats]:
        """Current singleton row, as last written."""
        return await self.gateway.get(PlatformStats, STATS_ROW_ID)

    async def record_job_creation(self, gig_id: str) -> PlatformStats:
        await self.operations.log("record_job", "stats", {"gig_id": gig_id})

        await self.gateway.ensure(PlatformStats, STATS_ROW_ID)
        return await self.gateway.increment(PlatformStats, STATS_ROW_ID, jobs_created=1)

    async def record_job_completion(self, gig_id: str) -> PlatformStats:
        await self.operations.log("record_completion", "stats", {"gig_id": gig_id})

        gig = await self.gateway.get(Gig, gig_id)
        if not gig:
            raise NotFoundError(f"Gig with ID {gig_id} not found")

        await self.gateway.ensure(PlatformStats, STATS_ROW_ID)
        return await self.gateway.increment(
            PlatformStats,
            STATS_ROW_ID,
            jobs_completed=1,
            total_earnings=gig.pay or 0,
            worker_earnings=gig.worker_rate or 0,
            platform_fees=gig.platform_fee or 0,
        )

    async def record_social_share(self, gig_id: str, platform: str, user_id: Optional[str] = None) -> SocialShare:
        if not gig_id or not platform:
            raise ValidationError("Missing required fields: gig_id and platform")

        await self.operations.log(
            "record_share", "social_shares", {"gig_id": gig_id, "platform": platform}, user_id=user_id
        )

        async with self.gateway.transaction() as uow:
            if await uow.increment(Gig, gig_id, share_count=1) is None:
                raise NotFoundError(f"Gig with ID {gig_id} not found")
            share = await uow.insert(SocialShare, gig_id=gig_id, platform=platform.lower(), user_id=user_id)

        logger.info(f"Gig {gig_id} shared on {share.platform}")
        return share
