"""
Tests for platform stats.

Tests cover:
- Full recompute from gigs and completed payments
- Atomic event-driven counters under concurrency
- Completion accounting
- Social share recording
"""

import asyncio
from datetime import date

import pytest

from sqlalchemy import func, select

from pulsehustle.errors import NotFoundError, ValidationError
from pulsehustle.models import Gig, Payment, PlatformStats, SocialShare
from pulsehustle.models.stats import STATS_ROW_ID


async def insert_gig(platform, **values):
    defaults = dict(title="Gig", pay=600.0, worker_rate=570.0, platform_fee=30.0, user_id="owner-1")
    defaults.update(values)
    return await platform.gateway.insert(Gig, **defaults)


class TestGetPlatformStats:
    """Test the full recompute."""

    @pytest.mark.asyncio
    async def test_empty_platform(self, platform):
        stats = await platform.stats.get_platform_stats()

        assert stats.jobs_created == 0
        assert stats.jobs_completed == 0
        assert stats.total_earnings == 0
        assert stats.weekly_goal == 10
        assert stats.annual_projection == 520
        assert stats.launch_date == date(2024, 4, 8)

    @pytest.mark.asyncio
    async def test_recompute_from_rows(self, platform):
        await insert_gig(platform)
        await insert_gig(platform, status="completed")
        await insert_gig(platform, status="completed")
        await platform.gateway.insert(Payment, amount=600.0, status="completed", payment_method="paypal")
        await platform.gateway.insert(Payment, amount=400.0, status="completed", payment_method="paypal")
        await platform.gateway.insert(Payment, amount=999.0, status="pending", payment_method="paypal")

        stats = await platform.stats.get_platform_stats()

        assert stats.jobs_created == 3
        assert stats.jobs_completed == 2
        assert stats.total_earnings == 1000
        assert stats.worker_earnings == 950
        assert stats.platform_fees == 50

    @pytest.mark.asyncio
    async def test_repeated_recompute_is_stable(self, platform):
        """Two recomputes with no writes between return the same stats."""
        await insert_gig(platform, status="completed")
        await platform.gateway.insert(Payment, amount=600.0, status="completed", payment_method="paypal")

        first = await platform.stats.get_platform_stats()
        second = await platform.stats.get_platform_stats()

        assert first == second
        row = await platform.stats.get_counters()
        assert row.jobs_created == second.jobs_created
        assert row.total_earnings == second.total_earnings

    @pytest.mark.asyncio
    async def test_recompute_overwrites_row(self, platform):
        await platform.stats.record_job_creation("gig-1")
        await platform.stats.record_job_creation("gig-2")

        await platform.stats.get_platform_stats()

        row = await platform.stats.get_counters()
        assert row.jobs_created == 0


class TestCounters:
    """Test atomic increments."""

    @pytest.mark.asyncio
    async def test_concurrent_creations_are_not_lost(self, platform):
        """Twenty concurrent increments leave the counter at twenty."""
        await asyncio.gather(*(platform.stats.record_job_creation(f"gig-{i}") for i in range(20)))

        row = await platform.gateway.get(PlatformStats, STATS_ROW_ID)
        assert row.jobs_created == 20

    @pytest.mark.asyncio
    async def test_completion_adds_gig_amounts(self, platform):
        first = await insert_gig(platform, pay=600.0, worker_rate=570.0, platform_fee=30.0)
        second = await insert_gig(platform, pay=30.0, worker_rate=29.0, platform_fee=1.0)

        await platform.stats.record_job_completion(first.id)
        row = await platform.stats.record_job_completion(second.id)

        assert row.jobs_completed == 2
        assert row.total_earnings == 630
        assert row.worker_earnings == 599
        assert row.platform_fees == 31

    @pytest.mark.asyncio
    async def test_completion_of_missing_gig(self, platform):
        with pytest.raises(NotFoundError):
            await platform.stats.record_job_completion("missing")

    @pytest.mark.asyncio
    async def test_counters_absent_before_first_write(self, platform):
        assert await platform.stats.get_counters() is None


class TestSocialShares:
    """Test share recording and the per-gig share counter."""

    @pytest.mark.asyncio
    async def test_records_share_and_bumps_counter(self, platform):
        gig = await insert_gig(platform)

        share = await platform.stats.record_social_share(gig.id, "Twitter", "user-1")

        assert share.gig_id == gig.id
        assert share.platform == "twitter"
        assert share.user_id == "user-1"
        assert (await platform.gateway.get(Gig, gig.id)).share_count == 1

    @pytest.mark.asyncio
    async def test_anonymous_share(self, platform):
        gig = await insert_gig(platform)

        share = await platform.stats.record_social_share(gig.id, "linkedin")

        assert share.user_id is None

    @pytest.mark.asyncio
    async def test_concurrent_shares_are_not_lost(self, platform):
        gig = await insert_gig(platform)

        await asyncio.gather(*(platform.stats.record_social_share(gig.id, "facebook") for _ in range(10)))

        assert (await platform.gateway.get(Gig, gig.id)).share_count == 10
        total = await platform.gateway.scalar(
            select(func.count()).select_from(SocialShare).where(SocialShare.gig_id == gig.id)
        )
        assert total == 10

    @pytest.mark.asyncio
    @pytest.mark.parametrize("gig_id, share_platform", [("", "twitter"), ("gig-1", ""), (None, None)])
    async def test_required_fields(self, platform, gig_id, share_platform):
        with pytest.raises(ValidationError):
            await platform.stats.record_social_share(gig_id, share_platform)

    @pytest.mark.asyncio
    async def test_missing_gig_records_nothing(self, platform):
        with pytest.raises(NotFoundError):
            await platform.stats.record_social_share("missing", "twitter")

        total = await platform.gateway.scalar(select(func.count()).select_from(SocialShare))
        assert total == 0
