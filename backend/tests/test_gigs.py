"""
Tests for the gig service.

Tests cover:
- Gig creation defaults, pay split and side effects
- Filtering, ordering and pagination
- Owner-only updates and terminal statuses
- Permissive status changes and completion accounting
"""

import asyncio

import pytest
from unittest.mock import AsyncMock
from sqlalchemy import func, select

from pulsehustle.errors import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    UpstreamError,
    ValidationError,
)
from pulsehustle.models import AuditLog, Gig, MatchingJob, PlatformStats
from pulsehustle.models.stats import STATS_ROW_ID


async def count(platform, model, *where):
    return await platform.gateway.scalar(select(func.count()).select_from(model).where(*where))


class TestCreateGig:
    """Test create_gig."""

    @pytest.mark.asyncio
    async def test_logo_design_gig(self, platform):
        """A 600 gig splits 570/30, starts posted and gets one matching job."""
        gig = await platform.gigs.create_gig({"title": "Logo Design", "pay": 600}, "owner-1")

        assert gig.worker_rate == 570
        assert gig.platform_fee == 30
        assert gig.status == "posted"
        assert await count(platform, MatchingJob, MatchingJob.gig_id == gig.id) == 1

    @pytest.mark.asyncio
    async def test_defaults(self, platform):
        gig = await platform.gigs.create_gig({"title": "Data entry"}, "owner-1")

        assert gig.hours == 40
        assert gig.pay == 600
        assert gig.payment_type == "fixed"
        assert gig.location == "remote"
        assert gig.remote is True
        assert gig.skills_required == []
        assert gig.duration == "40 hours"
        assert gig.user_id == "owner-1"

    @pytest.mark.asyncio
    async def test_duration_follows_hours(self, platform):
        gig = await platform.gigs.create_gig({"title": "Short job", "hours": 8, "remote": False}, "owner-1")

        assert gig.duration == "8 hours"
        assert gig.remote is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pay,worker_rate,platform_fee", [
        (10, 10, 0),      # 9.5 rounds half up
        (30, 29, 1),      # 28.5 rounds half up
        (101, 96, 5),     # 95.95
        (250.5, 238, 12.5),
    ])
    async def test_pay_split_rounds_half_up(self, platform, pay, worker_rate, platform_fee):
        gig = await platform.gigs.create_gig({"title": "Split", "pay": pay}, "owner-1")

        assert gig.worker_rate == worker_rate
        assert gig.platform_fee == platform_fee
        assert gig.worker_rate + gig.platform_fee == gig.pay

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [{}, {"title": ""}, {"title": "   "}, {"description": "no title"}])
    async def test_missing_title_persists_nothing(self, platform, data):
        with pytest.raises(ValidationError):
            await platform.gigs.create_gig(data, "owner-1")

        assert await count(platform, Gig) == 0
        assert await count(platform, MatchingJob) == 0

    @pytest.mark.asyncio
    async def test_missing_owner_persists_nothing(self, platform):
        with pytest.raises(ValidationError):
            await platform.gigs.create_gig({"title": "Orphan"}, None)

        assert await count(platform, Gig) == 0

    @pytest.mark.asyncio
    async def test_non_positive_hours_rejected(self, platform):
        with pytest.raises(ValidationError):
            await platform.gigs.create_gig({"title": "Bad hours", "hours": 0}, "owner-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pay", [float("nan"), float("inf"), -float("inf")])
    async def test_non_finite_pay_rejected(self, platform, pay):
        with pytest.raises(ValidationError):
            await platform.gigs.create_gig({"title": "Bad pay", "pay": pay}, "owner-1")

        assert await count(platform, Gig) == 0

    @pytest.mark.asyncio
    async def test_fractional_hours_rejected(self, platform):
        with pytest.raises(ValidationError):
            await platform.gigs.create_gig({"title": "Half hour", "hours": 2.5}, "owner-1")

    @pytest.mark.asyncio
    async def test_whole_float_hours_accepted(self, platform):
        gig = await platform.gigs.create_gig({"title": "Eight hours", "hours": 8.0}, "owner-1")

        assert gig.hours == 8

    @pytest.mark.asyncio
    async def test_increments_jobs_created(self, platform):
        await platform.gigs.create_gig({"title": "One"}, "owner-1")
        await platform.gigs.create_gig({"title": "Two"}, "owner-1")

        stats = await platform.gateway.get(PlatformStats, STATS_ROW_ID)
        assert stats.jobs_created == 2

    @pytest.mark.asyncio
    async def test_writes_audit_entry(self, platform):
        await platform.gigs.create_gig({"title": "Audited"}, "owner-1")

        assert await count(platform, AuditLog, AuditLog.operation == "create_gig") == 1

    @pytest.mark.asyncio
    async def test_side_effect_failure_keeps_gig(self, platform):
        """Stats and matching failures are logged, not propagated."""
        platform.stats.record_job_creation = AsyncMock(side_effect=UpstreamError("store down"))
        platform.matching.create_matching_job = AsyncMock(side_effect=UpstreamError("store down"))

        gig = await platform.gigs.create_gig({"title": "Survivor"}, "owner-1")

        assert await platform.gateway.get(Gig, gig.id) is not None


class TestGetGigs:
    """Test get_gigs filters and pagination."""

    @pytest.fixture
    async def fixture_gigs(self, platform):
        gigs = {}
        for name, pay, payment_type in [
            ("hourly-a", 20, "hourly"),
            ("hourly-b", 50, "hourly"),
            ("hourly-c", 80, "hourly"),
            ("fixed-a", 30, "fixed"),
            ("fixed-b", 600, "fixed"),
        ]:
            gigs[name] = await platform.gigs.create_gig(
                {"title": name, "pay": pay, "payment_type": payment_type}, "owner-1"
            )
        return gigs

    @pytest.mark.asyncio
    async def test_payment_type_and_rate_range(self, platform, fixture_gigs):
        """Two hourly gigs in [20, 50] out of five."""
        page = await platform.gigs.get_gigs({"payment_type": "hourly", "rate_range": (20, 50)})

        assert {gig.title for gig in page.items} == {"hourly-a", "hourly-b"}
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_newest_first(self, platform, fixture_gigs):
        page = await platform.gigs.get_gigs()

        titles = [gig.title for gig in page.items]
        assert titles == ["fixed-b", "fixed-a", "hourly-c", "hourly-b", "hourly-a"]

    @pytest.mark.asyncio
    async def test_pagination(self, platform, fixture_gigs):
        page = await platform.gigs.get_gigs({"page": 2, "per_page": 2})

        assert [gig.title for gig in page.items] == ["hourly-c", "hourly-b"]
        assert page.page == 2
        assert page.per_page == 2
        assert page.total == 5

    @pytest.mark.asyncio
    async def test_default_per_page_is_ten(self, platform):
        for i in range(12):
            await platform.gigs.create_gig({"title": f"gig {i}"}, "owner-1")

        page = await platform.gigs.get_gigs()

        assert len(page.items) == 10
        assert page.total == 12

    @pytest.mark.asyncio
    async def test_search_title_or_description_case_insensitive(self, platform):
        await platform.gigs.create_gig({"title": "Logo Design"}, "owner-1")
        await platform.gigs.create_gig({"title": "Branding", "description": "Needs a new LOGO"}, "owner-1")
        await platform.gigs.create_gig({"title": "Copywriting"}, "owner-1")

        page = await platform.gigs.get_gigs({"search": "logo"})

        assert {gig.title for gig in page.items} == {"Logo Design", "Branding"}

    @pytest.mark.asyncio
    async def test_skills_use_and_semantics(self, platform):
        await platform.gigs.create_gig({"title": "both", "skills_required": ["python", "sql"]}, "owner-1")
        await platform.gigs.create_gig({"title": "python only", "skills_required": ["python"]}, "owner-1")
        await platform.gigs.create_gig({"title": "none"}, "owner-1")

        page = await platform.gigs.get_gigs({"skills": ["python", "sql"]})
        assert [gig.title for gig in page.items] == ["both"]

        page = await platform.gigs.get_gigs({"skills": ["python"]})
        assert {gig.title for gig in page.items} == {"both", "python only"}

    @pytest.mark.asyncio
    async def test_owner_status_and_remote_filters(self, platform):
        mine = await platform.gigs.create_gig({"title": "mine", "remote": False}, "owner-1")
        await platform.gigs.create_gig({"title": "theirs"}, "owner-2")
        await platform.gigs.change_gig_status(mine.id, "processing", "owner-1")

        assert [g.title for g in (await platform.gigs.get_gigs({"user_id": "owner-1"})).items] == ["mine"]
        assert [g.title for g in (await platform.gigs.get_gigs({"status": "processing"})).items] == ["mine"]
        assert [g.title for g in (await platform.gigs.get_gigs({"remote": True})).items] == ["theirs"]

    @pytest.mark.asyncio
    async def test_invalid_page_rejected(self, platform):
        with pytest.raises(ValidationError):
            await platform.gigs.get_gigs({"page": 0})


class TestGetGigById:

    @pytest.mark.asyncio
    async def test_found(self, platform):
        gig = await platform.gigs.create_gig({"title": "Find me"}, "owner-1")

        found = await platform.gigs.get_gig_by_id(gig.id)

        assert found.title == "Find me"

    @pytest.mark.asyncio
    async def test_missing(self, platform):
        with pytest.raises(NotFoundError):
            await platform.gigs.get_gig_by_id("missing")


class TestUpdateGig:
    """Test update_gig ownership, whitelist and re-matching."""

    @pytest.fixture
    async def gig(self, platform):
        return await platform.gigs.create_gig(
            {"title": "Original", "description": "desc", "skills_required": ["design"]}, "owner-1"
        )

    @pytest.mark.asyncio
    async def test_non_owner_rejected(self, platform, gig):
        with pytest.raises(PermissionDeniedError):
            await platform.gigs.update_gig(gig.id, {"title": "Hijacked"}, "intruder")

        assert (await platform.gateway.get(Gig, gig.id)).title == "Original"

    @pytest.mark.asyncio
    async def test_missing_gig(self, platform):
        with pytest.raises(NotFoundError):
            await platform.gigs.update_gig("missing", {"title": "x"}, "owner-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["completed", "cancelled"])
    async def test_terminal_status_blocks_update(self, platform, gig, status):
        await platform.gigs.change_gig_status(gig.id, status, "owner-1")

        with pytest.raises(InvalidStateError):
            await platform.gigs.update_gig(gig.id, {"title": "Too late"}, "owner-1")

    @pytest.mark.asyncio
    async def test_non_finite_pay_update_rejected(self, platform, gig):
        with pytest.raises(ValidationError):
            await platform.gigs.update_gig(gig.id, {"pay": float("nan")}, "owner-1")

        assert (await platform.gateway.get(Gig, gig.id)).pay == 600

    @pytest.mark.asyncio
    async def test_pay_update_recomputes_split(self, platform, gig):
        updated = await platform.gigs.update_gig(gig.id, {"pay": 30}, "owner-1")

        assert updated.pay == 30
        assert updated.worker_rate == 29
        assert updated.platform_fee == 1

    @pytest.mark.asyncio
    async def test_pay_ignored_when_paid(self, platform, gig):
        await platform.gigs.change_gig_status(gig.id, "paid", "owner-1")

        updated = await platform.gigs.update_gig(gig.id, {"pay": 30, "hours": 10}, "owner-1")

        assert updated.pay == 600
        assert updated.worker_rate == 570
        assert updated.hours == 10

    @pytest.mark.asyncio
    async def test_non_whitelisted_fields_ignored(self, platform, gig):
        updated = await platform.gigs.update_gig(
            gig.id, {"user_id": "intruder", "status": "completed", "worker_rate": 1}, "owner-1"
        )

        assert updated.user_id == "owner-1"
        assert updated.status == "posted"
        assert updated.worker_rate == 570

    @pytest.mark.asyncio
    async def test_title_change_enqueues_matching(self, platform, gig):
        await platform.gigs.update_gig(gig.id, {"title": "Renamed"}, "owner-1")

        assert await count(platform, MatchingJob, MatchingJob.gig_id == gig.id) == 2

    @pytest.mark.asyncio
    async def test_skills_change_enqueues_matching(self, platform, gig):
        await platform.gigs.update_gig(gig.id, {"skills_required": ["design", "branding"]}, "owner-1")

        assert await count(platform, MatchingJob, MatchingJob.gig_id == gig.id) == 2

    @pytest.mark.asyncio
    async def test_other_fields_do_not_enqueue_matching(self, platform, gig):
        await platform.gigs.update_gig(gig.id, {"hours": 20, "location": "onsite", "title": "Original"}, "owner-1")

        assert await count(platform, MatchingJob, MatchingJob.gig_id == gig.id) == 1


class TestChangeGigStatus:
    """Test change_gig_status."""

    @pytest.fixture
    async def gig(self, platform):
        return await platform.gigs.create_gig({"title": "Lifecycle", "pay": 600}, "owner-1")

    @pytest.mark.asyncio
    async def test_invalid_status(self, platform, gig):
        with pytest.raises(ValidationError):
            await platform.gigs.change_gig_status(gig.id, "archived", "owner-1")

    @pytest.mark.asyncio
    async def test_non_owner_rejected(self, platform, gig):
        with pytest.raises(PermissionDeniedError):
            await platform.gigs.change_gig_status(gig.id, "cancelled", "intruder")

    @pytest.mark.asyncio
    async def test_ownership_checked_before_status(self, platform, gig):
        with pytest.raises(PermissionDeniedError):
            await platform.gigs.change_gig_status(gig.id, "archived", "intruder")

    @pytest.mark.asyncio
    async def test_missing_gig_with_invalid_status(self, platform):
        with pytest.raises(NotFoundError):
            await platform.gigs.change_gig_status("missing", "archived", "owner-1")

    @pytest.mark.asyncio
    async def test_completion_updates_stats(self, platform, gig):
        await platform.gigs.change_gig_status(gig.id, "completed", "owner-1")

        stats = await platform.gateway.get(PlatformStats, STATS_ROW_ID)
        assert stats.jobs_completed == 1
        assert stats.total_earnings == 600
        assert stats.worker_earnings == 570
        assert stats.platform_fees == 30

    @pytest.mark.asyncio
    async def test_cancellation_only_writes_status(self, platform, gig):
        updated = await platform.gigs.change_gig_status(gig.id, "cancelled", "owner-1")

        stats = await platform.gateway.get(PlatformStats, STATS_ROW_ID)
        assert updated.status == "cancelled"
        assert stats.jobs_completed == 0
        assert stats.total_earnings == 0

    @pytest.mark.asyncio
    async def test_any_to_any_transition(self, platform, gig):
        await platform.gigs.change_gig_status(gig.id, "completed", "owner-1")
        reopened = await platform.gigs.change_gig_status(gig.id, "posted", "owner-1")

        assert reopened.status == "posted"

    @pytest.mark.asyncio
    async def test_completing_twice_counts_once(self, platform, gig):
        await platform.gigs.change_gig_status(gig.id, "completed", "owner-1")
        await platform.gigs.change_gig_status(gig.id, "completed", "owner-1")

        stats = await platform.gateway.get(PlatformStats, STATS_ROW_ID)
        assert stats.jobs_completed == 1

    @pytest.mark.asyncio
    async def test_concurrent_completion_counted_once(self, platform, gig):
        """Five simultaneous completions of one gig add to the stats once."""
        results = await asyncio.gather(
            *(platform.gigs.change_gig_status(gig.id, "completed", "owner-1") for _ in range(5))
        )

        stats = await platform.gateway.get(PlatformStats, STATS_ROW_ID)
        assert {result.status for result in results} == {"completed"}
        assert stats.jobs_completed == 1
        assert stats.total_earnings == 600
        assert stats.worker_earnings == 570
        assert stats.platform_fees == 30

    @pytest.mark.asyncio
    async def test_completion_after_reopening_counts_again(self, platform, gig):
        await platform.gigs.change_gig_status(gig.id, "completed", "owner-1")
        await platform.gigs.change_gig_status(gig.id, "processing", "owner-1")
        await platform.gigs.change_gig_status(gig.id, "completed", "owner-1")

        stats = await platform.gateway.get(PlatformStats, STATS_ROW_ID)
        assert stats.jobs_completed == 2


class TestCalculateGigPrice:

    @pytest.mark.asyncio
    async def test_delegates_to_pricing(self, platform):
        quote = await platform.gigs.calculate_gig_price(10)

        assert quote.hours == 10
        assert 150 <= quote.total_price <= 250
