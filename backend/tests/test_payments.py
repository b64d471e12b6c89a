"""
Tests for the payment service.

Tests cover:
- Payment recording and validation
- Payment history ordering
- The PayPal redirect rail
- Gig payments committing payment and gig together
- Status updates
"""

import pytest
from unittest.mock import patch
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from pulsehustle.errors import NotFoundError, UpstreamError, ValidationError
from pulsehustle.gateway import UnitOfWork
from pulsehustle.models import Gig, MatchingJob, Payment, PlatformStats
from pulsehustle.models.stats import STATS_ROW_ID
from pulsehustle.services.payments import format_amount


async def count(platform, model, *where):
    return await platform.gateway.scalar(select(func.count()).select_from(model).where(*where))


def payment_data(**overrides):
    data = {
        "amount": 600,
        "payment_method": "paypal",
        "status": "completed",
        "description": "Logo Design",
        "user_id": "user-1",
    }
    data.update(overrides)
    return data


class TestRecordPayment:
    """Test record_payment."""

    @pytest.mark.asyncio
    async def test_records_payment(self, platform):
        payment = await platform.payments.record_payment(payment_data(metadata={"source": "web"}))

        stored = await platform.gateway.get(Payment, payment.id)
        assert stored.amount == 600
        assert stored.status == "completed"
        assert stored.payment_method == "paypal"
        assert stored.payment_metadata == {"source": "web"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["amount", "payment_method", "status"])
    async def test_required_fields(self, platform, missing):
        data = payment_data()
        del data[missing]

        with pytest.raises(ValidationError) as exc_info:
            await platform.payments.record_payment(data)

        assert "amount, payment_method, and status are required" in exc_info.value.message
        assert await count(platform, Payment) == 0

    @pytest.mark.asyncio
    async def test_negative_amount(self, platform):
        with pytest.raises(ValidationError):
            await platform.payments.record_payment(payment_data(amount=-5))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [float("nan"), float("inf")])
    async def test_non_finite_amount_records_nothing(self, platform, amount):
        with pytest.raises(ValidationError):
            await platform.payments.record_payment(payment_data(amount=amount))

        assert await count(platform, Payment) == 0

    @pytest.mark.asyncio
    async def test_unknown_status(self, platform):
        with pytest.raises(ValidationError):
            await platform.payments.record_payment(payment_data(status="settled"))


class TestPaymentHistory:

    @pytest.mark.asyncio
    async def test_newest_first_for_user_only(self, platform):
        first = await platform.payments.record_payment(payment_data(amount=10))
        second = await platform.payments.record_payment(payment_data(amount=20))
        await platform.payments.record_payment(payment_data(amount=30, user_id="user-2"))

        history = await platform.payments.get_payment_history("user-1")

        assert [p.id for p in history] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_requires_user(self, platform):
        with pytest.raises(ValidationError):
            await platform.payments.get_payment_history(None)


class TestPaypalPayment:
    """Test the redirect payment rail."""

    @pytest.mark.asyncio
    async def test_pending_payment_and_redirect(self, platform):
        redirect = await platform.payments.process_paypal_payment(
            600, "Gig payment", "https://app.example.com/done", "user-1"
        )

        assert redirect.redirect_url == "https://www.paypal.com/paypalme/invinciblelude/600"
        assert redirect.message == "Redirecting to PayPal..."

        payment = await platform.gateway.get(Payment, redirect.payment_id)
        assert payment.status == "pending"
        assert payment.payment_method == "paypal"
        assert payment.payment_metadata == {"redirect_url": "https://app.example.com/done"}

    @pytest.mark.asyncio
    async def test_invalid_amount_records_nothing(self, platform):
        with pytest.raises(ValidationError):
            await platform.payments.process_paypal_payment(0, "Nothing", None, "user-1")

        assert await count(platform, Payment) == 0

    @pytest.mark.parametrize("amount,text", [(600.0, "600"), (12.5, "12.5"), (99.99, "99.99"), (40, "40")])
    def test_format_amount(self, amount, text):
        assert format_amount(amount) == text


class TestGigPayment:
    """Test process_gig_payment."""

    @pytest.mark.asyncio
    async def test_creates_payment_and_gig(self, platform):
        result = await platform.payments.process_gig_payment(
            {"title": "Logo Design", "description": "A new logo"}, "user-1"
        )

        payment, gig = result.payment, result.gig
        assert payment.amount == 600
        assert payment.status == "completed"
        assert payment.description == "Payment for gig: Logo Design"
        assert payment.payment_metadata["worker_earnings"] == 570
        assert payment.payment_metadata["platform_fee"] == 30
        assert payment.payment_metadata["gig_id"] == gig.id

        assert gig.status == "paid"
        assert gig.pay == 600
        assert gig.worker_rate == 570
        assert gig.platform_fee == 30
        assert gig.payment_id == payment.id
        assert gig.user_id == "user-1"

    @pytest.mark.asyncio
    async def test_runs_gig_follow_ups(self, platform):
        result = await platform.payments.process_gig_payment(
            {"title": "Logo Design", "description": "A new logo"}, "user-1"
        )

        stats = await platform.gateway.get(PlatformStats, STATS_ROW_ID)
        assert stats.jobs_created == 1
        assert await count(platform, MatchingJob, MatchingJob.gig_id == result.gig.id) == 1

    @pytest.mark.asyncio
    async def test_price_ignores_requested_pay(self, platform):
        result = await platform.payments.process_gig_payment(
            {"title": "Cheap", "description": "Try to pay less", "pay": 5}, "user-1"
        )

        assert result.payment.amount == 600
        assert result.gig.pay == 600

    @pytest.mark.asyncio
    async def test_requires_user(self, platform):
        with pytest.raises(ValidationError):
            await platform.payments.process_gig_payment({"title": "T", "description": "D"}, None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("gig_data", [{"title": "Only title"}, {"description": "Only description"}])
    async def test_requires_title_and_description(self, platform, gig_data):
        with pytest.raises(ValidationError):
            await platform.payments.process_gig_payment(gig_data, "user-1")

        assert await count(platform, Payment) == 0
        assert await count(platform, Gig) == 0

    @pytest.mark.asyncio
    async def test_gig_insert_failure_rolls_back_payment(self, platform):
        """No payment survives when the gig row cannot be written."""
        original_insert = UnitOfWork.insert

        async def failing_insert(self, model, **values):
            if model is Gig:
                raise SQLAlchemyError("gig insert failed")
            return await original_insert(self, model, **values)

        with patch.object(UnitOfWork, "insert", failing_insert):
            with pytest.raises(UpstreamError):
                await platform.payments.process_gig_payment(
                    {"title": "Doomed", "description": "Never created"}, "user-1"
                )

        assert await count(platform, Payment) == 0
        assert await count(platform, Gig) == 0

    @pytest.mark.asyncio
    async def test_rolled_back_payment_publishes_nothing(self, platform):
        events = []
        platform.feed.subscribe("payments", events.append)
        original_insert = UnitOfWork.insert

        async def failing_insert(self, model, **values):
            if model is Gig:
                raise SQLAlchemyError("gig insert failed")
            return await original_insert(self, model, **values)

        with patch.object(UnitOfWork, "insert", failing_insert):
            with pytest.raises(UpstreamError):
                await platform.payments.process_gig_payment(
                    {"title": "Doomed", "description": "Never created"}, "user-1"
                )

        assert events == []


class TestUpdatePaymentStatus:

    @pytest.mark.asyncio
    async def test_any_to_any(self, platform):
        payment = await platform.payments.record_payment(payment_data(status="completed"))

        refunded = await platform.payments.update_payment_status(payment.id, "refunded")
        pending = await platform.payments.update_payment_status(payment.id, "pending")

        assert refunded.status == "refunded"
        assert pending.status == "pending"

    @pytest.mark.asyncio
    async def test_invalid_status(self, platform):
        payment = await platform.payments.record_payment(payment_data())

        with pytest.raises(ValidationError):
            await platform.payments.update_payment_status(payment.id, "lost")

    @pytest.mark.asyncio
    async def test_missing_payment(self, platform):
        with pytest.raises(NotFoundError):
            await platform.payments.update_payment_status("missing", "failed")
