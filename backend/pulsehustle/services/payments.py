"""
Payment Service - payment records and the redirect payment rail

There is no provider SDK or webhook: ``process_paypal_payment`` records a
``pending`` payment and hands back the provider "pay me" link. Nothing
reconciles that payment afterwards; ``update_payment_status`` is the only
way its status changes.

``process_gig_payment`` writes the completed payment and the gig it funds
in one unit of work, so either both rows exist or neither does.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from pulsehustle.errors import NotFoundError, ValidationError
from pulsehustle.middleware.metrics import record_gig_created, record_payment
from pulsehustle.models import Gig, Payment
from pulsehustle.services.pricing import split_pay

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")


def format_amount(amount: Any) -> str:
    """600.0 -> "600", 12.50 -> "12.5" """
    text = format(Decimal(str(amount)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass
class PaypalRedirect:
    payment_id: str
    redirect_url: str
    message: str = "Redirecting to PayPal..."


@dataclass
class GigPayment:
    payment: Payment
    gig: Gig


class PaymentService:
    def __init__(
        self,
        gateway,
        operations,
        provider_url: str,
        recipient_handle: str,
        gig_price: float = 600.0,
        gigs=None,
    ):
        self.gateway = gateway
        self.operations = operations
        self.provider_url = provider_url.rstrip("/")
        self.recipient_handle = recipient_handle
        self.gig_price = gig_price
        self.gigs = gigs

    def redirect_url(self, amount: Any) -> str:
        return f"{self.provider_url}/{self.recipient_handle}/{format_amount(amount)}"

    @staticmethod
    def _validate(data: Dict[str, Any]) -> None:
        amount = data.get("amount")
        if not amount or not data.get("payment_method") or not data.get("status"):
            raise ValidationError("Invalid payment data: amount, payment_method, and status are required")
        if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)) or not math.isfinite(amount) or amount <= 0:
            raise ValidationError("Payment amount must be a positive number")
        if data["status"] not in PAYMENT_STATUSES:
            raise ValidationError(f"Invalid payment status: {data['status']}")

    @staticmethod
    def _payment_values(data: Dict[str, Any]) -> Dict[str, Any]:
        return dict(
            amount=float(data["amount"]),
            status=data["status"],
            payment_method=data["payment_method"],
            description=data.get("description"),
            user_id=data.get("user_id"),
            payment_metadata=data.get("metadata") or {},
        )

    async def record_payment(self, data: Dict[str, Any]) -> Payment:
        self._validate(data)

        payment = await self.gateway.insert(Payment, **self._payment_values(data))
        record_payment(payment.status)

        await self.operations.log(
            "create",
            "payments",
            {"payment_id": payment.id, "amount": payment.amount, "payment_method": payment.payment_method},
            user_id=payment.user_id,
        )
        return payment

    async def get_payment_history(self, user_id: Optional[str]) -> List[Payment]:
        if not user_id:
            raise ValidationError("User ID is required")

        payments = await self.gateway.all(
            select(Payment).where(Payment.user_id == user_id).order_by(Payment.created_at.desc())
        )
        await self.operations.log("read", "payments", {"user_id": user_id, "count": len(payments)}, user_id=user_id)
        return payments

    async def process_paypal_payment(
        self,
        amount: Any,
        description: Optional[str],
        redirect_url: Optional[str],
        user_id: Optional[str] = None,
    ) -> PaypalRedirect:
        payment = await self.record_payment({
            "amount": amount,
            "status": "pending",
            "payment_method": "paypal",
            "description": description,
            "user_id": user_id,
            "metadata": {"redirect_url": redirect_url},
        })

        return PaypalRedirect(payment_id=payment.id, redirect_url=self.redirect_url(amount))

    async def process_gig_payment(self, gig_data: Dict[str, Any], user_id: Optional[str]) -> GigPayment:
        """
        Record a completed fixed-price payment and create the gig it pays for.

        Both rows commit together. Stats and matching follow-ups run after
        the commit and never undo it.
        """
        if not user_id:
            raise ValidationError("User ID is required")
        if not gig_data.get("title") or not gig_data.get("description"):
            raise ValidationError("Gig title and description are required")

        price = self.gig_price
        worker_rate, platform_fee = split_pay(price)
        hours = gig_data.get("hours") or 40

        async with self.gateway.transaction() as uow:
            payment = await uow.insert(
                Payment,
                amount=price,
                status="completed",
                payment_method="paypal",
                description=f"Payment for gig: {gig_data['title']}",
                user_id=user_id,
                payment_metadata={"worker_earnings": worker_rate, "platform_fee": platform_fee},
            )
            gig = await uow.insert(
                Gig,
                title=gig_data["title"],
                description=gig_data["description"],
                hours=hours,
                pay=price,
                worker_rate=worker_rate,
                platform_fee=platform_fee,
                payment_type="fixed",
                location=gig_data.get("location") or "remote",
                remote=gig_data.get("remote") is not False,
                user_id=user_id,
                payment_id=payment.id,
                status="paid",
                skills_required=list(gig_data.get("skills_required") or []),
                duration=gig_data.get("duration") or f"{hours} hours",
            )
            payment = await uow.update(
                Payment,
                payment.id,
                payment_metadata={**payment.payment_metadata, "gig_id": gig.id},
            )

        record_payment(payment.status)
        record_gig_created()
        logger.info(f"Gig {gig.id} created from payment {payment.id}")

        await self.operations.log(
            "create",
            "payments",
            {"payment_id": payment.id, "amount": payment.amount, "payment_method": payment.payment_method},
            user_id=user_id,
        )
        await self.operations.log(
            "create", "gigs", {"gig_id": gig.id, "payment_id": payment.id, "user_id": user_id}, user_id=user_id
        )

        if self.gigs is not None:
            await self.gigs.after_create(gig)

        return GigPayment(payment=payment, gig=gig)

    async def update_payment_status(self, payment_id: str, status: str) -> Payment:
        if not payment_id or not status:
            raise ValidationError("Payment ID and status are required")
        if status not in PAYMENT_STATUSES:
            raise ValidationError(f"Invalid payment status: {status}")

        payment = await self.gateway.update(Payment, payment_id, status=status)
        if not payment:
            raise NotFoundError(f"Payment with ID {payment_id} not found")

        await self.operations.log("update", "payments", {"payment_id": payment_id, "status": status})
        return payment
