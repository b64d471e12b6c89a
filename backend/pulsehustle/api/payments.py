from fastapi import APIRouter, Depends
from typing import Optional

from pulsehustle.api.deps import get_current_user_id, respond
from pulsehustle.auth import require_api_key
from pulsehustle.platform import Platform, get_platform
from pulsehustle.schemas import (
    GigPaymentRequest,
    GigPaymentResponse,
    PaymentResponse,
    PaymentStatusUpdate,
    PaypalPaymentRequest,
    PaypalPaymentResponse,
    PriceRequest,
)
from pulsehustle.services.pricing import PriceQuote

router = APIRouter()


@router.post("/pay", dependencies=[Depends(require_api_key)])
async def pay_for_gig(
    request: GigPaymentRequest,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.payments.process_gig_payment,
        request.model_dump(exclude_none=True),
        user_id,
        label="Gig payment",
        context={"user_id": user_id},
        message="Gig created successfully",
    )
    return respond(result, GigPaymentResponse, status_code=201)


@router.post("/payments/paypal", dependencies=[Depends(require_api_key)])
async def paypal_payment(
    request: PaypalPaymentRequest,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.payments.process_paypal_payment,
        request.amount,
        request.description,
        request.redirect_url,
        user_id,
        label="PayPal payment",
        context={"user_id": user_id, "amount": request.amount},
        message="Redirecting to PayPal...",
    )
    return respond(result, PaypalPaymentResponse, status_code=201)


@router.get("/payments/history")
async def payment_history(
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.payments.get_payment_history, user_id, label="Payment history", context={"user_id": user_id}
    )
    return respond(result, list[PaymentResponse])


@router.patch("/payments/{payment_id}/status", dependencies=[Depends(require_api_key)])
async def update_payment_status(
    payment_id: str,
    request: PaymentStatusUpdate,
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.payments.update_payment_status,
        payment_id,
        request.status,
        label="Payment update",
        context={"payment_id": payment_id, "status": request.status},
    )
    return respond(result, PaymentResponse)


@router.post("/price")
async def calculate_price(request: PriceRequest, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.gigs.calculate_gig_price, request.hours, label="Price calculation", context={"hours": request.hours}
    )
    return respond(result, PriceQuote)
