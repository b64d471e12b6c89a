from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Any, Optional

from pulsehustle.schemas.gig import GigCreate, GigResponse


class PaymentResponse(BaseModel):
    id: str
    amount: float
    status: str
    payment_method: str
    description: Optional[str] = None
    user_id: Optional[str] = None
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("payment_metadata", "metadata"),
    )
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaypalPaymentRequest(BaseModel):
    amount: float
    description: Optional[str] = None
    redirect_url: Optional[str] = None


class PaypalPaymentResponse(BaseModel):
    payment_id: str
    redirect_url: str
    message: str

    class Config:
        from_attributes = True


class PaymentStatusUpdate(BaseModel):
    status: str


class GigPaymentRequest(GigCreate):
    pass


class GigPaymentResponse(BaseModel):
    payment: PaymentResponse
    gig: GigResponse

    class Config:
        from_attributes = True


class PriceRequest(BaseModel):
    hours: float = 40
