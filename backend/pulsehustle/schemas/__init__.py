from pulsehustle.schemas.gig import (
    GigCreate,
    GigUpdate,
    GigStatusUpdate,
    GigResponse,
    GigListResponse,
    SocialShareCreate,
    SocialShareResponse,
)
from pulsehustle.schemas.payment import (
    PaymentResponse,
    PaypalPaymentRequest,
    PaypalPaymentResponse,
    PaymentStatusUpdate,
    GigPaymentRequest,
    GigPaymentResponse,
    PriceRequest,
)
from pulsehustle.schemas.matching import MatchedProfile, GigMatchesResponse
from pulsehustle.schemas.profile import (
    ProfileUpdate,
    ProfileResponse,
    ApplicationCreate,
    ApplicationStatusUpdate,
    ApplicationResponse,
)
from pulsehustle.schemas.contact import ContactCreate, ContactResponse, BroadcastRequest
from pulsehustle.schemas.auth import SignUpRequest, LoginRequest, UserResponse, SessionResponse

__all__ = [
    "GigCreate",
    "GigUpdate",
    "GigStatusUpdate",
    "GigResponse",
    "GigListResponse",
    "SocialShareCreate",
    "SocialShareResponse",
    "PaymentResponse",
    "PaypalPaymentRequest",
    "PaypalPaymentResponse",
    "PaymentStatusUpdate",
    "GigPaymentRequest",
    "GigPaymentResponse",
    "PriceRequest",
    "MatchedProfile",
    "GigMatchesResponse",
    "ProfileUpdate",
    "ProfileResponse",
    "ApplicationCreate",
    "ApplicationStatusUpdate",
    "ApplicationResponse",
    "ContactCreate",
    "ContactResponse",
    "BroadcastRequest",
    "SignUpRequest",
    "LoginRequest",
    "UserResponse",
    "SessionResponse",
]
