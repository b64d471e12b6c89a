from pulsehustle.services.operations import Operations, OperationResult, with_transaction
from pulsehustle.services.gigs import GigService
from pulsehustle.services.payments import PaymentService
from pulsehustle.services.matching import MatchingDispatcher, MatchingService
from pulsehustle.services.stats import StatsService
from pulsehustle.services.pricing import PricingService
from pulsehustle.services.contact import ContactService
from pulsehustle.services.profiles import ProfileService
from pulsehustle.services.auth import AuthService
from pulsehustle.services.realtime import RealtimeRelay

__all__ = [
    "Operations",
    "OperationResult",
    "with_transaction",
    "GigService",
    "PaymentService",
    "MatchingDispatcher",
    "MatchingService",
    "StatsService",
    "PricingService",
    "ContactService",
    "ProfileService",
    "AuthService",
    "RealtimeRelay",
]
