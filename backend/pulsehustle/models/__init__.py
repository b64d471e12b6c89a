from pulsehustle.models.gig import Gig
from pulsehustle.models.payment import Payment
from pulsehustle.models.matching import MatchingJob
from pulsehustle.models.profile import Profile
from pulsehustle.models.application import Application
from pulsehustle.models.stats import PlatformStats
from pulsehustle.models.contact import ContactMessage
from pulsehustle.models.audit import AuditLog, ErrorRecord
from pulsehustle.models.share import SocialShare
from pulsehustle.models.user import User

__all__ = [
    "Gig",
    "Payment",
    "MatchingJob",
    "Profile",
    "Application",
    "PlatformStats",
    "ContactMessage",
    "AuditLog",
    "ErrorRecord",
    "SocialShare",
    "User",
]
