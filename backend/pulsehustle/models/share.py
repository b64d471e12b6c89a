from sqlalchemy import Column, String, DateTime
from pulsehustle.database import Base, utcnow
import uuid


class SocialShare(Base):
    """One share of a gig on an external platform (twitter, linkedin, ...)."""

    __tablename__ = "social_shares"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    gig_id = Column(String, nullable=False, index=True)
    platform = Column(String(50), nullable=False)
    user_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
