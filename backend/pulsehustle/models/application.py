from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from pulsehustle.database import Base, utcnow
import uuid


class Application(Base):
    """A worker's application to a gig; one per (gig, applicant)."""

    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("gig_id", "user_id", name="uq_application_gig_user"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    gig_id = Column(String, ForeignKey("gigs.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    cover_letter = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="submitted")
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
