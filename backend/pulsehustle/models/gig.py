"""
Gig Model - SQLAlchemy ORM model for posted gigs

A gig is a short-term paid job listing owned by the user who posted it.
Pay is split between the worker (95%) and the platform at creation time and
recomputed whenever pay is updated.

Status Flow:
    posted → processing → paid → completed / cancelled
    (no transition table is enforced; completed and cancelled block edits)
"""

from sqlalchemy import Column, String, Integer, Float, Text, DateTime, Boolean, JSON
from pulsehustle.database import Base, utcnow
import uuid


class Gig(Base):
    """
    Gig listing entity.

    Attributes:
        id: UUID primary key
        title: Gig title (required)
        hours: Estimated hours of work (default 40)
        pay: Total gig price (default 600)
        worker_rate: Worker share, round(pay * 0.95)
        platform_fee: pay - worker_rate
        payment_type: "fixed" or "hourly"
        location: Physical location or "remote"/"onsite"/"hybrid"
        user_id: Owner (creating user)
        payment_id: Payment that funded the gig, if any
        status: Lifecycle stage (indexed)
        skills_required: JSON list of skill names
        share_count: Times the gig was shared (see SocialShare)
    """

    __tablename__ = "gigs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False, default="")
    hours = Column(Integer, nullable=False, default=40)
    pay = Column(Float, nullable=False, default=600.0)
    worker_rate = Column(Float, nullable=False)
    platform_fee = Column(Float, nullable=False)
    payment_type = Column(String(20), nullable=False, default="fixed")
    location = Column(String(500), nullable=False, default="remote")
    remote = Column(Boolean, nullable=False, default=True)
    user_id = Column(String, nullable=False, index=True)
    payment_id = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default="posted", index=True)
    skills_required = Column(JSON, nullable=False, default=list)
    duration = Column(String(100), nullable=True)
    share_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
