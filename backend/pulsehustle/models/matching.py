"""
AI Matching Job Model

One row per matching run for a gig. Jobs are never deleted; the most
recently completed job for a gig is the one whose matches are served.
"""

from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from pulsehustle.database import Base, utcnow
import uuid


class MatchingJob(Base):
    """
    Attributes:
        gig_id: Gig being matched (indexed)
        status: pending → processing → completed / failed
        matched_profiles: Ordered list of profile ids, best first
        matching_score: List of {"profile_id": str, "score": float}
        completed_at: Set on completion and on failure
    """

    __tablename__ = "ai_matching_jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    gig_id = Column(String, ForeignKey("gigs.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    matched_profiles = Column(JSON, nullable=False, default=list)
    matching_score = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    completed_at = Column(DateTime, nullable=True)
