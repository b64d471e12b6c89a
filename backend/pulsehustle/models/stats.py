"""
Platform Stats Model

Singleton row (id="1") holding platform-wide counters. Counters are only
ever changed with atomic SQL increments or a full recompute.
"""

from sqlalchemy import Column, String, Integer, Float, DateTime
from pulsehustle.database import Base, utcnow

STATS_ROW_ID = "1"
WEEKLY_GOAL = 10  # gigs per week
ANNUAL_PROJECTION = WEEKLY_GOAL * 52


class PlatformStats(Base):
    __tablename__ = "stats"

    id = Column(String, primary_key=True, default=STATS_ROW_ID)
    jobs_created = Column(Integer, nullable=False, default=0)
    jobs_completed = Column(Integer, nullable=False, default=0)
    total_earnings = Column(Float, nullable=False, default=0.0)
    worker_earnings = Column(Float, nullable=False, default=0.0)
    platform_fees = Column(Float, nullable=False, default=0.0)
    weekly_goal = Column(Integer, nullable=False, default=WEEKLY_GOAL)
    annual_projection = Column(Integer, nullable=False, default=ANNUAL_PROJECTION)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
