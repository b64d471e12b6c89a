"""
Profile Model - public worker profile

The profile id is the auth user id; a profile row is created on sign-up
and upserted by the profile service.
"""

from sqlalchemy import Column, String, Float, Text, DateTime, JSON
from pulsehustle.database import Base, utcnow


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)
    username = Column(String(100), nullable=True)
    full_name = Column(String(200), nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(2000), nullable=True)
    website = Column(String(2000), nullable=True)
    location = Column(String(500), nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    hourly_rate = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
