from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    skills: Optional[list[str]] = None
    hourly_rate: Optional[float] = None


class ProfileResponse(BaseModel):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    skills: list[str]
    hourly_rate: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: str


class GigSummary(BaseModel):
    id: str
    title: str
    description: str
    pay: float
    status: str


class ApplicationResponse(BaseModel):
    id: str
    gig_id: str
    user_id: str
    cover_letter: str
    status: str
    created_at: datetime
    updated_at: datetime
    gig: Optional[GigSummary] = None

    class Config:
        from_attributes = True
