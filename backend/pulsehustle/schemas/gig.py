from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class GigCreate(BaseModel):
    # title is checked by the service so a missing one is a 400, not a 422
    title: Optional[str] = None
    description: Optional[str] = None
    hours: Optional[int] = None
    pay: Optional[float] = None
    payment_type: Optional[str] = None
    location: Optional[str] = None
    remote: Optional[bool] = None
    skills_required: Optional[list[str]] = None
    duration: Optional[str] = None


class GigUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    hours: Optional[int] = None
    pay: Optional[float] = None
    location: Optional[str] = None
    remote: Optional[bool] = None
    skills_required: Optional[list[str]] = None
    duration: Optional[str] = None


class GigStatusUpdate(BaseModel):
    status: str


class GigResponse(BaseModel):
    id: str
    title: str
    description: str
    hours: int
    pay: float
    worker_rate: float
    platform_fee: float
    payment_type: str
    location: str
    remote: bool
    user_id: str
    payment_id: Optional[str] = None
    status: str
    skills_required: list[str]
    duration: Optional[str] = None
    share_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GigListResponse(BaseModel):
    gigs: list[GigResponse]
    total: int
    page: int
    per_page: int


class SocialShareCreate(BaseModel):
    # platform is checked by the service so a missing one is a 400
    platform: Optional[str] = None


class SocialShareResponse(BaseModel):
    id: str
    gig_id: str
    platform: str
    user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
