from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ContactCreate(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    message: Optional[str] = None


class ContactResponse(BaseModel):
    id: str
    email: str
    name: str
    message: str
    status: str
    created_at: datetime
    processed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BroadcastRequest(BaseModel):
    event: str
    payload: dict = {}
