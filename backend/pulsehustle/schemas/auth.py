from pydantic import BaseModel
from datetime import datetime
from typing import Any, Optional


class SignUpRequest(BaseModel):
    email: str
    password: str
    metadata: dict[str, Any] = {}


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    created_at: datetime
    last_sign_in_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"

    class Config:
        from_attributes = True
