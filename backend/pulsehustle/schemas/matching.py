from pydantic import BaseModel
from typing import Optional


class MatchedProfile(BaseModel):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    skills: list[str] = []
    hourly_rate: Optional[float] = None
    match_score: Optional[float] = None


class GigMatchesResponse(BaseModel):
    status: str
    message: str
    job_id: str
    matches: list[MatchedProfile]
