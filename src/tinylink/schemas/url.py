from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ShortenRequest(BaseModel):
    url: str
    code: Optional[str] = None
    ttl_seconds: Optional[int] = None


class ShortenResponse(BaseModel):
    short_code: str
    short_url: str


class URLStats(BaseModel):
    short_code: str
    original_url: str
    created_at: datetime
    expires_at: Optional[datetime]
    visits: int

    class Config:
        from_attributes = True


class CachedTarget(BaseModel):
    """What the redirect cache keeps per short code."""

    original_url: str
    expires_at: Optional[datetime] = None

    class Config:
        from_attributes = True
