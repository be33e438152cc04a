"""
API Response Schemas

Pydantic models for API responses. The shorten request body is read raw
(JSON object, JSON string or plain text) and interpreted by UrlNormalizer, so
it has no request model.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ShortenResponse(BaseModel):
    """Response model for URL shortening endpoint."""
    short_code: str = Field(..., description="The generated short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The normalized destination URL")
    expires_at: int = Field(..., description="Expiry as Unix seconds")


class StatsResponse(BaseModel):
    """Response model for statistics endpoint."""
    short_code: str
    original_url: str
    created_at: int
    expires_at: Optional[int]
    click_count: int
    expired: bool
