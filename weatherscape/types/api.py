"""
API request/response models for FastAPI endpoints.

Pydantic models for HTTP request/response serialization.
"""

from typing import List, Optional

from pydantic import BaseModel


class BackgroundRequest(BaseModel):
    """Identifies one cached background."""

    city: str
    condition: str
    is_day: bool = True


class BackgroundResponse(BaseModel):
    """Response for a background request."""

    city: str
    condition: str
    is_day: bool
    cache_key: str
    image_ref: str
    fallback: List[str]  # gradient colours, top to bottom


class InvalidateResponse(BaseModel):
    """Response for a cache invalidation."""

    cache_key: str
    invalidated: bool
    image_ref: Optional[str] = None  # set when a replacement was generated


class BreakerStatus(BaseModel):
    """Remote tier circuit breaker state."""

    name: str
    available: bool
    open: bool
    consecutive_failures: int


class CacheStatusResponse(BaseModel):
    """Response for cache status check."""

    cache_key: str
    cached_locally: bool
    memoized: bool
    remote: BreakerStatus


class FallbackResponse(BaseModel):
    """Static fallback visual for a condition."""

    condition: str
    is_day: bool
    colors: List[str]


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    service: str
    remote: Optional[BreakerStatus] = None
