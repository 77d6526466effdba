"""
Weatherscape - Common Type Definitions

Centralized type definitions used throughout the backend.
"""

from .api import (
    BackgroundRequest,
    BackgroundResponse,
    InvalidateResponse,
    BreakerStatus,
    CacheStatusResponse,
    FallbackResponse,
    HealthCheckResponse,
)

__all__ = [
    "BackgroundRequest",
    "BackgroundResponse",
    "InvalidateResponse",
    "BreakerStatus",
    "CacheStatusResponse",
    "FallbackResponse",
    "HealthCheckResponse",
]
