"""
FastAPI backend server for Weatherscape.

Provides REST API endpoints for resolving cached AI city backgrounds,
invalidating expired ones and inspecting the cache.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from weatherscape.generation.base import GenerationError
from weatherscape.serving.fallback import fallback_gradient
from weatherscape.services.background import BackgroundService, create_background_service
from weatherscape.settings import settings
from weatherscape.storage.core import ImageKey
from weatherscape.types import (
    BackgroundRequest,
    BackgroundResponse,
    BreakerStatus,
    CacheStatusResponse,
    FallbackResponse,
    HealthCheckResponse,
    InvalidateResponse,
)

logger = logging.getLogger(__name__)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Initialize FastAPI app
app = FastAPI(
    title=settings.api.title,
    description=settings.api.description,
    version=settings.api.version,
)

if settings.api.enable_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Global services
background_service: Optional[BackgroundService] = None


def init_background_service():
    """Initialize background service on startup."""
    global background_service

    for issue in settings.validate():
        logger.warning(issue)

    try:
        background_service = create_background_service(settings)
        logger.info("Background service initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize background service: {str(e)}")
        background_service = None


def get_service() -> BackgroundService:
    if background_service is None:
        raise HTTPException(status_code=503, detail="Background service not available")
    return background_service


@app.on_event("startup")
async def startup_event():
    """FastAPI startup event handler."""
    logger.info("Starting Weatherscape API server")
    if background_service is None:
        init_background_service()


@app.on_event("shutdown")
async def shutdown_event():
    """FastAPI shutdown event handler."""
    logger.info("Shutting down Weatherscape API server")
    if background_service is not None:
        await background_service.aclose()


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API health check."""
    return {
        "name": settings.api.title,
        "status": "operational",
        "version": settings.api.version,
    }


@app.get("/health", tags=["Health"], response_model=HealthCheckResponse)
async def health_check():
    """Health check endpoint, including remote cache breaker state."""
    remote = None
    if background_service is not None:
        remote = BreakerStatus(**background_service.breaker_status())
    return HealthCheckResponse(
        status="healthy" if background_service is not None else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service="weatherscape",
        remote=remote,
    )


@app.get("/api/background", tags=["Background"], response_model=BackgroundResponse)
async def get_background(
    city: str = Query(..., min_length=1, description="City name (e.g., 'Tokyo')"),
    condition: str = Query(..., min_length=1, description="Weather condition (e.g., 'Rain')"),
    is_day: bool = Query(True, description="Daytime scene if true, night otherwise"),
):
    """
    Resolve the background for a city under a weather condition.

    Served from the local cache, then the shared cache, and generated only
    when neither has it.
    """
    service = get_service()
    fallback = list(fallback_gradient(condition, is_day))

    try:
        image_ref = await service.get(city, condition, is_day)
    except GenerationError as e:
        logger.error(f"Background generation failed for {city}/{condition}: {e}")
        raise HTTPException(
            status_code=502,
            detail={"message": "Background generation failed", "fallback": fallback},
        )

    if not image_ref:
        raise HTTPException(status_code=400, detail="city and condition are required")

    return BackgroundResponse(
        city=city,
        condition=condition,
        is_day=is_day,
        cache_key=ImageKey.generate(city, condition, is_day),
        image_ref=image_ref,
        fallback=fallback,
    )


@app.post("/api/background/invalidate", tags=["Background"], response_model=InvalidateResponse)
async def invalidate_background(request: BackgroundRequest):
    """
    Drop a background whose image no longer loads.

    Only the local entry is removed; the shared entry stays for other
    devices until the next generation replaces it.
    """
    service = get_service()
    cache_key = await service.invalidate(request.city, request.condition, request.is_day)
    return InvalidateResponse(cache_key=cache_key, invalidated=True)


@app.post("/api/background/regenerate", tags=["Background"], response_model=InvalidateResponse)
async def regenerate_background(request: BackgroundRequest):
    """Invalidate a background and resolve a replacement."""
    service = get_service()
    try:
        image_ref = await service.invalidate_and_regenerate(
            request.city, request.condition, request.is_day
        )
    except GenerationError as e:
        logger.error(f"Background regeneration failed for {request.city}: {e}")
        raise HTTPException(status_code=502, detail="Background regeneration failed")

    return InvalidateResponse(
        cache_key=ImageKey.generate(request.city, request.condition, request.is_day),
        invalidated=True,
        image_ref=image_ref,
    )


@app.get("/api/cache/status", tags=["Cache"], response_model=CacheStatusResponse)
async def cache_status(
    city: str = Query(..., min_length=1),
    condition: str = Query(..., min_length=1),
    is_day: bool = Query(True),
):
    """Check whether a background is cached on this server."""
    service = get_service()
    return CacheStatusResponse(
        cache_key=ImageKey.generate(city, condition, is_day),
        cached_locally=await service.cached_locally(city, condition, is_day),
        memoized=service.is_memoized(city, condition, is_day),
        remote=BreakerStatus(**service.breaker_status()),
    )


@app.get("/api/background/fallback", tags=["Background"], response_model=FallbackResponse)
async def get_fallback(
    condition: str = Query("", description="Weather condition"),
    is_day: bool = Query(True),
):
    """Static gradient to show when no generated image can be displayed."""
    return FallbackResponse(
        condition=condition,
        is_day=is_day,
        colors=list(fallback_gradient(condition, is_day)),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api.host, port=settings.api.port)
