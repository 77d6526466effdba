"""
Configuration settings for the Weatherscape backend.

Manages generator credentials, cache storage locations, circuit breaker
thresholds, serving retry policy and API options via environment variables
with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_delays(name: str, default: str) -> Tuple[float, ...]:
    raw = os.getenv(name, default)
    return tuple(float(part) for part in raw.split(",") if part.strip())


@dataclass
class CacheSettings:
    """Settings for the per-device local image cache."""

    # Local store backend: 'file' or 'memory'
    local_backend: str = os.getenv("LOCAL_CACHE_BACKEND", "file")

    # Local storage directory (for file backend)
    local_storage_dir: str = os.getenv(
        "LOCAL_CACHE_DIR", "./storage/backgrounds"
    )

    # Entries expire this many days after creation (checked lazily on read)
    ttl_days: int = int(os.getenv("LOCAL_CACHE_TTL_DAYS", "7"))

    # Namespace prepended to every cache key in the local store
    key_prefix: str = "image_cache:"


@dataclass
class BreakerSettings:
    """Settings for the remote-store circuit breaker."""

    # Consecutive failures before remote calls are skipped
    failure_threshold: int = int(os.getenv("BREAKER_FAILURE_THRESHOLD", "3"))

    # Seconds to keep skipping after the last failure
    cooldown_seconds: float = float(os.getenv("BREAKER_COOLDOWN_SECONDS", "30"))


@dataclass
class RemoteStoreSettings:
    """
    Settings for the shared remote cache.

    Supported backends:
    - 'none': No remote tier (breaker reports the dependency unavailable)
    - 'memory': In-process mock store
    - 'firestore': Firestore REST API
    """

    backend: str = os.getenv("REMOTE_STORE_BACKEND", "none")

    # Firestore project id
    project_id: Optional[str] = os.getenv("FIRESTORE_PROJECT_ID", None)

    # Firestore web API key
    api_key: Optional[str] = os.getenv("FIRESTORE_API_KEY", None)

    # Collection holding one document per cache key
    collection: str = os.getenv("FIRESTORE_COLLECTION", "city_images")

    # Timeout for remote store requests (seconds)
    timeout_seconds: float = float(os.getenv("REMOTE_STORE_TIMEOUT", "10"))


@dataclass
class GeneratorSettings:
    """Settings for the AI background image generator."""

    # Provider: 'fal' or 'mock'
    provider: str = os.getenv("GENERATOR_PROVIDER", "fal")

    # fal.ai API key
    fal_key: str = os.getenv("FAL_KEY", "")

    # fal.ai model endpoint
    model_id: str = os.getenv("FAL_MODEL_ID", "fal-ai/nano-banana-pro")

    # Timeout for generation requests (seconds)
    timeout_seconds: int = int(os.getenv("GENERATOR_TIMEOUT", "120"))

    # Extra resolve attempts made by the query layer on generation failure
    query_retries: int = int(os.getenv("GENERATOR_QUERY_RETRIES", "1"))


@dataclass
class ServingSettings:
    """Settings for the image serving retry loop."""

    # Delivery retries before the cached image is regenerated
    max_retries: int = int(os.getenv("SERVING_MAX_RETRIES", "3"))

    # Backoff per attempt in seconds; later attempts reuse the last value
    retry_delays: Tuple[float, ...] = _env_delays(
        "SERVING_RETRY_DELAYS", "1.5,3,5"
    )

    # Timeout for a single image download (seconds)
    delivery_timeout_seconds: float = float(
        os.getenv("SERVING_DELIVERY_TIMEOUT", "10")
    )


@dataclass
class APISettings:
    """Settings for FastAPI server."""

    # Server host and port
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", "8000"))

    # Enable CORS
    enable_cors: bool = _env_bool("API_ENABLE_CORS", "true")

    # Allowed CORS origins
    cors_origins: list = field(default_factory=lambda: [
        "http://localhost:3000",
        "http://localhost:8081",  # Expo dev server
    ])

    # API title and description
    title: str = "Weatherscape API"
    description: str = "REST API for cached AI city weather backgrounds"
    version: str = "0.1.0"


class Settings:
    """
    Global settings container combining all configuration sections.

    Usage:
        from weatherscape.settings import settings
        print(settings.generator.provider)
        print(settings.remote.backend)
    """

    def __init__(self):
        self.cache = CacheSettings()
        self.breaker = BreakerSettings()
        self.remote = RemoteStoreSettings()
        self.generator = GeneratorSettings()
        self.serving = ServingSettings()
        self.api = APISettings()

    def validate(self) -> list[str]:
        """
        Validates configuration and returns list of warnings/errors.

        Returns:
            list[str]: List of configuration issues (empty if all valid)
        """
        issues = []

        if self.generator.provider == "fal" and not self.generator.fal_key:
            issues.append(
                "WARNING: fal.ai generator selected but FAL_KEY not set"
            )

        if self.remote.backend == "firestore" and not self.remote.project_id:
            issues.append(
                "ERROR: Firestore remote store selected but FIRESTORE_PROJECT_ID not configured"
            )

        if self.remote.backend not in ("none", "memory", "firestore"):
            issues.append(
                f"ERROR: Invalid remote store backend '{self.remote.backend}'"
            )

        if not self.serving.retry_delays:
            issues.append("ERROR: SERVING_RETRY_DELAYS must list at least one delay")

        if self.cache.local_backend == "file":
            # Ensure local storage directory exists
            os.makedirs(self.cache.local_storage_dir, exist_ok=True)

        return issues


# Global settings instance
settings = Settings()
