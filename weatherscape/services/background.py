"""
Background query service.

Sits in front of the CacheOrchestrator and gives callers what the
orchestrator deliberately does not: one in-flight resolve per cache key,
an in-process memo of resolved references and a single retry on
generation failure.
"""

import asyncio
import logging
from typing import Dict, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from weatherscape.generation import create_generator
from weatherscape.generation.base import GenerationError
from weatherscape.settings import Settings
from weatherscape.storage import (
    CacheOrchestrator,
    CircuitBreaker,
    ImageKey,
    LocalCache,
    RemoteCache,
    create_local_store,
    create_remote_store,
)

logger = logging.getLogger(__name__)


class BackgroundService:
    """
    Request-coalescing cache of resolved background references.

    Memoized references never go stale on their own; they are dropped only
    through `forget` or `invalidate_and_regenerate`.
    """

    def __init__(self, orchestrator: CacheOrchestrator, query_retries: int = 1):
        self.orchestrator = orchestrator
        self.query_retries = query_retries
        self._results: Dict[str, str] = {}
        self._inflight: Dict[str, asyncio.Task] = {}

    async def get(self, city: str, condition: str, is_day: bool) -> Optional[str]:
        """
        Resolve the background for a city/condition/time of day.

        Returns None when city or condition is empty. Concurrent callers for
        the same key share one resolve; cancelling a caller does not cancel
        the shared resolve.

        Raises:
            GenerationError: If the image could not be generated
        """
        if not city or not city.strip() or not condition or not condition.strip():
            logger.debug("[BackgroundService] Invalid params, returning None")
            return None

        key = ImageKey.generate(city, condition, is_day)
        if key in self._results:
            return self._results[key]

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._resolve(key, city, condition, is_day))
            self._inflight[key] = task
        return await asyncio.shield(task)

    async def _resolve(self, key: str, city: str, condition: str, is_day: bool) -> str:
        task = asyncio.current_task()
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(1 + self.query_retries),
                retry=retry_if_exception_type(GenerationError),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    image_ref = await self.orchestrator.resolve(city, condition, is_day)

            # A forget() while in flight means this result is already stale
            if self._inflight.get(key) is task:
                self._results[key] = image_ref
            return image_ref
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

    def forget(self, city: str, condition: str, is_day: bool) -> None:
        """
        Discard the memoized reference so the next get resolves again.

        An in-flight resolve for the key is detached, not cancelled: it may
        already hold the reference being invalidated, so the next get starts
        its own resolve. Callers still awaiting the detached one get its
        result, which is never memoized.
        """
        key = ImageKey.generate(city, condition, is_day)
        self._results.pop(key, None)
        self._inflight.pop(key, None)

    async def invalidate(self, city: str, condition: str, is_day: bool) -> str:
        """Drop the local cache entry and the memo. Returns the cache key."""
        cache_key = await self.orchestrator.invalidate(city, condition, is_day)
        self.forget(city, condition, is_day)
        return cache_key

    async def invalidate_and_regenerate(
        self, city: str, condition: str, is_day: bool
    ) -> Optional[str]:
        """
        Invalidate a reference that failed to load and resolve a new one.

        Raises:
            GenerationError: If the replacement could not be generated
        """
        logger.info("[BackgroundService] Invalidating expired image and regenerating...")
        await self.invalidate(city, condition, is_day)
        return await self.get(city, condition, is_day)

    def is_memoized(self, city: str, condition: str, is_day: bool) -> bool:
        return ImageKey.generate(city, condition, is_day) in self._results

    async def cached_locally(self, city: str, condition: str, is_day: bool) -> bool:
        key = ImageKey.generate(city, condition, is_day)
        return await self.orchestrator.local_cache.contains(key)

    def breaker_status(self) -> Dict:
        return self.orchestrator.remote_cache.breaker.snapshot()

    async def aclose(self) -> None:
        """Let pending remote writes finish."""
        await self.orchestrator.drain()


def create_background_service(settings: Settings) -> BackgroundService:
    """
    Wire stores, caches, breaker and generator from settings.

    Args:
        settings: Global settings container

    Returns:
        Ready-to-use BackgroundService
    """
    local_cache = LocalCache(
        store=create_local_store(
            settings.cache.local_backend,
            local_storage_dir=settings.cache.local_storage_dir,
        ),
        ttl_days=settings.cache.ttl_days,
        key_prefix=settings.cache.key_prefix,
    )

    remote_store = create_remote_store(
        settings.remote.backend,
        project_id=settings.remote.project_id,
        collection=settings.remote.collection,
        api_key=settings.remote.api_key,
        timeout=settings.remote.timeout_seconds,
    )
    breaker = CircuitBreaker(
        name=f"remote:{settings.remote.backend}",
        available=remote_store is not None,
        failure_threshold=settings.breaker.failure_threshold,
        cooldown_seconds=settings.breaker.cooldown_seconds,
    )
    remote_cache = RemoteCache(remote_store, breaker, local_cache=local_cache)

    generator = create_generator(
        provider=settings.generator.provider,
        api_key=settings.generator.fal_key,
        model_id=settings.generator.model_id,
        timeout=settings.generator.timeout_seconds,
    )

    orchestrator = CacheOrchestrator(local_cache, remote_cache, generator)
    return BackgroundService(orchestrator, query_retries=settings.generator.query_retries)
