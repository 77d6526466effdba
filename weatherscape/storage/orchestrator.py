"""
Two-tier cache orchestration for background images.

Resolves an image reference by checking the local cache, then the remote
cache, and only then paying for a generation. Generated images are written
to the local tier before returning and published to the remote tier in a
detached background task.
"""

import asyncio
import logging
from typing import Optional, Set

from weatherscape.generation.base import GenerationError, ImageGenerator
from weatherscape.storage.core import CacheEntry, ImageKey, describe_ref
from weatherscape.storage.local_cache import LocalCache
from weatherscape.storage.remote_cache import RemoteCache

logger = logging.getLogger(__name__)


class CacheOrchestrator:
    """
    Composes LocalCache, RemoteCache and an ImageGenerator.

    Safe to call concurrently, but does not deduplicate: concurrent resolves
    for one key each generate. BackgroundService coalesces them.
    """

    def __init__(
        self,
        local_cache: LocalCache,
        remote_cache: RemoteCache,
        generator: ImageGenerator,
    ):
        self.local_cache = local_cache
        self.remote_cache = remote_cache
        self.generator = generator
        self._background_writes: Set[asyncio.Task] = set()

    async def resolve(self, city: str, condition: str, is_day: bool) -> str:
        """
        Return an image reference for the city/condition/time of day.

        Raises:
            GenerationError: If nothing is cached and generation fails, whatever
                the generator raised
        """
        key = ImageKey.generate(city, condition, is_day)

        image_ref = await self.local_cache.get(key)
        if image_ref:
            logger.info(f"[Cache] Local hit: {describe_ref(image_ref)}")
            return image_ref

        image_ref = await self.remote_cache.get(key)
        if image_ref:
            return image_ref

        logger.info(f"[Cache] Miss for {key}, generating...")
        try:
            image_ref = await self.generator.generate(city, condition, is_day)
        except GenerationError:
            raise
        except Exception as e:
            logger.error(f"[Cache] Generator failed for {key}: {e!r}")
            raise GenerationError(f"Generator failed for {key}: {e}") from e
        logger.info(f"[Cache] Generated {key}: {describe_ref(image_ref)}")

        entry = CacheEntry.create(image_ref, city, condition, is_day)
        await self.local_cache.set(key, entry)
        self._publish(key, entry)

        return image_ref

    async def invalidate(self, city: str, condition: str, is_day: bool) -> str:
        """
        Drop the local entry for a key whose image failed to load.

        The remote entry is kept: it may still be valid for other devices,
        and the next generation overwrites it anyway.

        Returns:
            str: The invalidated cache key
        """
        key = ImageKey.generate(city, condition, is_day)
        logger.info(f"[Cache] Invalidating expired image for: {key}")
        await self.local_cache.remove(key)
        return key

    def _publish(self, key: str, entry: CacheEntry) -> None:
        """Fire-and-forget remote write; callers never observe the outcome."""
        task = asyncio.create_task(self.remote_cache.set(key, entry))
        self._background_writes.add(task)
        task.add_done_callback(self._on_publish_done)

    def _on_publish_done(self, task: asyncio.Task) -> None:
        self._background_writes.discard(task)
        if task.cancelled():
            return
        error: Optional[BaseException] = task.exception()
        if error is not None:
            logger.error(f"[Cache] Background remote write failed: {error}")

    @property
    def pending_writes(self) -> int:
        return len(self._background_writes)

    async def drain(self) -> None:
        """Wait for outstanding remote writes to finish."""
        if self._background_writes:
            await asyncio.gather(*list(self._background_writes), return_exceptions=True)
