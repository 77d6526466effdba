"""
Shared image cache backed by a remote document store.

Every call goes through a CircuitBreaker. Remote failures never leave this
module: they are counted, logged (until the circuit opens) and reported as
a miss.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from weatherscape.storage.breaker import CircuitBreaker
from weatherscape.storage.core import CacheEntry, ImageKey, RemoteStore, describe_ref
from weatherscape.storage.local_cache import LocalCache

logger = logging.getLogger(__name__)


class RemoteCache:
    """Remote tier of the two-tier cache."""

    def __init__(
        self,
        store: Optional[RemoteStore],
        breaker: CircuitBreaker,
        local_cache: Optional[LocalCache] = None,
    ):
        """
        Args:
            store: Remote document store, or None when no remote tier exists
            breaker: Breaker owned by this cache for its store
            local_cache: Cache that receives write-backs on remote hits
        """
        self.store = store
        self.breaker = breaker
        self.local_cache = local_cache

    def _skip(self) -> bool:
        return self.store is None or self.breaker.should_skip()

    def _record_error(self, action: str, key: str, error: Exception) -> None:
        if self.breaker.should_log_failure():
            logger.error(f"[RemoteCache] {action} failed for {key}: {error}")
        self.breaker.record_failure()

    async def get(self, key: str) -> Optional[str]:
        """Return the shared image reference for key, or None."""
        if self._skip():
            return None

        try:
            document = await self.store.get(key)
        except Exception as e:
            self._record_error("Check", key, e)
            return None

        self.breaker.record_success()
        if not document or not document.get("url"):
            return None

        image_ref = document["url"]
        logger.info(f"[RemoteCache] Hit {key}: {describe_ref(image_ref)}")

        if self.local_cache is not None:
            await self.local_cache.set(key, self._local_entry(key, image_ref, document))
        return image_ref

    async def set(self, key: str, entry: CacheEntry) -> None:
        """Publish an entry to the shared store. Never raises."""
        if self._skip():
            return

        document = {
            "url": entry.image_ref,
            "city": entry.city,
            "condition": entry.condition,
            "isDay": entry.is_day,
            "createdAt": datetime.fromtimestamp(entry.created_at / 1000, tz=timezone.utc),
        }
        try:
            await self.store.set(key, document)
        except Exception as e:
            self._record_error("Save", key, e)
            return

        self.breaker.record_success()

    @staticmethod
    def _local_entry(key: str, image_ref: str, document: Dict) -> CacheEntry:
        info = ImageKey.extract_info(key) or {}
        return CacheEntry.create(
            image_ref=image_ref,
            city=document.get("city") or info.get("city", ""),
            condition=document.get("condition") or info.get("condition", ""),
            is_day=document.get("isDay", info.get("is_day", True)),
        )
