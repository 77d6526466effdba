"""
Per-device image cache with lazy expiry.

The local cache is best-effort: every storage failure is logged and
reported as a miss, never raised to the caller.
"""

import logging
from typing import Callable, Optional

from weatherscape.storage.core import CacheEntry, LocalStore, describe_ref, now_ms

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


class LocalCache:
    """
    Durable key -> image reference cache with a per-entry TTL.

    Expiry is checked when an entry is read; there is no background sweep.
    """

    def __init__(
        self,
        store: LocalStore,
        ttl_days: int = 7,
        key_prefix: str = "image_cache:",
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.ttl_ms = ttl_days * DAY_MS
        self.key_prefix = key_prefix
        self.clock = clock

    def _name(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        """
        Return the cached image reference for key.

        Unreadable or corrupt records count as misses. Expired entries are
        deleted before reporting the miss.
        """
        try:
            raw = await self.store.get(self._name(key))
            if raw is None:
                return None
            entry = CacheEntry.from_json(raw)
        except Exception as e:
            logger.error(f"[LocalCache] Read failed for {key}: {e}")
            return None

        age = self.clock() - entry.created_at
        if age > self.ttl_ms:
            logger.info(f"[LocalCache] Entry expired for {key}")
            await self.remove(key)
            return None

        logger.debug(f"[LocalCache] Hit {key}: {describe_ref(entry.image_ref)}")
        return entry.image_ref

    async def set(self, key: str, entry: CacheEntry) -> None:
        try:
            await self.store.set(self._name(key), entry.to_json())
        except Exception as e:
            logger.error(f"[LocalCache] Save failed for {key}: {e}")

    async def remove(self, key: str) -> None:
        try:
            await self.store.remove(self._name(key))
        except Exception as e:
            logger.error(f"[LocalCache] Remove failed for {key}: {e}")

    async def contains(self, key: str) -> bool:
        """Check if a fresh entry exists."""
        return await self.get(key) is not None
