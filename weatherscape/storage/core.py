"""
Core data structures and interfaces for the caching system.

Defines:
- ImageKey: Deterministic cache key generation
- CacheEntry: Record persisted for a generated background
- LocalStore: Abstract interface for the per-device durable store
- RemoteStore: Abstract interface for the shared document store
"""

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class ImageKey:
    """
    Generates deterministic cache keys for background images.

    Cache key format: city_condition_day|night
    """

    DAY = "day"
    NIGHT = "night"

    @classmethod
    def normalize_city(cls, city: str) -> str:
        """Lowercase, trim and collapse whitespace runs to underscores."""
        return _WHITESPACE.sub("_", city.strip().lower())

    @classmethod
    def generate(
        cls,
        city: str,
        condition: str,
        is_day: bool,
    ) -> str:
        """
        Generate deterministic cache key for a city/weather combination.

        Args:
            city: City name (e.g., 'Paris', ' new  york ')
            condition: Weather condition (e.g., 'Rain')
            is_day: True for daytime, False for night

        Returns:
            str: Cache key (e.g., 'new_york_rain_night')
        """
        suffix = cls.DAY if is_day else cls.NIGHT
        cache_key = f"{cls.normalize_city(city)}_{condition.strip().lower()}_{suffix}"

        logger.debug(f"Generated cache key: {cache_key}")
        return cache_key

    @classmethod
    def extract_info(cls, cache_key: str) -> Optional[Dict]:
        """
        Parse information from a cache key.

        Args:
            cache_key: Cache key string (format: city_condition_day|night)

        Returns:
            Dict with city, condition, is_day or None if invalid
        """
        parts = cache_key.rsplit("_", 2)
        if len(parts) < 3 or not parts[0] or not parts[1]:
            return None

        city, condition, suffix = parts
        if suffix not in (cls.DAY, cls.NIGHT):
            return None

        return {
            "city": city.replace("_", " "),
            "condition": condition,
            "is_day": suffix == cls.DAY,
        }


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry:
    """A generated background image and what it was generated for."""

    image_ref: str
    created_at: int
    city: str
    condition: str
    is_day: bool

    @classmethod
    def create(cls, image_ref: str, city: str, condition: str, is_day: bool) -> "CacheEntry":
        return cls(
            image_ref=image_ref,
            created_at=now_ms(),
            city=city,
            condition=condition,
            is_day=is_day,
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON storage."""
        return {
            "imageRef": self.image_ref,
            "createdAt": self.created_at,
            "city": self.city,
            "condition": self.condition,
            "isDay": self.is_day,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @staticmethod
    def from_dict(data: Dict) -> "CacheEntry":
        """Reconstruct from dictionary. Raises KeyError/ValueError on bad data."""
        image_ref = data["imageRef"]
        if not isinstance(image_ref, str) or not image_ref:
            raise ValueError("imageRef must be a non-empty string")
        return CacheEntry(
            image_ref=image_ref,
            created_at=int(data["createdAt"]),
            city=str(data.get("city", "")),
            condition=str(data.get("condition", "")),
            is_day=bool(data.get("isDay", True)),
        )

    @staticmethod
    def from_json(raw: str) -> "CacheEntry":
        return CacheEntry.from_dict(json.loads(raw))


def describe_ref(image_ref: Optional[str]) -> Optional[str]:
    """Shorten inline base64 images so they can be logged."""
    if image_ref and image_ref.startswith("data:"):
        return image_ref.split(",", 1)[0] + ",..."
    return image_ref


class LocalStore(ABC):
    """Abstract base class for durable per-device text stores."""

    @abstractmethod
    async def get(self, name: str) -> Optional[str]:
        """Retrieve the record stored under name."""
        pass

    @abstractmethod
    async def set(self, name: str, value: str) -> None:
        """Store a record under name."""
        pass

    @abstractmethod
    async def remove(self, name: str) -> None:
        """Delete the record stored under name."""
        pass


class RemoteStore(ABC):
    """Abstract base class for shared remote document stores."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict]:
        """Retrieve the document for a cache key, or None if absent."""
        pass

    @abstractmethod
    async def set(self, key: str, document: Dict) -> None:
        """Create or replace the document for a cache key."""
        pass
