"""
Two-tier caching system for generated backgrounds.

Provides:
- CacheOrchestrator: Local -> remote -> generate resolution
- LocalCache / RemoteCache: The two cache tiers
- CircuitBreaker: Health gate for the remote tier
- ImageKey: Deterministic cache key generation
- CacheEntry: Record stored for each generated image
- Stores: JsonFileStore, MemoryStore, MockRemoteStore, FirestoreRemoteStore
"""

from weatherscape.storage.breaker import CircuitBreaker
from weatherscape.storage.core import (
    CacheEntry,
    ImageKey,
    LocalStore,
    RemoteStore,
)
from weatherscape.storage.factory import create_local_store, create_remote_store
from weatherscape.storage.local_cache import LocalCache
from weatherscape.storage.orchestrator import CacheOrchestrator
from weatherscape.storage.providers import (
    FirestoreRemoteStore,
    JsonFileStore,
    MemoryStore,
    MockRemoteStore,
)
from weatherscape.storage.remote_cache import RemoteCache

__all__ = [
    "CacheOrchestrator",
    "LocalCache",
    "RemoteCache",
    "CircuitBreaker",
    "ImageKey",
    "CacheEntry",
    "LocalStore",
    "RemoteStore",
    "create_local_store",
    "create_remote_store",
    "JsonFileStore",
    "MemoryStore",
    "MockRemoteStore",
    "FirestoreRemoteStore",
]
