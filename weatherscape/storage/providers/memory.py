"""
In-memory stores for testing/development.
"""

import logging
from typing import Dict, Optional

from weatherscape.storage.core import LocalStore, RemoteStore

logger = logging.getLogger(__name__)


class MemoryStore(LocalStore):
    """
    In-memory local store.

    Behaves like the file store but forgets everything on restart.
    """

    def __init__(self):
        self.records: Dict[str, str] = {}

    async def get(self, name: str) -> Optional[str]:
        return self.records.get(name)

    async def set(self, name: str, value: str) -> None:
        self.records[name] = value

    async def remove(self, name: str) -> None:
        self.records.pop(name, None)


class MockRemoteStore(RemoteStore):
    """
    Mock remote document store for testing/development.

    Stores in-memory, simulating a shared collection. Set `failing` to make
    every call raise ConnectionError, as an unreachable backend would.
    """

    def __init__(self, collection: str = "city_images"):
        self.collection = collection
        self.documents: Dict[str, Dict] = {}
        self.failing = False
        self.get_calls = 0
        self.set_calls = 0

    def _check_available(self) -> None:
        if self.failing:
            raise ConnectionError(f"Mock remote store '{self.collection}' unavailable")

    async def get(self, key: str) -> Optional[Dict]:
        self.get_calls += 1
        self._check_available()
        document = self.documents.get(key)
        return dict(document) if document is not None else None

    async def set(self, key: str, document: Dict) -> None:
        self.set_calls += 1
        self._check_available()
        self.documents[key] = dict(document)
        logger.info(f"Mock remote: stored {self.collection}/{key}")
