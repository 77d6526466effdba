"""
Local file system store.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from weatherscape.storage.core import LocalStore

logger = logging.getLogger(__name__)


class JsonFileStore(LocalStore):
    """
    Local file system store.

    Keeps every record in {storage_dir}/image_cache.json. The file is
    rewritten atomically on each change so a crash never leaves it half
    written. Changes are serialized so overlapping writes never drop a
    record.
    """

    def __init__(self, storage_dir: str = "./storage/backgrounds"):
        self.storage_dir = Path(storage_dir)
        self.store_file = self.storage_dir / "image_cache.json"

        # Create directories
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        # Load or create record store
        self.records: Dict[str, str] = self._load_store()
        self._lock: Optional[asyncio.Lock] = None

    def _load_store(self) -> Dict[str, str]:
        """Load record store from disk."""
        if not self.store_file.exists():
            return {}
        try:
            with open(self.store_file, "r") as f:
                data = json.load(f)
        except Exception as e:
            logger.error(f"Failed to load local store {self.store_file}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Ignoring malformed local store {self.store_file}")
            return {}
        return data

    def _save_store(self, records: Dict[str, str]) -> None:
        """Save record store to disk."""
        with tempfile.NamedTemporaryFile(
            "w",
            dir=self.storage_dir,
            prefix="image_cache.",
            suffix=".tmp",
            delete=False,
        ) as f:
            json.dump(records, f, indent=2)
            tmp_file = f.name
        try:
            os.replace(tmp_file, self.store_file)
        except OSError:
            os.unlink(tmp_file)
            raise

    def _write_lock(self) -> asyncio.Lock:
        # Created on first use so it binds to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def get(self, name: str) -> Optional[str]:
        return self.records.get(name)

    async def set(self, name: str, value: str) -> None:
        async with self._write_lock():
            records = dict(self.records)
            records[name] = value
            await asyncio.to_thread(self._save_store, records)
            self.records = records
        logger.debug(f"Stored local record: {name}")

    async def remove(self, name: str) -> None:
        async with self._write_lock():
            if name not in self.records:
                return
            records = dict(self.records)
            del records[name]
            await asyncio.to_thread(self._save_store, records)
            self.records = records
        logger.debug(f"Removed local record: {name}")
