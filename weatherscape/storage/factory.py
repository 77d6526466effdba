"""
Factory for creating cache stores based on configuration.
"""

import logging
from typing import Optional

from weatherscape.storage.core import LocalStore, RemoteStore
from weatherscape.storage.providers import (
    FirestoreRemoteStore,
    JsonFileStore,
    MemoryStore,
    MockRemoteStore,
)

logger = logging.getLogger(__name__)


def create_local_store(
    backend_type: str,
    local_storage_dir: str = "./storage/backgrounds",
) -> LocalStore:
    """
    Factory function to create the per-device store.

    Args:
        backend_type: Type of backend ('file', 'memory')
        local_storage_dir: Directory for the file backend

    Returns:
        LocalStore instance
    """
    backend_type = backend_type.lower()

    if backend_type == "file":
        logger.info(f"Using JsonFileStore: {local_storage_dir}")
        return JsonFileStore(storage_dir=local_storage_dir)

    elif backend_type == "memory":
        logger.info("Using MemoryStore")
        return MemoryStore()

    else:
        logger.warning(
            f"Unknown local store backend: {backend_type}, defaulting to file"
        )
        return JsonFileStore(storage_dir=local_storage_dir)


def create_remote_store(
    backend_type: str,
    project_id: Optional[str] = None,
    collection: str = "city_images",
    api_key: Optional[str] = None,
    timeout: float = 10.0,
) -> Optional[RemoteStore]:
    """
    Factory function to create the shared remote store.

    Args:
        backend_type: Type of backend ('none', 'memory', 'firestore')
        project_id: Firestore project id (required for firestore)
        collection: Collection holding cached image documents
        api_key: Firestore web API key
        timeout: Request timeout in seconds

    Returns:
        RemoteStore instance, or None when no remote tier is available.
        A misconfigured remote backend degrades to None rather than failing
        startup.
    """
    backend_type = backend_type.lower()

    if backend_type == "none":
        logger.info("No remote store configured; remote cache disabled")
        return None

    elif backend_type == "memory":
        logger.info(f"Using MockRemoteStore: {collection}")
        return MockRemoteStore(collection=collection)

    elif backend_type == "firestore":
        if not project_id:
            logger.warning("Firestore selected without project id; remote cache disabled")
            return None
        logger.info(f"Using FirestoreRemoteStore: {project_id}/{collection}")
        return FirestoreRemoteStore(
            project_id=project_id,
            collection=collection,
            api_key=api_key,
            timeout=timeout,
        )

    else:
        logger.warning(
            f"Unknown remote store backend: {backend_type}, remote cache disabled"
        )
        return None
