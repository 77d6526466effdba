"""
Store implementations.
"""

from .local import JsonFileStore
from .memory import MemoryStore, MockRemoteStore
from .firestore import FirestoreRemoteStore

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "MockRemoteStore",
    "FirestoreRemoteStore",
]
