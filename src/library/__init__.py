"""Concrete candidate store and auto-sync queue."""

from .vector_store import InMemoryVectorStore
from .sync_queue import InMemorySyncQueue, SyncJob

__all__ = [
    "InMemoryVectorStore",
    "InMemorySyncQueue",
    "SyncJob",
]
