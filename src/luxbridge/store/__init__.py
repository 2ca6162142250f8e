"""Credential store backends."""

from __future__ import annotations

from luxbridge.store.base import CredentialStore
from luxbridge.store.memory import MemoryCredentialStore
from luxbridge.store.records import StoredRecord, read_record

__all__ = ["CredentialStore", "MemoryCredentialStore", "StoredRecord", "open_store", "read_record"]


def open_store(url: str) -> CredentialStore:
    """Create the store named by *url* (``memory://`` or ``redis://...``)."""
    if url.startswith("memory://"):
        return MemoryCredentialStore()

    from luxbridge.store.redis_store import RedisCredentialStore

    return RedisCredentialStore(url)
