# In-process credential store.
# Created: 2026-10-12
#
# Same semantics as the Redis store, kept in a dict. Only valid for a single
# process (dev server, tests); expiry is evaluated against the injected clock.

from __future__ import annotations

import fnmatch
import math
import time
from collections.abc import AsyncIterator, Callable

from luxbridge.store.base import CredentialStore


class MemoryCredentialStore(CredentialStore):
    """Dict-backed store. Expired keys are dropped on access."""

    def __init__(self, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self._data: dict[str, tuple[str, float | None]] = {}

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    async def get(self, key: str) -> str | None:
        entry = self._live(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        expires_at = self._clock() + ttl if ttl is not None else None
        self._data[key] = (value, expires_at)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self._data[key]
                removed += 1
        return removed

    async def ttl(self, key: str) -> int:
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return math.ceil(entry[1] - self._clock())

    async def scan(self, pattern: str) -> AsyncIterator[str]:
        for key in list(self._data):
            if fnmatch.fnmatchcase(key, pattern) and self._live(key) is not None:
                yield key
