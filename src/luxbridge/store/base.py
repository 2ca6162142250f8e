# Credential store interface.
# Created: 2026-10-12
#
# A TTL-capable async key-value store. Every persisted record goes through
# one of these; components never hold their own state between requests.

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime


class CredentialStore(ABC):
    """Async key-value store with per-key expiry.

    Per-key operations are atomic; nothing spanning two calls is. ``ttl`` values
    are whole seconds. ``set`` with ``ttl=None`` persists without expiry and
    clears any previous expiry on the key.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def now(self) -> datetime:
        """Current time as seen by the store; all record timestamps use this."""
        return datetime.fromtimestamp(self._clock(), UTC)

    @abstractmethod
    async def get(self, key: str) -> str | None: ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int | None = None) -> None: ...

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Remaining seconds; -1 when the key has no expiry, -2 when absent."""

    @abstractmethod
    def scan(self, pattern: str) -> AsyncIterator[str]:
        """Iterate keys matching a glob pattern."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None
