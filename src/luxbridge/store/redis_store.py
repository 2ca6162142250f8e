# Redis-backed credential store.
# Created: 2026-10-12

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import redis.asyncio as redis

from luxbridge.errors import StoreUnavailableError
from luxbridge.store.base import CredentialStore

logger = logging.getLogger(__name__)


class RedisCredentialStore(CredentialStore):
    """Thin async wrapper over one shared ``redis.asyncio`` client.

    The client is created once per process and reused across requests; its
    connection pool handles concurrency.
    """

    def __init__(self, url: str, client: redis.Redis | None = None):
        super().__init__()
        self.url = url
        self._client = client or redis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        # SET without EX also clears a previous expiry, matching the interface
        await self._client.set(key, value, ex=ttl)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._client.delete(*keys))

    async def ttl(self, key: str) -> int:
        return int(await self._client.ttl(key))

    async def scan(self, pattern: str) -> AsyncIterator[str]:
        async for key in self._client.scan_iter(match=pattern, count=200):
            yield key

    async def ping(self) -> bool:
        try:
            await self._client.ping()
        except redis.RedisError as exc:
            raise StoreUnavailableError(f"Redis unreachable: {exc}") from exc
        logger.info("Connected to Redis credential store")
        return True

    async def close(self) -> None:
        await self._client.aclose()
