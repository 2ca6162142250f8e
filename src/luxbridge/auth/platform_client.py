# HTTP client for downstream platform APIs.
# Created: 2026-10-12

from __future__ import annotations

import logging
from typing import Any

import httpx

from luxbridge.platforms import Platform

logger = logging.getLogger(__name__)


class PlatformClient:
    """Issues calls to ``{base_url}/api/{platform}/...`` over a shared AsyncClient."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")

    def url(self, platform: Platform, endpoint: str) -> str:
        return f"{self.base_url}/api/{platform.value}/{endpoint.lstrip('/')}"

    async def login(self, platform: Platform, email: str, password: str) -> httpx.Response:
        return await self.http_client.post(
            self.url(platform, "auth/login"),
            json={"email": email, "password": password},
        )

    async def me(self, platform: Platform, bearer_token: str) -> httpx.Response:
        return await self.request(platform, "auth/me", bearer_token)

    async def request(
        self,
        platform: Platform,
        endpoint: str,
        bearer_token: str,
        *,
        method: str = "GET",
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        logger.debug("%s %s/%s", method, platform.value, endpoint)
        return await self.http_client.request(
            method,
            self.url(platform, endpoint),
            json=json,
            params=params,
            headers={"Authorization": f"Bearer {bearer_token}"},
        )
