# Authenticated call proxy.
# Created: 2026-10-12
#
# Resolves a session's link for a platform, attaches its bearer token and
# forwards the call. A 401 from the platform demotes the session's link to
# ``invalid``; other failures leave the link alone.

from __future__ import annotations

import logging
from typing import Any

import httpx

from luxbridge.auth.models import LinkStatus
from luxbridge.auth.platform_client import PlatformClient
from luxbridge.auth.sessions import SessionManager
from luxbridge.errors import (
    InvalidSessionError,
    PlatformAPIError,
    PlatformAuthExpiredError,
    PlatformNotLinkedError,
)
from luxbridge.platforms import Platform

logger = logging.getLogger(__name__)


class AuthenticatedCallProxy:
    def __init__(self, sessions: SessionManager, client: PlatformClient):
        self.sessions = sessions
        self.client = client

    async def call(
        self,
        session_id: str,
        platform: Platform,
        endpoint: str,
        *,
        method: str = "GET",
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Call ``endpoint`` on ``platform`` as the session's linked user.

        Only updates the session's copy of the link; callers refresh the
        independent platform-link record themselves.
        """
        session = await self.sessions.get(session_id)
        if session is None:
            raise InvalidSessionError("Invalid session")

        link = session.platforms.get(platform)
        if link is None or link.status is not LinkStatus.ACTIVE:
            raise PlatformNotLinkedError(f"platform {platform.value} not linked or inactive")

        try:
            response = await self.client.request(
                platform, endpoint, link.access_token, method=method, json=json, params=params
            )
        except httpx.HTTPError as exc:
            raise PlatformAPIError(f"platform API call failed: {exc}") from exc

        if response.status_code == 401:
            link.status = LinkStatus.INVALID
            await self.sessions.set_platform_link(session_id, platform, link)
            logger.info("Demoted %s link on session %s after 401", platform.value, session_id)
            raise PlatformAuthExpiredError(f"platform {platform.value} authentication expired")
        if not response.is_success:
            raise PlatformAPIError(f"platform API call failed: {response.reason_phrase}")

        link.last_used_at = self.sessions.store.now()
        await self.sessions.set_platform_link(session_id, platform, link)

        try:
            return response.json()
        except ValueError as exc:
            raise PlatformAPIError("platform API returned a non-JSON body") from exc
