# Platform link manager — per-identity platform credentials.
# Created: 2026-10-12
#
# Links live under platform_link:{identity}:{platform}, independent of any
# session. The store TTL follows the downstream token's own expiry; a link
# whose token has already expired is deleted on the next read.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

import httpx

from luxbridge.auth.models import LinkStatus, PlatformLink
from luxbridge.auth.platform_client import PlatformClient
from luxbridge.errors import OK, Outcome, failed
from luxbridge.platforms import Platform
from luxbridge.store import CredentialStore, read_record
from luxbridge.store.keys import platform_link_key

logger = logging.getLogger(__name__)

DEFAULT_LINK_TTL = timedelta(hours=24)

INVALID_CREDENTIALS = "invalid_credentials"
AUTHENTICATION_FAILED = "authentication_failed"
UNEXPECTED_RESPONSE = "unexpected_response"


@dataclass
class CredentialCheck:
    """Outcome of logging in to a platform with user-supplied credentials."""

    ok: bool
    reason: str | None = None
    platform_user_id: str = ""
    email: str = ""
    name: str = ""
    bearer_token: str = ""
    expires_at: datetime | None = None


class PlatformLinkManager:
    def __init__(self, store: CredentialStore, client: PlatformClient):
        self.store = store
        self.client = client

    def _ttl_for(self, token_expiry: datetime | None) -> int | None:
        """Store TTL for a link: seconds until token expiry, 24h when unknown.

        ``None`` means persist without expiry; reads then catch the stale token.
        """
        if token_expiry is None:
            return int(DEFAULT_LINK_TTL.total_seconds())
        remaining = max(0, math.floor((token_expiry - self.store.now()).total_seconds()))
        return remaining or None

    async def _write(self, link: PlatformLink) -> None:
        key = platform_link_key(link.identity_id, link.platform.value)
        await self.store.set(key, link.encode(), ttl=self._ttl_for(link.token_expiry))

    async def validate_credentials(
        self, platform: Platform, email: str, password: str
    ) -> CredentialCheck:
        try:
            response = await self.client.login(platform, email, password)
        except httpx.HTTPError as exc:
            logger.warning("Platform login to %s failed: %s", platform.value, exc)
            return CredentialCheck(ok=False, reason=str(exc) or type(exc).__name__)

        if response.status_code == 401:
            return CredentialCheck(ok=False, reason=INVALID_CREDENTIALS)
        if not response.is_success:
            return CredentialCheck(ok=False, reason=AUTHENTICATION_FAILED)

        try:
            body = response.json()
            token = body["accessToken"]
            user_id = str(body["userId"])
        except (ValueError, KeyError, TypeError):
            logger.error("Unexpected login response shape from %s", platform.value)
            return CredentialCheck(ok=False, reason=UNEXPECTED_RESPONSE)

        expires_in = body.get("expiresIn")
        expires_at = (
            self.store.now() + timedelta(seconds=expires_in)
            if isinstance(expires_in, (int, float)) and expires_in > 0
            else None
        )
        return CredentialCheck(
            ok=True,
            platform_user_id=user_id,
            email=email,
            name=body.get("name") or "",
            bearer_token=token,
            expires_at=expires_at,
        )

    async def store_link(
        self,
        *,
        platform: Platform,
        identity_id: str,
        platform_user_id: str,
        email: str,
        access_token: str,
        name: str = "",
        token_expiry: datetime | None = None,
    ) -> PlatformLink:
        """Persist a freshly validated link as ``active``."""
        now = self.store.now()
        link = PlatformLink(
            platform=platform,
            identity_id=identity_id,
            platform_user_id=platform_user_id,
            email=email,
            name=name,
            access_token=access_token,
            token_expiry=token_expiry,
            linked_at=now,
            last_used_at=now,
            status=LinkStatus.ACTIVE,
        )
        await self._write(link)
        logger.info("Linked %s for identity %s", platform.value, identity_id)
        return link

    async def get(self, identity_id: str, platform: Platform) -> PlatformLink | None:
        key = platform_link_key(identity_id, platform.value)
        link = await read_record(self.store, key, PlatformLink)
        if link is None:
            return None
        if link.token_expired(self.store.now()):
            await self.store.delete(key)
            return None
        return link

    async def delete(self, identity_id: str, platform: Platform) -> Outcome:
        """Best effort; a missing link never blocks a disconnect."""
        try:
            await self.store.delete(platform_link_key(identity_id, platform.value))
        except Exception as exc:
            return failed(exc)
        return OK

    async def touch(self, identity_id: str, platform: Platform) -> Outcome:
        try:
            link = await self.get(identity_id, platform)
            if link is None:
                return OK
            link.last_used_at = self.store.now()
            await self._write(link)
        except Exception as exc:
            return failed(exc)
        return OK

    async def list_all(self, identity_id: str) -> list[PlatformLink]:
        links = []
        for platform in Platform:
            link = await self.get(identity_id, platform)
            if link is not None:
                links.append(link)
        return links

    async def validate_all(self, identity_id: str) -> list[PlatformLink]:
        """Re-check every stored link against the platform's ``/auth/me``.

        2xx reactivates, 401 marks ``expired``, anything else ``invalid``.
        Every link is rewritten, changed or not.
        """
        results = []
        for link in await self.list_all(identity_id):
            try:
                response = await self.client.me(link.platform, link.access_token)
            except httpx.HTTPError as exc:
                logger.warning("Validation of %s link failed: %s", link.platform.value, exc)
                link.status = LinkStatus.INVALID
            else:
                if response.is_success:
                    link.status = LinkStatus.ACTIVE
                elif response.status_code == 401:
                    link.status = LinkStatus.EXPIRED
                else:
                    link.status = LinkStatus.INVALID
            await self._write(link)
            results.append(link)
        return results
