# External identity verification.
# Created: 2026-10-12
#
# verify(token) -> IdentityClaims | None. The HTTP verifier delegates to the
# hosted identity service; the mock verifier accepts any non-empty token and
# is only meant for local development.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import httpx

from luxbridge.api.oauth2.models import BoundUserData

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = ("read", "write")


@dataclass
class IdentityClaims:
    subject_id: str
    expires_at: datetime | None = None
    scopes: tuple[str, ...] = DEFAULT_SCOPES
    email: str | None = None
    wallet_address: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_user_data(self) -> BoundUserData:
        return BoundUserData(
            email=self.email,
            identity_provider_id=self.subject_id,
            wallet_address=self.wallet_address,
        )


class IdentityVerifier(Protocol):
    async def verify(self, token: str | None) -> IdentityClaims | None: ...


def _parse_expiry(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, UTC)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


class HttpIdentityVerifier:
    """Verify identity tokens against the hosted identity service.

    The service answers ``POST verify_url`` with the token's claims
    (``userId``, ``expiration`` and optional profile fields) or a non-2xx
    status when the token is not valid.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        verify_url: str,
        app_id: str,
        app_secret: str,
    ):
        self.http_client = http_client
        self.verify_url = verify_url
        self.app_id = app_id
        self.app_secret = app_secret

    async def verify(self, token: str | None) -> IdentityClaims | None:
        if not token:
            return None
        try:
            response = await self.http_client.post(
                self.verify_url,
                json={"token": token},
                auth=(self.app_id, self.app_secret),
                headers={"X-App-Id": self.app_id},
            )
        except httpx.HTTPError as exc:
            logger.warning("Identity verification request failed: %s", exc)
            return None

        if response.status_code != 200:
            logger.info("Identity token rejected (HTTP %d)", response.status_code)
            return None

        try:
            body = response.json()
        except ValueError:
            logger.warning("Identity service returned a non-JSON body")
            return None

        subject = body.get("userId") if isinstance(body, dict) else None
        if not subject:
            logger.warning("Identity service response carried no userId")
            return None

        return IdentityClaims(
            subject_id=subject,
            expires_at=_parse_expiry(body.get("expiration")),
            email=body.get("email"),
            wallet_address=body.get("walletAddress"),
            metadata={"appId": body.get("appId"), "issuer": body.get("issuer")},
        )


class MockIdentityVerifier:
    """Accepts any non-empty token as ``user_<first 8 chars>``."""

    def __init__(self, clock=None):
        self._clock = clock

    def _now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(UTC)

    async def verify(self, token: str | None) -> IdentityClaims | None:
        if not token:
            return None
        return IdentityClaims(
            subject_id=f"user_{token[:8]}",
            expires_at=self._now() + timedelta(hours=24),
            metadata={"appId": "mock-app-id", "issuer": "mock-issuer"},
        )
