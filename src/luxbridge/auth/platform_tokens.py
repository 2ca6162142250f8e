# Platform bearer tokens (HS256 JWT).
# Created: 2026-10-12
#
# Issued by the mock platform APIs at login and checked by their /auth/me.
# Separate signing key from anything OAuth-related.

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Callable

import jwt

from luxbridge.platforms import Platform

ISSUER = "luxbridge-platform"
TOKEN_TYPE = "platform"


@dataclass(frozen=True)
class PlatformTokenClaims:
    user_id: str
    platform: Platform
    issued_at: datetime
    expires_at: datetime


class PlatformTokenIssuer:
    def __init__(
        self,
        *,
        secret: str,
        ttl_seconds: int = 86400,
        now: Callable[[], datetime] | None = None,
    ):
        self._secret = secret
        self.ttl = timedelta(seconds=ttl_seconds)
        self._now = now or (lambda: datetime.now(UTC))

    def issue(self, user_id: str, platform: Platform) -> tuple[str, datetime]:
        now = self._now()
        exp = now + self.ttl
        payload = {
            "sub": user_id,
            "platform": platform.value,
            "type": TOKEN_TYPE,
            "iss": ISSUER,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm="HS256"), exp

    def verify(self, token: str) -> PlatformTokenClaims | None:
        """Return the token's claims, or None when it is invalid or expired.

        Expiry is checked against the issuer's clock rather than wall time.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=["HS256"],
                issuer=ISSUER,
                options={
                    "require": ["sub", "exp", "iat"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.PyJWTError:
            return None

        if payload.get("type") != TOKEN_TYPE:
            return None
        try:
            platform = Platform(payload.get("platform"))
        except ValueError:
            return None

        expires_at = datetime.fromtimestamp(payload["exp"], UTC)
        if self._now() >= expires_at:
            return None
        return PlatformTokenClaims(
            user_id=str(payload["sub"]),
            platform=platform,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=expires_at,
        )
