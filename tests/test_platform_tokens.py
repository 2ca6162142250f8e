# Tests for platform bearer tokens.
# Created: 2026-10-12

from datetime import UTC, datetime, timedelta

import jwt

from luxbridge.auth.platform_tokens import ISSUER, PlatformTokenIssuer
from luxbridge.platforms import Platform

SECRET = "unit-test-secret"


class Clock:
    def __init__(self):
        self.now = datetime(2026, 10, 12, 9, 0, tzinfo=UTC)

    def __call__(self):
        return self.now


def _issuer(clock=None, ttl=86400):
    return PlatformTokenIssuer(secret=SECRET, ttl_seconds=ttl, now=clock or Clock())


def test_issue_and_verify():
    clock = Clock()
    issuer = _issuer(clock)
    token, exp = issuer.issue("user_1", Platform.REALT)
    assert exp == clock.now + timedelta(days=1)

    claims = issuer.verify(token)
    assert claims.user_id == "user_1"
    assert claims.platform is Platform.REALT
    assert claims.issued_at == clock.now
    assert claims.expires_at == exp


def test_claims_layout():
    token, _ = _issuer().issue("user_1", Platform.SPLINT_INVEST)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
    assert payload["sub"] == "user_1"
    assert payload["platform"] == "splint_invest"
    assert payload["type"] == "platform"
    assert payload["iss"] == ISSUER


def test_expiry_follows_injected_clock():
    clock = Clock()
    issuer = _issuer(clock, ttl=60)
    token, _ = issuer.issue("user_1", Platform.REALT)
    clock.now += timedelta(seconds=59)
    assert issuer.verify(token) is not None
    clock.now += timedelta(seconds=1)
    assert issuer.verify(token) is None


def test_wrong_secret_rejected():
    token, _ = _issuer().issue("user_1", Platform.REALT)
    other = PlatformTokenIssuer(secret="another-secret", now=Clock())
    assert other.verify(token) is None


def test_garbage_rejected():
    assert _issuer().verify("not.a.jwt") is None
    assert _issuer().verify("") is None


def test_foreign_token_type_rejected():
    clock = Clock()
    now = int(clock.now.timestamp())
    token = jwt.encode(
        {
            "sub": "user_1",
            "platform": "realt",
            "type": "refresh",
            "iss": ISSUER,
            "iat": now,
            "exp": now + 600,
        },
        SECRET,
        algorithm="HS256",
    )
    assert _issuer(clock).verify(token) is None


def test_unknown_platform_rejected():
    clock = Clock()
    now = int(clock.now.timestamp())
    token = jwt.encode(
        {
            "sub": "user_1",
            "platform": "nasdaq",
            "type": "platform",
            "iss": ISSUER,
            "iat": now,
            "exp": now + 600,
        },
        SECRET,
        algorithm="HS256",
    )
    assert _issuer(clock).verify(token) is None
