# Tests for identity verification and identity records.
# Created: 2026-10-12

import base64
import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from luxbridge.auth.identity import HttpIdentityVerifier, MockIdentityVerifier
from luxbridge.auth.users import IdentityStore, display_name_for

VERIFY_URL = "https://identity.test/api/v1/verify"


def _verifier(handler):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpIdentityVerifier(http_client, VERIFY_URL, "app-1", "app-secret")


class TestHttpVerifier:
    async def test_valid_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "userId": "did:privy:abc",
                    "expiration": 1_790_003_600,
                    "email": "ada@example.com",
                    "walletAddress": "0xabc",
                    "appId": "app-1",
                    "issuer": "privy.io",
                },
            )

        claims = await _verifier(handler).verify("identity-token")
        assert claims.subject_id == "did:privy:abc"
        assert claims.expires_at == datetime.fromtimestamp(1_790_003_600, UTC)
        assert claims.email == "ada@example.com"
        assert claims.metadata["issuer"] == "privy.io"

        request = seen[0]
        assert str(request.url) == VERIFY_URL
        assert json.loads(request.content) == {"token": "identity-token"}
        assert request.headers["x-app-id"] == "app-1"
        expected = base64.b64encode(b"app-1:app-secret").decode()
        assert request.headers["authorization"] == f"Basic {expected}"

    async def test_iso_expiration(self):
        def handler(request):
            return httpx.Response(
                200, json={"userId": "u1", "expiration": "2026-10-12T10:00:00Z"}
            )

        claims = await _verifier(handler).verify("t")
        assert claims.expires_at == datetime(2026, 10, 12, 10, 0, tzinfo=UTC)

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(401, json={"error": "invalid token"}),
            httpx.Response(200, text="<html>"),
            httpx.Response(200, json={"expiration": 1}),
            httpx.Response(200, json=["userId"]),
        ],
    )
    async def test_rejections(self, response):
        assert await _verifier(lambda request: response).verify("t") is None

    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        assert await _verifier(handler).verify("t") is None

    async def test_empty_token_is_not_sent(self):
        calls = []
        verifier = _verifier(lambda request: calls.append(request) or httpx.Response(200))
        assert await verifier.verify("") is None
        assert await verifier.verify(None) is None
        assert calls == []


class TestMockVerifier:
    async def test_derives_subject(self):
        now = datetime(2026, 10, 12, tzinfo=UTC)
        claims = await MockIdentityVerifier(clock=lambda: now).verify("abcdefghijkl")
        assert claims.subject_id == "user_abcdefgh"
        assert claims.expires_at == now + timedelta(hours=24)
        assert claims.to_user_data().has_profile

    async def test_empty_token(self):
        assert await MockIdentityVerifier().verify("") is None


class TestIdentityStore:
    def test_display_name(self):
        assert display_name_for("ada@example.com") == "ada"
        assert display_name_for("@example.com") == "User"
        assert display_name_for(None) == "User"

    async def test_upsert_creates_then_refreshes(self, store, clock):
        identities = IdentityStore(store)
        created = await identities.upsert("U1", email="ada@example.com")
        assert created.name == "ada"
        assert created.identity_provider_id == "U1"

        clock.advance(60)
        updated = await identities.upsert("U1", wallet_address="0xabc")
        assert updated.email == "ada@example.com"
        assert updated.wallet_address == "0xabc"
        assert updated.created_at == created.created_at
        assert updated.last_active_at == store.now()

    async def test_touch_activity(self, store, clock):
        identities = IdentityStore(store)
        assert not (await identities.touch_activity("nobody")).ok

        await identities.upsert("U1")
        clock.advance(30)
        assert (await identities.touch_activity("U1")).ok
        assert (await identities.get("U1")).last_active_at == store.now()


class TestVerifierWiring:
    def _settings(self, **overrides):
        from luxbridge.config import Settings

        return Settings(
            _env_file=None, store_url="memory://", identity_verifier="http", **overrides
        )

    def test_http_verifier_requires_url(self, store):
        from luxbridge.errors import ConfigurationError
        from luxbridge.services import build_services

        with pytest.raises(ConfigurationError) as exc_info:
            build_services(self._settings(), store=store)
        assert "LUXBRIDGE_IDENTITY_VERIFY_URL" in exc_info.value.message

    def test_http_verifier_uses_configured_url(self, store):
        from luxbridge.services import build_services

        services = build_services(self._settings(identity_verify_url=VERIFY_URL), store=store)
        assert isinstance(services.verifier, HttpIdentityVerifier)
        assert services.verifier.verify_url == VERIFY_URL
