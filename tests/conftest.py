# Shared fixtures: fake clock, memory store, scriptable platform API, app.
# Created: 2026-10-12

from __future__ import annotations

import json
from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from luxbridge.api.app import create_app
from luxbridge.config import Settings
from luxbridge.services import build_services
from luxbridge.store import MemoryCredentialStore

START = 1_790_000_000.0
REDIRECT_URI = "https://a.test/cb"


class FakeClock:
    """Callable clock for the memory store; advance it to age records."""

    def __init__(self, start: float = START):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, delta: timedelta | float) -> None:
        if isinstance(delta, timedelta):
            delta = delta.total_seconds()
        self.current += delta


class FakePlatforms:
    """Scriptable downstream platform API served through httpx.MockTransport."""

    def __init__(self):
        self.users: dict[str, tuple[str, str, str]] = {}
        self.login_status: int | None = None
        self.login_body: dict | None = None
        self.me_status = 200
        self.call_status = 200
        self.call_body: object = {"holdings": []}
        self.network_error = False
        self.requests: list[httpx.Request] = []

    def add_user(self, email: str, password: str, user_id: str = "pu_1", name: str = "Ada"):
        self.users[email] = (password, user_id, name)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.network_error:
            raise httpx.ConnectError("connection refused", request=request)

        _, _, platform, rest = request.url.path.split("/", 3)
        if rest == "auth/login":
            if self.login_status is not None:
                return httpx.Response(self.login_status, json=self.login_body or {})
            body = json.loads(request.content)
            user = self.users.get(body.get("email"))
            if user is None or user[0] != body.get("password"):
                return httpx.Response(401, json={"error": "invalid_credentials"})
            return httpx.Response(
                200,
                json={
                    "accessToken": f"ptok-{platform}-{user[1]}",
                    "userId": user[1],
                    "expiresIn": 86400,
                    "platform": platform,
                    "name": user[2],
                },
            )
        if rest == "auth/me":
            return httpx.Response(self.me_status, json={"platform": platform})
        return httpx.Response(self.call_status, json=self.call_body)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryCredentialStore(clock)


@pytest.fixture
def platforms():
    return FakePlatforms()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        store_url="memory://",
        identity_verifier="mock",
        platform_jwt_secret="test-platform-secret",
        platform_api_base_url="http://platforms.test",
    )


@pytest.fixture
def services(settings, store, platforms):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(platforms.handler))
    return build_services(settings, store=store, http_client=http_client)


@pytest.fixture
def app(settings, services):
    return create_app(settings, services)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def oauth_client(services):
    """A registered confidential client, created through the server."""

    async def _register(public: bool = False):
        client, error = await services.oauth.register_client(
            "Test MCP Client",
            [REDIRECT_URI],
            token_endpoint_auth_method="none" if public else "client_secret_post",
        )
        assert error is None
        return client

    return _register


@pytest.fixture
def issue_token(services, oauth_client):
    """Run register -> open -> bind -> exchange and return (access_token, record)."""

    async def _issue(identity_token: str = "identity-token-abc", code: str = "code-1"):
        client = await oauth_client(public=True)
        await services.oauth.open_code(code, client.client_id, REDIRECT_URI)
        claims = await services.verifier.verify(identity_token)
        await services.oauth.bind_code(code, claims.subject_id, claims.to_user_data())
        result, error = await services.oauth.exchange(code, client.client_id, REDIRECT_URI)
        assert error is None
        record = await services.oauth.verify_access_token(result["access_token"])
        return result["access_token"], record

    return _issue
