# Service container — wires every component to one store and one HTTP client.
# Created: 2026-10-12

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from luxbridge.api.oauth2.server import AuthorizationServer
from luxbridge.api.oauth2.storage import OAuthStorage
from luxbridge.auth.call_proxy import AuthenticatedCallProxy
from luxbridge.auth.identity import HttpIdentityVerifier, IdentityVerifier, MockIdentityVerifier
from luxbridge.auth.platform_client import PlatformClient
from luxbridge.auth.platform_links import PlatformLinkManager
from luxbridge.auth.platform_tokens import PlatformTokenIssuer
from luxbridge.auth.sessions import SessionManager
from luxbridge.auth.users import IdentityStore
from luxbridge.config import Settings
from luxbridge.errors import ConfigurationError
from luxbridge.platform_api.users import PlatformUserDirectory
from luxbridge.store import CredentialStore, open_store

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    store: CredentialStore
    http_client: httpx.AsyncClient
    oauth: AuthorizationServer
    sessions: SessionManager
    identities: IdentityStore
    links: PlatformLinkManager
    proxy: AuthenticatedCallProxy
    verifier: IdentityVerifier
    platform_tokens: PlatformTokenIssuer
    platform_users: PlatformUserDirectory

    async def aclose(self) -> None:
        await self.http_client.aclose()
        await self.store.close()


def build_services(
    settings: Settings,
    store: CredentialStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Services:
    """Build the component graph. Nothing connects until first use."""
    if settings.identity_verifier == "http" and not settings.identity_verify_url:
        raise ConfigurationError(
            "LUXBRIDGE_IDENTITY_VERIFY_URL must be set when identity_verifier is \"http\""
        )

    store = store or open_store(settings.store_url)
    http_client = http_client or httpx.AsyncClient(timeout=settings.platform_request_timeout)

    sessions = SessionManager(store)
    identities = IdentityStore(store)
    platform_client = PlatformClient(http_client, settings.platform_api_base_url)

    verifier: IdentityVerifier
    if settings.identity_verifier == "mock":
        logger.warning("Using the mock identity verifier; every non-empty token is accepted")
        verifier = MockIdentityVerifier(clock=store.now)
    else:
        verifier = HttpIdentityVerifier(
            http_client,
            settings.identity_verify_url,
            settings.identity_app_id,
            settings.identity_app_secret,
        )

    return Services(
        settings=settings,
        store=store,
        http_client=http_client,
        oauth=AuthorizationServer(OAuthStorage(store), sessions, identities),
        sessions=sessions,
        identities=identities,
        links=PlatformLinkManager(store, platform_client),
        proxy=AuthenticatedCallProxy(sessions, platform_client),
        verifier=verifier,
        platform_tokens=PlatformTokenIssuer(
            secret=settings.platform_jwt_secret,
            ttl_seconds=settings.platform_token_ttl_seconds,
            now=store.now,
        ),
        platform_users=PlatformUserDirectory(store),
    )
