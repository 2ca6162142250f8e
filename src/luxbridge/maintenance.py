# Maintenance operations behind the luxbridge CLI.
# Created: 2026-10-12

from __future__ import annotations

import logging

from luxbridge.api.oauth2.models import OAuthClient
from luxbridge.api.oauth2.server import AuthorizationServer
from luxbridge.api.oauth2.storage import OAuthStorage
from luxbridge.auth.sessions import SessionManager
from luxbridge.auth.users import IdentityStore
from luxbridge.errors import OAuthError
from luxbridge.store import CredentialStore
from luxbridge.store.keys import EPHEMERAL_PATTERNS

logger = logging.getLogger(__name__)


async def sweep_sessions(store: CredentialStore) -> int:
    return await SessionManager(store).sweep_expired()


async def register_client(
    store: CredentialStore, name: str, redirect_uris: list[str], *, public: bool = False
) -> OAuthClient:
    sessions = SessionManager(store)
    server = AuthorizationServer(OAuthStorage(store), sessions, IdentityStore(store))
    client, error = await server.register_client(
        name,
        redirect_uris,
        token_endpoint_auth_method="none" if public else "client_secret_post",
    )
    if error:
        raise OAuthError(error)
    return client


async def clear_ephemeral(store: CredentialStore) -> dict[str, int]:
    """Delete sessions, session indexes, codes and OAuth tokens.

    Client registrations, identities and platform links are kept. Returns the
    number of keys removed per pattern.
    """
    removed: dict[str, int] = {}
    for pattern in EPHEMERAL_PATTERNS:
        keys = [key async for key in store.scan(pattern)]
        removed[pattern] = await store.delete(*keys) if keys else 0
        logger.info("Cleared %d keys matching %s", removed[pattern], pattern)
    return removed
