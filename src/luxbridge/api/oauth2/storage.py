# OAuth2 client, code and token storage.
# Created: 2026-10-12
#
# Typed accessors over the credential store. Authorization codes carry a
# store TTL matching their validity window; access tokens expire with the
# token itself. Client registrations never expire.

from __future__ import annotations

import logging
import math
from datetime import datetime

from luxbridge.api.oauth2.models import AuthorizationCode, OAuthAccessToken, OAuthClient
from luxbridge.store import CredentialStore, read_record
from luxbridge.store.keys import authcode_key, client_key, oauth_token_key

logger = logging.getLogger(__name__)

AUTHCODE_STORE_TTL = 600


class OAuthStorage:
    """Store-backed OAuth2 persistence."""

    def __init__(self, store: CredentialStore):
        self.store = store

    def _seconds_until(self, moment: datetime) -> int | None:
        remaining = math.floor((moment - self.store.now()).total_seconds())
        return remaining if remaining > 0 else None

    # Clients

    async def save_client(self, client: OAuthClient) -> None:
        await self.store.set(client_key(client.client_id), client.encode())

    async def get_client(self, client_id: str) -> OAuthClient | None:
        if not client_id:
            return None
        return await read_record(self.store, client_key(client_id), OAuthClient)

    # Authorization codes

    async def save_code(self, code: AuthorizationCode) -> None:
        await self.store.set(authcode_key(code.code), code.encode(), ttl=AUTHCODE_STORE_TTL)

    async def get_code(self, code: str) -> AuthorizationCode | None:
        if not code:
            return None
        return await read_record(self.store, authcode_key(code), AuthorizationCode)

    async def delete_code(self, code: str) -> bool:
        return await self.store.delete(authcode_key(code)) > 0

    # Access tokens

    async def save_token(self, token: OAuthAccessToken) -> None:
        ttl = self._seconds_until(token.expires_at)
        if ttl is None:
            logger.warning("Refusing to persist an already-expired access token")
            return
        await self.store.set(oauth_token_key(token.token), token.encode(), ttl=ttl)

    async def get_token(self, token: str) -> OAuthAccessToken | None:
        if not token:
            return None
        return await read_record(self.store, oauth_token_key(token), OAuthAccessToken)
