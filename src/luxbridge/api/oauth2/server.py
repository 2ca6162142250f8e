# OAuth2 Authorization Server with PKCE support.
# Created: 2026-10-12
#
# Authorization code flow (RFC 6749 / 7636) for MCP clients. A code is opened
# unbound, bound to an identity once the external verifier accepts the user,
# and exchanged exactly once: single use is enforced by deleting the code.

from __future__ import annotations

import logging
from datetime import timedelta
from urllib.parse import urlparse

from luxbridge.api.oauth2.models import (
    AuthorizationCode,
    BoundUserData,
    OAuthAccessToken,
    OAuthClient,
)
from luxbridge.api.oauth2.storage import OAuthStorage
from luxbridge.api.oauth2.tokens import (
    generate_access_token,
    generate_client_id,
    generate_client_secret,
    verify_pkce,
)
from luxbridge.auth.sessions import SessionManager
from luxbridge.auth.users import IdentityStore

logger = logging.getLogger(__name__)

# Lifetimes
ACCESS_TOKEN_TTL = timedelta(hours=1)
CODE_TTL = timedelta(minutes=10)


def _is_absolute_url(value: object) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    # Private-use schemes (myapp:/callback) and URNs have no netloc
    return bool(parsed.scheme and (parsed.netloc or parsed.path))


class AuthorizationServer:
    """OAuth2 authorization server with PKCE.

    Protocol outcomes are returned as ``(result, error)`` tuples; ``error`` is
    the OAuth error code when the request is rejected.
    """

    def __init__(
        self,
        storage: OAuthStorage,
        sessions: SessionManager,
        identities: IdentityStore,
    ):
        self.storage = storage
        self.sessions = sessions
        self.identities = identities

    @property
    def store(self):
        return self.storage.store

    # Client registry

    async def register_client(
        self,
        name: object,
        redirect_uris: object,
        token_endpoint_auth_method: str = "client_secret_post",
    ) -> tuple[OAuthClient | None, str | None]:
        """Register a client. The returned record holds the only copy of the secret.

        ``token_endpoint_auth_method="none"`` registers a public client with no
        secret; such clients must use PKCE or present nothing at the token endpoint.
        """
        if not isinstance(name, str) or not name.strip():
            return None, "invalid_client_name"
        if isinstance(redirect_uris, str):
            redirect_uris = [redirect_uris]
        if not isinstance(redirect_uris, list):
            return None, "invalid_redirect_uris"

        valid_uris = [uri for uri in redirect_uris if _is_absolute_url(uri)]
        if not valid_uris:
            return None, "invalid_redirect_uris"

        public = token_endpoint_auth_method == "none"
        client_id = generate_client_id()
        client = OAuthClient(
            id=client_id,
            client_id=client_id,
            client_secret="" if public else generate_client_secret(),
            name=name.strip(),
            redirect_uris=valid_uris,
            created_at=self.store.now(),
        )
        await self.storage.save_client(client)
        logger.info("Registered OAuth client %s (%s)", client.name, client_id)
        return client, None

    async def get_client(self, client_id: str) -> OAuthClient | None:
        return await self.storage.get_client(client_id)

    # Authorization codes

    async def open_code(
        self,
        code: str,
        client_id: str,
        redirect_uri: str,
        code_challenge: str | None = None,
        code_challenge_method: str | None = None,
    ) -> tuple[AuthorizationCode | None, str | None]:
        """Persist a pending, unbound authorization code."""
        client = await self.storage.get_client(client_id)
        if client is None:
            return None, "invalid_client"
        if redirect_uri not in client.redirect_uris:
            return None, "invalid_redirect_uri"

        auth_code = AuthorizationCode(
            code=code,
            client_id=client_id,
            redirect_uri=redirect_uri,
            code_challenge=code_challenge or None,
            code_challenge_method=code_challenge_method or None,
            expires_at=self.store.now() + CODE_TTL,
        )
        await self.storage.save_code(auth_code)
        return auth_code, None

    async def bind_code(
        self, code: str, user_id: str, user_data: BoundUserData | None = None
    ) -> tuple[AuthorizationCode | None, str | None]:
        """Attach a verified identity to a pending code. ``expires_at`` is kept."""
        auth_code = await self.storage.get_code(code)
        if auth_code is None:
            return None, "invalid_or_expired_code"

        auth_code.user_id = user_id
        if user_data is not None:
            auth_code.user_data = user_data
        await self.storage.save_code(auth_code)
        return auth_code, None

    async def peek_code(self, code: str) -> AuthorizationCode | None:
        """Read-only probe used while the client polls for identity binding."""
        return await self.storage.get_code(code)

    async def exchange(
        self,
        code: str,
        client_id: str,
        redirect_uri: str,
        client_secret: str | None = None,
        code_verifier: str | None = None,
    ) -> tuple[dict | None, str | None]:
        """Exchange a bound authorization code for an access token.

        Returns (token_dict, error).
        """
        client = await self.storage.get_client(client_id)
        if client is None:
            return None, "invalid_client"

        auth_code = await self.storage.get_code(code)
        if (
            auth_code is None
            or auth_code.client_id != client_id
            or auth_code.redirect_uri != redirect_uri
        ):
            return None, "invalid_code"

        if not auth_code.is_bound:
            return None, "user_not_bound"

        now = self.store.now()
        if now > auth_code.expires_at:
            return None, "code_expired"

        # PKCE when a challenge was stored, else the confidential-client secret
        if auth_code.code_challenge:
            if not code_verifier:
                return None, "missing_code_verifier"
            if not verify_pkce(
                code_verifier, auth_code.code_challenge, auth_code.code_challenge_method
            ):
                return None, "invalid_code_verifier"
        elif client.client_secret and client_secret != client.client_secret:
            return None, "invalid_client"

        await self.storage.delete_code(code)

        session_id = None
        if auth_code.user_data is not None and auth_code.user_data.has_profile:
            session_id = await self._open_session(auth_code.user_id, auth_code.user_data)

        token = OAuthAccessToken(
            token=generate_access_token(),
            expires_at=now + ACCESS_TOKEN_TTL,
            client_id=client_id,
            user_id=auth_code.user_id,
            session_id=session_id,
            user_data=auth_code.user_data,
        )
        await self.storage.save_token(token)
        logger.info("Issued access token to client %s for user %s", client_id, auth_code.user_id)

        return {
            "access_token": token.token,
            "token_type": "Bearer",
            "expires_in": int(ACCESS_TOKEN_TTL.total_seconds()),
        }, None

    async def _open_session(self, user_id: str, user_data: BoundUserData) -> str:
        await self.identities.upsert(
            user_id,
            email=user_data.email,
            identity_provider_id=user_data.identity_provider_id,
            wallet_address=user_data.wallet_address,
        )
        return await self.sessions.create(user_id, "")

    async def verify_access_token(self, access_token: str) -> OAuthAccessToken | None:
        """Verify an access token and return the token record if valid."""
        token = await self.storage.get_token(access_token)
        if token is None:
            return None
        if self.store.now() > token.expires_at:
            return None
        return token
