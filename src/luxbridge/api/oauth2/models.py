# OAuth2 data models.
# Created: 2026-10-12

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from luxbridge.store.records import StoredRecord


class OAuthClient(StoredRecord):
    """Registered OAuth2 client. Immutable after registration."""

    KIND = "oauth_client"

    id: str
    client_id: str
    client_secret: str
    name: str
    redirect_uris: list[str]
    created_at: datetime


class BoundUserData(BaseModel):
    """Profile details captured from identity verification, carried to token exchange."""

    email: str | None = None
    identity_provider_id: str | None = None
    wallet_address: str | None = None

    @property
    def has_profile(self) -> bool:
        return bool(self.email or self.identity_provider_id or self.wallet_address)


class AuthorizationCode(StoredRecord):
    """Short-lived, single-use authorization code.

    ``user_id`` is empty until identity verification binds a subject.
    """

    KIND = "authorization_code"

    code: str
    client_id: str
    redirect_uri: str
    code_challenge: str | None = None
    code_challenge_method: str | None = None  # "S256" | "plain"
    user_id: str = ""
    user_data: BoundUserData | None = None
    expires_at: datetime

    @property
    def is_bound(self) -> bool:
        return bool(self.user_id.strip())


class OAuthAccessToken(StoredRecord):
    """Bearer credential handed to an MCP client."""

    KIND = "oauth_access_token"

    token: str
    expires_at: datetime
    client_id: str
    user_id: str
    session_id: str | None = None
    user_data: BoundUserData | None = None
