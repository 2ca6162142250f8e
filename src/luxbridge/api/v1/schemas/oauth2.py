# OAuth2 schemas.
# Created: 2026-10-12

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from luxbridge.api.v1.schemas.common import SuccessResponse


class ClientRegistrationRequest(BaseModel):
    """Dynamic client registration (RFC 7591 subset).

    Fields are loosely typed so bad input is reported with OAuth error codes
    rather than a generic validation error.
    """

    client_name: Any = None
    redirect_uris: Any = None
    token_endpoint_auth_method: str = "client_secret_post"


class ClientRegistrationResponse(BaseModel):
    client_id: str
    client_secret: str | None
    redirect_uris: list[str]
    client_name: str


class StoreCodeRequest(BaseModel):
    code: str | None = None
    client_id: str | None = None
    redirect_uri: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    state: str | None = None
    scope: str | None = None


class CompleteAuthorizationRequest(BaseModel):
    auth_code: str | None = None
    identity_token: str | None = None


class CompleteAuthorizationResponse(SuccessResponse):
    message: str
    auth_code: str


class VerifyCodeRequest(BaseModel):
    auth_code: str | None = None


class AuthCodeSummary(BaseModel):
    code: str
    client_id: str = Field(serialization_alias="clientId")
    expires_at: datetime = Field(serialization_alias="expiresAt")
    has_user: bool = Field(serialization_alias="hasUser")


class VerifyCodeResponse(SuccessResponse):
    has_user_id: bool = Field(serialization_alias="hasUserId")
    auth_code: AuthCodeSummary = Field(serialization_alias="authCode")


class TokenResponse(BaseModel):
    """OAuth2 token response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
