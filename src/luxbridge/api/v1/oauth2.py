# OAuth2 router — client registration, code lifecycle, token exchange.
# Created: 2026-10-12
#
# The consent page (outside this service) drives store-code -> complete ->
# verify-code, then the MCP client redeems the code at /oauth/token.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from luxbridge.api.deps import get_services
from luxbridge.api.v1.schemas.common import SuccessResponse
from luxbridge.api.v1.schemas.oauth2 import (
    AuthCodeSummary,
    ClientRegistrationRequest,
    ClientRegistrationResponse,
    CompleteAuthorizationRequest,
    CompleteAuthorizationResponse,
    StoreCodeRequest,
    TokenResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from luxbridge.errors import OAuthError
from luxbridge.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oauth", tags=["OAuth2"])


@router.post("/register", response_model=ClientRegistrationResponse)
async def register_client(
    body: ClientRegistrationRequest, services: Services = Depends(get_services)
):
    """Register an OAuth client. The secret is only ever returned here."""
    client, error = await services.oauth.register_client(
        body.client_name,
        body.redirect_uris,
        token_endpoint_auth_method=body.token_endpoint_auth_method,
    )
    if error:
        raise OAuthError(error)
    return ClientRegistrationResponse(
        client_id=client.client_id,
        client_secret=client.client_secret or None,
        redirect_uris=client.redirect_uris,
        client_name=client.name,
    )


@router.post("/authorize/store-code", response_model=SuccessResponse)
async def store_code(body: StoreCodeRequest, services: Services = Depends(get_services)):
    """Open a pending authorization code for a client/redirect pair."""
    if not body.code or not body.client_id or not body.redirect_uri:
        raise OAuthError("invalid_request", "code, client_id and redirect_uri are required")

    _, error = await services.oauth.open_code(
        body.code,
        body.client_id,
        body.redirect_uri,
        code_challenge=body.code_challenge,
        code_challenge_method=body.code_challenge_method,
    )
    if error:
        # Unknown clients are a bad request here, not a failed client authentication
        raise OAuthError(error, status_code=400)
    return SuccessResponse()


@router.post("/authorize/complete", response_model=CompleteAuthorizationResponse)
async def complete_authorization(
    body: CompleteAuthorizationRequest, services: Services = Depends(get_services)
):
    """Bind the user proven by ``identity_token`` to a pending code."""
    if not body.auth_code or not body.identity_token:
        raise OAuthError("invalid_request", "auth_code and identity_token are required")

    claims = await services.verifier.verify(body.identity_token)
    if claims is None:
        raise OAuthError("invalid_identity_token", status_code=401)

    _, error = await services.oauth.bind_code(
        body.auth_code, claims.subject_id, claims.to_user_data()
    )
    if error:
        raise OAuthError(error)

    logger.info("Bound authorization code to user %s", claims.subject_id)
    return CompleteAuthorizationResponse(
        message="OAuth flow completed successfully", auth_code=body.auth_code
    )


@router.post("/authorize/verify-code")
async def verify_code(body: VerifyCodeRequest, services: Services = Depends(get_services)):
    """Polling probe: does the code exist, and has a user been bound to it yet."""
    if not body.auth_code:
        raise OAuthError("invalid_request", "auth_code is required")

    auth_code = await services.oauth.peek_code(body.auth_code)
    if auth_code is None:
        raise OAuthError("invalid_or_expired_code", status_code=404)

    response = VerifyCodeResponse(
        has_user_id=auth_code.is_bound,
        auth_code=AuthCodeSummary(
            code=auth_code.code,
            client_id=auth_code.client_id,
            expires_at=auth_code.expires_at,
            has_user=auth_code.is_bound,
        ),
    )
    return response.model_dump(mode="json", by_alias=True)


@router.post("/token", response_model=TokenResponse)
async def token_exchange(request: Request, services: Services = Depends(get_services)):
    """Exchange an authorization code for an access token (form-encoded)."""
    try:
        form = await request.form()
    except Exception as exc:
        raise OAuthError("invalid_request", "Invalid request format") from exc

    def field(name: str) -> str | None:
        value = form.get(name)
        return value if isinstance(value, str) and value else None

    grant_type = field("grant_type")
    code = field("code")
    redirect_uri = field("redirect_uri")
    client_id = field("client_id")

    if grant_type is not None and grant_type != "authorization_code":
        raise OAuthError("unsupported_grant_type")
    if not grant_type or not code or not redirect_uri or not client_id:
        raise OAuthError(
            "invalid_request", "grant_type, code, redirect_uri and client_id are required"
        )

    result, error = await services.oauth.exchange(
        code,
        client_id,
        redirect_uri,
        client_secret=field("client_secret"),
        code_verifier=field("code_verifier"),
    )

    if error:
        logger.info("Token exchange rejected for client %s: %s", client_id, error)
        raise OAuthError(error)
    return result
