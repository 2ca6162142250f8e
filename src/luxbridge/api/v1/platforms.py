# Platforms router — info, link, list, disconnect, validate, proxied calls.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from luxbridge.api.deps import get_services, require_access_token
from luxbridge.api.oauth2.models import OAuthAccessToken
from luxbridge.api.v1.schemas.platforms import (
    ConnectedPlatformsResponse,
    DisconnectResponse,
    LinkCompleteRequest,
    LinkCompleteResponse,
    PlatformInfoResponse,
    PlatformLinkSummary,
    ValidateLinksResponse,
    summarize_platforms,
)
from luxbridge.auth.platform_links import (
    AUTHENTICATION_FAILED,
    INVALID_CREDENTIALS,
    UNEXPECTED_RESPONSE,
)
from luxbridge.errors import InvalidRequestError, InvalidSessionError, LuxBridgeError
from luxbridge.platforms import SUPPORTED_PLATFORMS, parse_platform
from luxbridge.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/platforms", tags=["Platforms"])


class PlatformLoginError(LuxBridgeError):
    code = AUTHENTICATION_FAILED
    status_code = 401


@router.get("/{platform}/info", response_model=PlatformInfoResponse)
async def platform_info(platform: str):
    """Display metadata for a supported platform."""
    info = SUPPORTED_PLATFORMS[parse_platform(platform)]
    return PlatformInfoResponse(
        platform=info.platform,
        name=info.name,
        description=info.description,
        category=info.category,
    )


@router.post("/{platform}/link/complete", response_model=LinkCompleteResponse)
async def complete_link(
    platform: str, body: LinkCompleteRequest, services: Services = Depends(get_services)
):
    """Validate platform credentials and link the account to the session's identity."""
    if not body.session_id or not body.email or not body.password:
        raise InvalidRequestError("Missing required fields: sessionId, email, password")

    target = parse_platform(platform)

    session = await services.sessions.get(body.session_id)
    if session is None:
        raise InvalidSessionError("Invalid or expired session")

    check = await services.links.validate_credentials(target, body.email, body.password)
    if not check.ok:
        if check.reason == UNEXPECTED_RESPONSE:
            raise LuxBridgeError("Platform authentication failed - missing user data")
        if check.reason == INVALID_CREDENTIALS:
            raise PlatformLoginError("Invalid platform credentials", code=INVALID_CREDENTIALS)
        raise PlatformLoginError(check.reason)

    link = await services.links.store_link(
        platform=target,
        identity_id=session.identity_id,
        platform_user_id=check.platform_user_id,
        email=check.email,
        name=check.name,
        access_token=check.bearer_token,
        token_expiry=check.expires_at,
    )
    await services.sessions.set_platform_link(session.session_id, target, link)

    return LinkCompleteResponse(
        platform=platform,
        platform_name=check.name or body.email,
        linked_at=link.linked_at,
        message=f"Successfully connected {SUPPORTED_PLATFORMS[target].name} account",
    )


@router.get("", response_model=ConnectedPlatformsResponse)
async def connected_platforms(
    token: OAuthAccessToken = Depends(require_access_token),
    services: Services = Depends(get_services),
):
    """Platform slots of the token's session (or the user's latest live session)."""
    platforms = await services.sessions.connected_platforms(token.user_id, token.session_id)
    return ConnectedPlatformsResponse(
        session_id=token.session_id, platforms=summarize_platforms(platforms)
    )


@router.delete("/{platform}/link", response_model=DisconnectResponse)
async def disconnect(
    platform: str,
    token: OAuthAccessToken = Depends(require_access_token),
    services: Services = Depends(get_services),
):
    target = parse_platform(platform)

    outcome = await services.links.delete(token.user_id, target)
    if not outcome.ok:
        logger.warning("Failed to delete %s link for %s: %s", target, token.user_id, outcome.error)

    if token.session_id:
        await services.sessions.remove_platform_link(token.session_id, target)
    return DisconnectResponse(platform=target)


@router.post("/validate", response_model=ValidateLinksResponse)
async def validate_links(
    token: OAuthAccessToken = Depends(require_access_token),
    services: Services = Depends(get_services),
):
    """Re-check every stored link for the user against its platform."""
    links = await services.links.validate_all(token.user_id)
    return ValidateLinksResponse(links=[PlatformLinkSummary.from_link(link) for link in links])


@router.get("/{platform}/call/{endpoint:path}")
async def call_platform(
    platform: str,
    endpoint: str,
    request: Request,
    token: OAuthAccessToken = Depends(require_access_token),
    services: Services = Depends(get_services),
):
    """Proxy a GET to the platform API as the session's linked user."""
    target = parse_platform(platform)
    if not token.session_id:
        raise InvalidSessionError("Access token is not bound to a session")

    body = await services.proxy.call(
        token.session_id, target, endpoint, params=dict(request.query_params)
    )

    outcome = await services.links.touch(token.user_id, target)
    if not outcome.ok:
        logger.warning("Failed to touch %s link for %s: %s", target, token.user_id, outcome.error)
    return body
