# Auth router — current user state and activity pings.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from luxbridge.api.deps import get_services, require_access_token
from luxbridge.api.oauth2.models import OAuthAccessToken
from luxbridge.api.v1.schemas.auth import ActivityResponse, AuthStateResponse, UserSummary
from luxbridge.api.v1.schemas.platforms import summarize_platforms
from luxbridge.api.v1.schemas.sessions import SessionSummary
from luxbridge.platforms import empty_platform_map
from luxbridge.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/state", response_model=AuthStateResponse)
async def auth_state(
    token: OAuthAccessToken = Depends(require_access_token),
    services: Services = Depends(get_services),
):
    """Who the bearer is, their session, and which platforms it has linked."""
    user = await services.identities.get(token.user_id)
    if token.session_id:
        session = await services.sessions.get(token.session_id)
    else:
        session = await services.sessions.most_recent_live_session(token.user_id)
    platforms = session.platforms if session else empty_platform_map()

    return AuthStateResponse(
        user_id=token.user_id,
        client_id=token.client_id,
        user=UserSummary.model_validate(user) if user else None,
        session=SessionSummary.model_validate(session) if session else None,
        platforms=summarize_platforms(platforms),
    )


@router.post("/activity", response_model=ActivityResponse)
async def record_activity(
    token: OAuthAccessToken = Depends(require_access_token),
    services: Services = Depends(get_services),
):
    outcome = await services.identities.touch_activity(token.user_id)
    if not outcome.ok:
        logger.warning("Activity update for %s failed: %s", token.user_id, outcome.error)
    return ActivityResponse(success=outcome.ok)
