# Sessions router — bootstrap, extend, logout.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from luxbridge.api.deps import get_services, require_access_token
from luxbridge.api.oauth2.models import OAuthAccessToken
from luxbridge.api.v1.schemas.common import SuccessResponse
from luxbridge.api.v1.schemas.sessions import CreateSessionRequest, SessionSummary
from luxbridge.errors import InvalidRequestError, OAuthError, SessionNotFoundError
from luxbridge.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


async def _owned_session(services: Services, session_id: str, token: OAuthAccessToken):
    session = await services.sessions.get(session_id)
    if session is None or session.identity_id != token.user_id:
        raise SessionNotFoundError(f"Session {session_id} not found")
    return session


@router.post("", response_model=SessionSummary)
async def create_session(body: CreateSessionRequest, services: Services = Depends(get_services)):
    """Open a session directly from an identity token (no OAuth client involved)."""
    if not body.identity_token:
        raise InvalidRequestError("identityToken is required")

    claims = await services.verifier.verify(body.identity_token)
    if claims is None:
        raise OAuthError("invalid_identity_token", status_code=401)

    await services.identities.upsert(
        claims.subject_id,
        email=claims.email,
        identity_provider_id=claims.subject_id,
        wallet_address=claims.wallet_address,
    )
    session_id = await services.sessions.create(claims.subject_id, body.identity_token)
    session = await services.sessions.get(session_id)
    return SessionSummary.model_validate(session)


@router.post("/{session_id}/extend", response_model=SessionSummary)
async def extend_session(
    session_id: str,
    token: OAuthAccessToken = Depends(require_access_token),
    services: Services = Depends(get_services),
):
    await _owned_session(services, session_id, token)
    session = await services.sessions.extend(session_id)
    if session is None:
        raise SessionNotFoundError(f"Session {session_id} not found")
    return SessionSummary.model_validate(session)


@router.delete("/{session_id}", response_model=SuccessResponse)
async def delete_session(
    session_id: str,
    token: OAuthAccessToken = Depends(require_access_token),
    services: Services = Depends(get_services),
):
    """Log out: drop the session and its index entry."""
    await _owned_session(services, session_id, token)
    await services.sessions.delete(session_id)
    return SuccessResponse()
