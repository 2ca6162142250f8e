# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-12

from __future__ import annotations

from fastapi import Request

from luxbridge.api.oauth2.models import OAuthAccessToken
from luxbridge.errors import UnauthorizedError
from luxbridge.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_access_token(request: Request) -> OAuthAccessToken:
    """Resolve ``Authorization: Bearer <oauth token>`` to a live access token.

    Usage::

        @router.get("/auth/state")
        async def state(token: OAuthAccessToken = Depends(require_access_token)): ...
    """
    token = bearer_token(request)
    if token is None:
        raise UnauthorizedError("Missing bearer token")

    record = await get_services(request).oauth.verify_access_token(token)
    if record is None:
        raise UnauthorizedError("Invalid or expired access token")
    request.state.access_token = record
    return record
