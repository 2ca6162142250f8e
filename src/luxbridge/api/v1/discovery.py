# OAuth authorization server metadata (RFC 8414).
# Created: 2026-10-12

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from luxbridge.api.deps import get_services
from luxbridge.services import Services

router = APIRouter(tags=["Discovery"])


@router.get("/.well-known/oauth-authorization-server")
async def authorization_server_metadata(
    request: Request, services: Services = Depends(get_services)
):
    issuer = (services.settings.issuer_url or str(request.base_url)).rstrip("/")
    # Consent is served by the external front end, not this app
    authorization_endpoint = services.settings.authorization_url or f"{issuer}/oauth/authorize"
    return {
        "issuer": issuer,
        "authorization_endpoint": authorization_endpoint,
        "token_endpoint": f"{issuer}/api/v1/oauth/token",
        "registration_endpoint": f"{issuer}/api/v1/oauth/register",
        "response_types_supported": ["code"],
        "grant_types_supported": ["authorization_code"],
        "token_endpoint_auth_methods_supported": ["none", "client_secret_post"],
        "code_challenge_methods_supported": ["plain", "S256"],
    }
