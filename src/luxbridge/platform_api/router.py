# Mock platform API — register, login and identity check per platform.
# Created: 2026-10-12
#
# Stands in for the downstream platforms during development. Mounted at
# /api/{platform}/auth/...; tokens are platform JWTs and only valid for the
# platform they were issued for.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from luxbridge.api.deps import bearer_token, get_services
from luxbridge.errors import InvalidRequestError, LuxBridgeError, UnauthorizedError
from luxbridge.platform_api.schemas import (
    LoginRequest,
    PlatformMeResponse,
    PlatformTokenResponse,
    RegisterRequest,
)
from luxbridge.platforms import Platform, parse_platform
from luxbridge.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/{platform}/auth", tags=["Mock Platform API"])


class PlatformMismatchError(LuxBridgeError):
    code = "platform_mismatch"
    status_code = 403


class RegistrationFailedError(LuxBridgeError):
    code = "registration_failed"
    status_code = 409


class InvalidCredentialsError(LuxBridgeError):
    code = "invalid_credentials"
    status_code = 401


class UserNotFoundError(LuxBridgeError):
    code = "user_not_found"
    status_code = 404


def _token_response(
    services: Services, user_id: str, platform: Platform, **extra
) -> PlatformTokenResponse:
    token, _ = services.platform_tokens.issue(user_id, platform)
    return PlatformTokenResponse(
        access_token=token,
        user_id=user_id,
        expires_in=int(services.platform_tokens.ttl.total_seconds()),
        platform=platform.value,
        **extra,
    )


@router.post("/register", response_model=PlatformTokenResponse, response_model_exclude_none=True)
async def register(
    platform: str, body: RegisterRequest, services: Services = Depends(get_services)
):
    target = parse_platform(platform)
    user, error = await services.platform_users.register(body.email, body.password, body.name)
    if error:
        raise RegistrationFailedError(error)
    return _token_response(
        services, user.user_id, target, name=user.name, message="Registration successful"
    )


@router.post("/login", response_model=PlatformTokenResponse, response_model_exclude_none=True)
async def login(platform: str, body: LoginRequest, services: Services = Depends(get_services)):
    target = parse_platform(platform)
    if not body.email or not body.password:
        raise InvalidRequestError("Email and password are required", code="missing_credentials")

    user = await services.platform_users.authenticate(body.email, body.password)
    if user is None:
        raise InvalidCredentialsError("Invalid email or password")
    return _token_response(services, user.user_id, target, name=user.name)


@router.get("/me", response_model=PlatformMeResponse)
async def me(platform: str, request: Request, services: Services = Depends(get_services)):
    target = parse_platform(platform)

    token = bearer_token(request)
    claims = services.platform_tokens.verify(token) if token else None
    if claims is None:
        raise UnauthorizedError("Invalid or missing token")
    if claims.platform != target:
        raise PlatformMismatchError("Token platform does not match requested platform")

    user = await services.platform_users.get_by_id(claims.user_id)
    if user is None:
        raise UserNotFoundError("User not found")
    return PlatformMeResponse(
        user_id=user.user_id, name=user.name, email=user.email, platform=target.value
    )
