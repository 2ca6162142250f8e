# Mock platform API schemas.
# Created: 2026-10-12

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from luxbridge.api.v1.schemas.platforms import CamelModel


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _looks_like_email(cls, value: str) -> str:
        local, _, domain = value.strip().partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return value.strip().lower()


class PlatformTokenResponse(CamelModel):
    access_token: str
    user_id: str
    expires_in: int
    platform: str
    name: str | None = None
    message: str | None = None


class PlatformMeResponse(CamelModel):
    user_id: str
    name: str
    email: str
    platform: str
