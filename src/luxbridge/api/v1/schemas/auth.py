# Auth state schemas.
# Created: 2026-10-12

from __future__ import annotations

from datetime import datetime

from luxbridge.api.v1.schemas.platforms import CamelModel, PlatformLinkSummary
from luxbridge.api.v1.schemas.sessions import SessionSummary


class UserSummary(CamelModel):
    user_id: str
    email: str
    name: str
    wallet_address: str | None = None
    created_at: datetime
    last_active_at: datetime


class AuthStateResponse(CamelModel):
    user_id: str
    client_id: str
    user: UserSummary | None = None
    session: SessionSummary | None = None
    platforms: dict[str, PlatformLinkSummary | None]


class ActivityResponse(CamelModel):
    success: bool
