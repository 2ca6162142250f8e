# Session schemas.
# Created: 2026-10-12

from __future__ import annotations

from datetime import datetime

from luxbridge.api.v1.schemas.platforms import CamelModel


class CreateSessionRequest(CamelModel):
    identity_token: str | None = None


class SessionSummary(CamelModel):
    session_id: str
    identity_id: str
    created_at: datetime
    expires_at: datetime
