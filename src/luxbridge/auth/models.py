# Identity, session and platform link records.
# Created: 2026-10-12

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field, model_validator

from luxbridge.platforms import Platform
from luxbridge.store.records import StoredRecord


class LinkStatus(StrEnum):
    ACTIVE = "active"
    EXPIRED = "expired"
    INVALID = "invalid"


class PlatformLink(StoredRecord):
    """Validated credentials for one identity on one platform."""

    KIND = "platform_link"

    platform: Platform
    identity_id: str
    platform_user_id: str
    email: str
    name: str = ""
    access_token: str
    token_expiry: datetime | None = None
    linked_at: datetime
    last_used_at: datetime
    status: LinkStatus = LinkStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is LinkStatus.ACTIVE

    def token_expired(self, now: datetime) -> bool:
        return self.token_expiry is not None and now > self.token_expiry


class AuthSession(StoredRecord):
    """One login ceremony: an identity plus its per-platform link slots.

    ``platforms`` always carries every supported platform, ``None`` meaning
    not linked in this session.
    """

    KIND = "auth_session"

    session_id: str
    identity_id: str
    external_identity_token: str = ""
    platforms: dict[Platform, PlatformLink | None] = Field(default_factory=dict)
    created_at: datetime
    expires_at: datetime

    @model_validator(mode="after")
    def _fill_platform_slots(self) -> AuthSession:
        for platform in Platform:
            self.platforms.setdefault(platform, None)
        return self

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class SessionIndex(StoredRecord):
    """Session ids opened for one identity, oldest first."""

    KIND = "session_index"

    identity_id: str
    session_ids: list[str] = Field(default_factory=list)


class LuxBridgeUser(StoredRecord):
    """Central identity record. Never deleted."""

    KIND = "luxbridge_user"

    user_id: str
    email: str
    name: str
    identity_provider_id: str
    wallet_address: str | None = None
    created_at: datetime
    last_active_at: datetime
