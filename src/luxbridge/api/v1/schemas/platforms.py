# Platform linking schemas.
# Created: 2026-10-12

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from luxbridge.auth.models import LinkStatus, PlatformLink
from luxbridge.platforms import Platform


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class LinkCompleteRequest(CamelModel):
    session_id: str | None = None
    email: str | None = None
    password: str | None = None


class LinkCompleteResponse(CamelModel):
    success: bool = True
    platform: str
    platform_name: str
    linked_at: datetime
    message: str


class PlatformLinkSummary(CamelModel):
    """A platform link as shown to clients; the bearer token is never included."""

    platform: Platform
    platform_user_id: str
    email: str
    name: str
    status: LinkStatus
    linked_at: datetime
    last_used_at: datetime
    token_expiry: datetime | None = None

    @classmethod
    def from_link(cls, link: PlatformLink) -> PlatformLinkSummary:
        return cls(
            platform=link.platform,
            platform_user_id=link.platform_user_id,
            email=link.email,
            name=link.name,
            status=link.status,
            linked_at=link.linked_at,
            last_used_at=link.last_used_at,
            token_expiry=link.token_expiry,
        )


def summarize_platforms(
    platforms: dict[Platform, PlatformLink | None],
) -> dict[str, PlatformLinkSummary | None]:
    return {
        platform.value: PlatformLinkSummary.from_link(link) if link else None
        for platform, link in platforms.items()
    }


class ConnectedPlatformsResponse(CamelModel):
    session_id: str | None = None
    platforms: dict[str, PlatformLinkSummary | None] = Field(default_factory=dict)


class DisconnectResponse(CamelModel):
    success: bool = True
    platform: Platform


class ValidateLinksResponse(CamelModel):
    links: list[PlatformLinkSummary]


class PlatformInfoResponse(CamelModel):
    platform: Platform
    name: str
    description: str
    category: str
