# Supported downstream platforms.
# Created: 2026-10-12

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from luxbridge.errors import InvalidPlatformError


class Platform(StrEnum):
    SPLINT_INVEST = "splint_invest"
    MASTERWORKS = "masterworks"
    REALT = "realt"


@dataclass(frozen=True)
class PlatformInfo:
    platform: Platform
    name: str
    description: str
    category: str


SUPPORTED_PLATFORMS: dict[Platform, PlatformInfo] = {
    Platform.SPLINT_INVEST: PlatformInfo(
        Platform.SPLINT_INVEST,
        "Splint Invest",
        "Fractional investment in luxury assets including wine, art, and collectibles",
        "Alternative Assets",
    ),
    Platform.MASTERWORKS: PlatformInfo(
        Platform.MASTERWORKS,
        "Masterworks",
        "Invest in blue-chip contemporary art from artists like Banksy, Basquiat, and Warhol",
        "Art & Collectibles",
    ),
    Platform.REALT: PlatformInfo(
        Platform.REALT,
        "RealT",
        "Fractional real estate investment in income-producing properties",
        "Real Estate",
    ),
}


def parse_platform(value: str) -> Platform:
    """Map a URL platform segment (``splint-invest`` or ``splint_invest``) to a Platform."""
    try:
        return Platform(value.strip().lower().replace("-", "_"))
    except ValueError:
        supported = ", ".join(p.value for p in Platform)
        raise InvalidPlatformError(
            f"Unsupported platform: {value}. Supported platforms: {supported}"
        ) from None


def empty_platform_map() -> dict[Platform, None]:
    return {p: None for p in Platform}
