# Settings — environment-driven configuration.
# Created: 2026-10-12
#
# All values come from LUXBRIDGE_* environment variables (or a local .env).

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the LuxBridge auth server."""

    model_config = SettingsConfigDict(
        env_prefix="LUXBRIDGE_",
        env_file=".env",
        extra="ignore",
    )

    # Credential store: "redis://..." or "memory://" for a single-process dev store
    store_url: str = Field(default="redis://localhost:6379/0")

    # Bearer tokens issued by the mock platform APIs
    platform_jwt_secret: str = Field(default="dev-platform-secret-change-me")
    platform_token_ttl_seconds: int = Field(default=86400, gt=0)

    # Downstream platform APIs
    platform_api_base_url: str = Field(default="http://localhost:8000")
    platform_request_timeout: float = Field(default=15.0, gt=0)

    # External identity verification
    identity_verifier: Literal["http", "mock"] = "http"
    # Required when identity_verifier is "http"
    identity_verify_url: str = ""
    identity_app_id: str = ""
    identity_app_secret: str = ""

    # Public issuer URL for the discovery document; derived from the request when unset
    issuer_url: str | None = None
    # External consent page for the discovery document; {issuer}/oauth/authorize when unset
    authorization_url: str | None = None

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    get_settings.cache_clear()
