# Platform user directory for the mock platform APIs.
# Created: 2026-10-12

from __future__ import annotations

import logging
import secrets
from datetime import datetime

from passlib.context import CryptContext

from luxbridge.store import CredentialStore, read_record
from luxbridge.store.keys import platform_user_id_key, platform_user_key
from luxbridge.store.records import StoredRecord

logger = logging.getLogger(__name__)


class PlatformUser(StoredRecord):
    KIND = "platform_user"

    user_id: str
    email: str
    password_hash: str
    name: str
    created_at: datetime


class PlatformUserDirectory:
    """Users shared by every mock platform, keyed by lower-cased email."""

    def __init__(self, store: CredentialStore):
        self.store = store
        self._ctx = CryptContext(schemes=["argon2"], deprecated="auto")

    def _verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._ctx.verify(password, password_hash)
        except (ValueError, TypeError):
            return False

    async def get_by_email(self, email: str) -> PlatformUser | None:
        if not email:
            return None
        return await read_record(self.store, platform_user_key(email), PlatformUser)

    async def get_by_id(self, user_id: str) -> PlatformUser | None:
        email = await self.store.get(platform_user_id_key(user_id))
        if email is None:
            return None
        return await self.get_by_email(email)

    async def register(
        self, email: str, password: str, name: str
    ) -> tuple[PlatformUser | None, str | None]:
        """Create a user. Returns (user, error)."""
        if await self.get_by_email(email) is not None:
            return None, "User already exists"

        user = PlatformUser(
            user_id=f"user_{secrets.token_hex(8)}",
            email=email.strip().lower(),
            password_hash=self._ctx.hash(password),
            name=name.strip(),
            created_at=self.store.now(),
        )
        await self.store.set(platform_user_key(user.email), user.encode())
        await self.store.set(platform_user_id_key(user.user_id), user.email)
        logger.info("Registered platform user %s", user.user_id)
        return user, None

    async def authenticate(self, email: str, password: str) -> PlatformUser | None:
        user = await self.get_by_email(email)
        if user is None or not self._verify(password, user.password_hash):
            return None
        return user
