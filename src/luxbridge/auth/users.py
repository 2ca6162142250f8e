# Identity record store.
# Created: 2026-10-12

from __future__ import annotations

import logging

from luxbridge.auth.models import LuxBridgeUser
from luxbridge.errors import OK, Outcome, failed
from luxbridge.store import CredentialStore, read_record
from luxbridge.store.keys import identity_key

logger = logging.getLogger(__name__)


def display_name_for(email: str | None) -> str:
    if email and "@" in email:
        return email.split("@", 1)[0] or "User"
    return "User"


class IdentityStore:
    """LuxBridgeUser records keyed by identity id."""

    def __init__(self, store: CredentialStore):
        self.store = store

    async def get(self, user_id: str) -> LuxBridgeUser | None:
        if not user_id:
            return None
        return await read_record(self.store, identity_key(user_id), LuxBridgeUser)

    async def upsert(
        self,
        user_id: str,
        *,
        email: str | None = None,
        identity_provider_id: str | None = None,
        wallet_address: str | None = None,
    ) -> LuxBridgeUser:
        """Create the identity on first login, otherwise refresh its profile."""
        now = self.store.now()
        user = await self.get(user_id)
        if user is None:
            user = LuxBridgeUser(
                user_id=user_id,
                email=email or "",
                name=display_name_for(email),
                identity_provider_id=identity_provider_id or user_id,
                wallet_address=wallet_address,
                created_at=now,
                last_active_at=now,
            )
            logger.info("Created identity %s", user_id)
        else:
            if email:
                user.email = email
                user.name = display_name_for(email)
            if identity_provider_id:
                user.identity_provider_id = identity_provider_id
            if wallet_address:
                user.wallet_address = wallet_address
            user.last_active_at = now
        await self.store.set(identity_key(user_id), user.encode())
        return user

    async def touch_activity(self, user_id: str) -> Outcome:
        """Stamp ``last_active_at``. Best effort; the caller logs failures."""
        try:
            user = await self.get(user_id)
            if user is None:
                return Outcome(False, f"identity {user_id} not found")
            user.last_active_at = self.store.now()
            await self.store.set(identity_key(user_id), user.encode())
        except Exception as exc:
            return failed(exc)
        return OK
