# Session manager — identity sessions and their platform link slots.
# Created: 2026-10-12
#
# Sessions live under session:{id} with a 24h store TTL; user_sessions:{identity}
# indexes them per identity and is pruned lazily on read. Updates are plain
# read-modify-write against the store, so concurrent writers to the same
# session resolve as last-writer-wins.

from __future__ import annotations

import logging
import math
import secrets
from datetime import timedelta

from luxbridge.auth.models import AuthSession, PlatformLink, SessionIndex
from luxbridge.errors import SessionNotFoundError
from luxbridge.platforms import Platform, empty_platform_map
from luxbridge.store import CredentialStore, read_record
from luxbridge.store.keys import SESSION_PATTERN, session_key, user_sessions_key

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(hours=24)
SESSION_ID_PREFIX = "lux_session_"

_SESSION_TTL_SECONDS = int(SESSION_TTL.total_seconds())


class SessionManager:
    """CRUD over AuthSession records and the per-identity session index."""

    def __init__(self, store: CredentialStore):
        self.store = store

    def _new_session_id(self) -> str:
        millis = int(self.store.now().timestamp() * 1000)
        return f"{SESSION_ID_PREFIX}{millis}_{secrets.token_hex(6)}"

    async def _write(self, session: AuthSession, ttl: int) -> None:
        await self.store.set(session_key(session.session_id), session.encode(), ttl=ttl)

    async def _read_index(self, identity_id: str) -> SessionIndex:
        index = await read_record(self.store, user_sessions_key(identity_id), SessionIndex)
        return index or SessionIndex(identity_id=identity_id)

    async def _write_index(self, index: SessionIndex) -> None:
        key = user_sessions_key(index.identity_id)
        if not index.session_ids:
            await self.store.delete(key)
            return
        await self.store.set(key, index.encode(), ttl=_SESSION_TTL_SECONDS)

    async def create(self, identity_id: str, external_identity_token: str = "") -> str:
        now = self.store.now()
        session = AuthSession(
            session_id=self._new_session_id(),
            identity_id=identity_id,
            external_identity_token=external_identity_token,
            created_at=now,
            expires_at=now + SESSION_TTL,
        )
        await self._write(session, _SESSION_TTL_SECONDS)

        index = await self._read_index(identity_id)
        index.session_ids.append(session.session_id)
        await self._write_index(index)

        logger.info("Created session %s for identity %s", session.session_id, identity_id)
        return session.session_id

    async def get(self, session_id: str) -> AuthSession | None:
        if not session_id:
            return None
        session = await read_record(self.store, session_key(session_id), AuthSession)
        if session is None:
            return None
        if session.is_expired(self.store.now()):
            await self.store.delete(session_key(session_id))
            return None
        return session

    async def extend(self, session_id: str) -> AuthSession | None:
        """Push expiry to now + 24h and refresh the store TTL. No-op when absent."""
        session = await self.get(session_id)
        if session is None:
            return None
        session.expires_at = self.store.now() + SESSION_TTL
        await self._write(session, _SESSION_TTL_SECONDS)
        return session

    async def delete(self, session_id: str) -> bool:
        session = await read_record(self.store, session_key(session_id), AuthSession)
        removed = await self.store.delete(session_key(session_id)) > 0
        if session is not None:
            index = await self._read_index(session.identity_id)
            if session_id in index.session_ids:
                index.session_ids.remove(session_id)
                await self._write_index(index)
        return removed

    async def _rewrite_preserving_ttl(self, session: AuthSession) -> bool:
        remaining = await self.store.ttl(session_key(session.session_id))
        if remaining <= 0:
            # No store expiry to preserve (or the key vanished); fall back to expires_at
            remaining = math.floor((session.expires_at - self.store.now()).total_seconds())
        if remaining <= 0:
            return False
        await self._write(session, remaining)
        return True

    async def set_platform_link(
        self, session_id: str, platform: Platform, link: PlatformLink | None
    ) -> AuthSession:
        session = await self.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        session.platforms[platform] = link
        if not await self._rewrite_preserving_ttl(session):
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    async def remove_platform_link(self, session_id: str, platform: Platform) -> None:
        session = await self.get(session_id)
        if session is None:
            return
        session.platforms[platform] = None
        await self._rewrite_preserving_ttl(session)

    async def list_live_sessions(self, identity_id: str) -> list[str]:
        index = await self._read_index(identity_id)
        live = [sid for sid in index.session_ids if await self.get(sid) is not None]
        if live != index.session_ids:
            index.session_ids = live
            await self._write_index(index)
        return live

    async def most_recent_live_session(self, identity_id: str) -> AuthSession | None:
        latest: AuthSession | None = None
        for session_id in await self.list_live_sessions(identity_id):
            session = await self.get(session_id)
            if session is not None and (latest is None or session.created_at >= latest.created_at):
                latest = session
        return latest

    async def connected_platforms(
        self, identity_id: str, session_id: str | None = None
    ) -> dict[Platform, PlatformLink | None]:
        if session_id:
            session = await self.get(session_id)
        else:
            session = await self.most_recent_live_session(identity_id)
        if session is None:
            return empty_platform_map()
        return dict(session.platforms)

    async def sweep_expired(self) -> int:
        """Delete every session past its expiry. Returns how many were removed.

        A failure on one key is logged and the sweep carries on.
        """
        removed = 0
        now = self.store.now()
        async for key in self.store.scan(SESSION_PATTERN):
            try:
                session = await read_record(self.store, key, AuthSession)
                if session is None or not session.is_expired(now):
                    continue
                if await self.delete(session.session_id):
                    removed += 1
            except Exception as exc:
                logger.warning("Session sweep failed for %s: %s", key, exc)
        logger.info("Session sweep removed %d expired sessions", removed)
        return removed
