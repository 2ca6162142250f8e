# Tests for the session manager.
# Created: 2026-10-12

from datetime import timedelta
from unittest.mock import patch

import pytest

from luxbridge.auth.models import AuthSession, LinkStatus, PlatformLink
from luxbridge.auth.sessions import SESSION_ID_PREFIX, SessionManager
from luxbridge.errors import SessionNotFoundError
from luxbridge.platforms import Platform
from luxbridge.store.keys import session_key, user_sessions_key


@pytest.fixture
def sessions(store):
    return SessionManager(store)


def _link(store, platform=Platform.REALT, status=LinkStatus.ACTIVE) -> PlatformLink:
    now = store.now()
    return PlatformLink(
        platform=platform,
        identity_id="U1",
        platform_user_id="pu_1",
        email="ada@example.com",
        access_token="ptok",
        linked_at=now,
        last_used_at=now,
        status=status,
    )


class TestCreateAndGet:
    async def test_create_initializes_every_platform_slot(self, sessions, store):
        session_id = await sessions.create("U1", "identity-token")
        assert session_id.startswith(SESSION_ID_PREFIX)

        session = await sessions.get(session_id)
        assert session.identity_id == "U1"
        assert session.external_identity_token == "identity-token"
        assert session.platforms == {p: None for p in Platform}
        assert session.expires_at == store.now() + timedelta(hours=24)
        assert await store.ttl(session_key(session_id)) == 86400

    async def test_create_indexes_session(self, sessions, store):
        first = await sessions.create("U1")
        second = await sessions.create("U1")
        assert first != second
        assert await sessions.list_live_sessions("U1") == [first, second]
        assert await store.ttl(user_sessions_key("U1")) == 86400

    async def test_get_missing(self, sessions):
        assert await sessions.get("lux_session_0_missing") is None
        assert await sessions.get("") is None

    async def test_expired_session_is_deleted_on_read(self, sessions, store):
        session_id = await sessions.create("U1")
        session = await sessions.get(session_id)
        # Persist without a store TTL so only the read-time check can catch it
        session.expires_at = store.now() - timedelta(seconds=1)
        await store.set(session_key(session_id), session.encode())

        assert await sessions.get(session_id) is None
        assert await store.get(session_key(session_id)) is None


class TestExtendAndDelete:
    async def test_extend_refreshes_ttl(self, sessions, store, clock):
        session_id = await sessions.create("U1")
        clock.advance(timedelta(hours=1))
        extended = await sessions.extend(session_id)
        assert extended.expires_at == store.now() + timedelta(hours=24)

        clock.advance(timedelta(hours=23, minutes=59))
        assert await sessions.get(session_id) is not None

    async def test_without_extend_session_lapses(self, sessions, clock):
        session_id = await sessions.create("U1")
        clock.advance(timedelta(hours=24, seconds=1))
        assert await sessions.get(session_id) is None

    async def test_extend_missing_is_noop(self, sessions):
        assert await sessions.extend("missing") is None

    async def test_delete_removes_record_and_index_entry(self, sessions, store):
        keep = await sessions.create("U1")
        drop = await sessions.create("U1")
        assert await sessions.delete(drop) is True
        assert await sessions.get(drop) is None
        assert await sessions.list_live_sessions("U1") == [keep]

        assert await sessions.delete(keep) is True
        assert await store.get(user_sessions_key("U1")) is None
        assert await sessions.delete(keep) is False


class TestPlatformSlots:
    async def test_set_platform_link_preserves_remaining_ttl(self, sessions, store, clock):
        session_id = await sessions.create("U1")
        clock.advance(timedelta(hours=2))

        await sessions.set_platform_link(session_id, Platform.REALT, _link(store))
        session = await sessions.get(session_id)
        assert session.platforms[Platform.REALT].access_token == "ptok"
        assert await store.ttl(session_key(session_id)) == 22 * 3600

    async def test_set_platform_link_missing_session(self, sessions, store):
        with pytest.raises(SessionNotFoundError):
            await sessions.set_platform_link("missing", Platform.REALT, _link(store))

    async def test_remove_platform_link(self, sessions, store):
        session_id = await sessions.create("U1")
        await sessions.set_platform_link(session_id, Platform.REALT, _link(store))
        await sessions.remove_platform_link(session_id, Platform.REALT)
        assert (await sessions.get(session_id)).platforms[Platform.REALT] is None
        # Missing session is a no-op
        await sessions.remove_platform_link("missing", Platform.REALT)

    async def test_concurrent_slot_updates_are_last_writer_wins(self, sessions, store):
        session_id = await sessions.create("U1")
        stale = await sessions.get(session_id)

        await sessions.set_platform_link(session_id, Platform.REALT, _link(store))
        # A writer holding the older copy overwrites the REALT slot
        stale.platforms[Platform.MASTERWORKS] = _link(store, Platform.MASTERWORKS)
        await store.set(session_key(session_id), stale.encode(), ttl=3600)

        session = await sessions.get(session_id)
        assert session.platforms[Platform.REALT] is None
        assert session.platforms[Platform.MASTERWORKS] is not None


class TestQueries:
    async def test_list_live_sessions_prunes_lapsed(self, sessions, store, clock):
        old = await sessions.create("U1")
        clock.advance(timedelta(hours=12))
        new = await sessions.create("U1")
        clock.advance(timedelta(hours=13))

        assert await sessions.list_live_sessions("U1") == [new]
        raw = await store.get(user_sessions_key("U1"))
        assert old not in raw

    async def test_connected_platforms_for_session(self, sessions, store):
        session_id = await sessions.create("U1")
        await sessions.set_platform_link(session_id, Platform.REALT, _link(store))
        platforms = await sessions.connected_platforms("U1", session_id)
        assert platforms[Platform.REALT] is not None
        assert platforms[Platform.MASTERWORKS] is None

    async def test_connected_platforms_defaults_to_latest_session(self, sessions, store, clock):
        await sessions.create("U1")
        clock.advance(5)
        latest = await sessions.create("U1")
        await sessions.set_platform_link(latest, Platform.SPLINT_INVEST, _link(store))

        platforms = await sessions.connected_platforms("U1")
        assert platforms[Platform.SPLINT_INVEST] is not None
        assert (await sessions.most_recent_live_session("U1")).session_id == latest

    async def test_connected_platforms_all_null_without_session(self, sessions):
        assert await sessions.connected_platforms("nobody") == {p: None for p in Platform}
        assert await sessions.connected_platforms("U1", "missing") == {p: None for p in Platform}
        assert await sessions.most_recent_live_session("nobody") is None


class TestSweep:
    async def test_sweep_removes_only_expired(self, sessions, store):
        live = await sessions.create("U1")
        expired = await sessions.create("U2")
        session = await sessions.get(expired)
        session.expires_at = store.now() - timedelta(minutes=1)
        await store.set(session_key(expired), session.encode())

        assert await sessions.sweep_expired() == 1
        assert await store.get(session_key(expired)) is None
        assert await sessions.get(live) is not None

    async def test_sweep_tolerates_failures(self, sessions, store):
        for identity in ("U1", "U2"):
            session_id = await sessions.create(identity)
            session = await sessions.get(session_id)
            session.expires_at = store.now() - timedelta(minutes=1)
            await store.set(session_key(session_id), session.encode())
        await store.set("session:garbage", "{not json")

        original_delete = sessions.delete
        calls = []

        async def flaky_delete(session_id):
            calls.append(session_id)
            if len(calls) == 1:
                raise ConnectionError("store hiccup")
            return await original_delete(session_id)

        with patch.object(sessions, "delete", side_effect=flaky_delete):
            removed = await sessions.sweep_expired()

        assert len(calls) == 2
        assert removed == 1
        assert await store.get("session:garbage") is not None

    async def test_session_record_round_trip(self, sessions):
        session_id = await sessions.create("U1")
        session = await sessions.get(session_id)
        assert AuthSession.decode(session.encode()) == session
