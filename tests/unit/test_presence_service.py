"""Unit tests for PresenceService."""

from unittest.mock import MagicMock, patch

from app.dependencies import Realtime
from app.models.user import User
from app.repositories.user_repo import UserRepository


async def _load_user(session_factory, user_id: str) -> User:
    async with session_factory() as session:
        return await session.get(User, user_id)


class TestPresenceService:
    """Connect and disconnect bookkeeping."""

    async def test_connect_marks_online_and_broadcasts(
        self, realtime: Realtime, seed_user, session_factory, fake_sio, emitted
    ) -> None:
        await seed_user("u1")

        await realtime.presence.connect_user("u1", "sid-1")

        assert realtime.roster.find("u1") == "sid-1"
        assert emitted(fake_sio, "get-users") == [
            ([{"userId": "u1", "socketId": "sid-1"}], None)
        ]
        user = await _load_user(session_factory, "u1")
        assert user.is_online is True

    async def test_disconnect_marks_offline(
        self, realtime: Realtime, seed_user, session_factory, fake_sio, emitted
    ) -> None:
        await seed_user("u1", is_online=True)
        await realtime.presence.connect_user("u1", "sid-1")

        user_id = await realtime.presence.disconnect("sid-1")

        assert user_id == "u1"
        assert realtime.roster.find("u1") is None
        assert emitted(fake_sio, "get-users")[-1] == ([], None)
        user = await _load_user(session_factory, "u1")
        assert user.is_online is False
        assert user.last_active is not None

    async def test_unknown_connection_disconnect(
        self, realtime: Realtime, fake_sio, emitted
    ) -> None:
        assert await realtime.presence.disconnect("sid-unknown") is None
        assert emitted(fake_sio, "get-users") == [([], None)]

    async def test_unknown_user_is_tolerated(self, realtime: Realtime) -> None:
        await realtime.presence.connect_user("nobody", "sid-1")

        assert realtime.roster.find("nobody") == "sid-1"

    async def test_store_failure_is_tolerated(
        self, realtime: Realtime, fake_sio: MagicMock
    ) -> None:
        with patch.object(
            UserRepository, "update_online_status", side_effect=RuntimeError("db down")
        ):
            await realtime.presence.connect_user("u1", "sid-1")

        assert realtime.roster.find("u1") == "sid-1"
        fake_sio.emit.assert_awaited()
