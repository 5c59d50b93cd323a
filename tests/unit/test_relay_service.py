"""Unit tests for RelayDispatcher."""

from unittest.mock import AsyncMock, MagicMock

from app.dependencies import Realtime
from app.models.match import Match
from app.schemas.socket_schema import (
    AnswerCallPayload,
    CallUserPayload,
    IceCandidatePayload,
    NotificationPayload,
    RejectCallPayload,
    SendMessagePayload,
    UpdateMessagePayload,
    VoicePermissionPayload,
)


def _message(**fields) -> tuple[SendMessagePayload, dict]:
    raw = {"to": "u2", "content": "hi", "senderId": "u1", "matchId": "m1", "id": "x1"}
    raw.update(fields)
    return SendMessagePayload.model_validate(raw), raw


class TestSendMessage:
    """Chat relay and the persona hand-off."""

    async def test_forwards_raw_payload(
        self, realtime: Realtime, fake_sio: MagicMock, emitted
    ) -> None:
        realtime.roster.register("u2", "sid-u2")
        payload, raw = _message()

        await realtime.dispatcher.send_message("sid-u1", payload, raw)

        assert emitted(fake_sio, "receive-message") == [(raw, "sid-u2")]

    async def test_offline_destination_is_dropped(
        self, realtime: Realtime, fake_sio: MagicMock
    ) -> None:
        payload, raw = _message()

        await realtime.dispatcher.send_message("sid-u1", payload, raw)

        fake_sio.emit.assert_not_called()
        assert realtime.scheduler.pending == 0

    async def test_offline_persona_gets_ai_reply(self, realtime: Realtime) -> None:
        realtime.responder.respond = AsyncMock()  # type: ignore[method-assign]
        payload, raw = _message(to="p1", isAI=True)

        await realtime.dispatcher.send_message("sid-u1", payload, raw)

        request = realtime.responder.respond.await_args.args[0]
        assert request.persona_id == "p1"
        assert request.sender_sid == "sid-u1"
        assert request.sender_id == "u1"
        assert request.match_id == "m1"
        assert request.message_id == "x1"
        assert request.content == "hi"

    async def test_connected_persona_is_relayed(
        self, realtime: Realtime, fake_sio: MagicMock, emitted
    ) -> None:
        realtime.responder.respond = AsyncMock()  # type: ignore[method-assign]
        realtime.roster.register("p1", "sid-p1")
        payload, raw = _message(to="p1", isAI=True)

        await realtime.dispatcher.send_message("sid-u1", payload, raw)

        assert emitted(fake_sio, "receive-message") == [(raw, "sid-p1")]
        realtime.responder.respond.assert_not_called()


class TestMessageEvents:
    """Message updates and notifications."""

    async def test_update_message(
        self, realtime: Realtime, fake_sio: MagicMock, emitted
    ) -> None:
        realtime.roster.register("u2", "sid-u2")
        payload = UpdateMessagePayload.model_validate(
            {"to": "u2", "messageId": "x1", "updates": {"isSeen": True}}
        )

        await realtime.dispatcher.update_message(payload)

        assert emitted(fake_sio, "update-message") == [
            ({"messageId": "x1", "updates": {"isSeen": True}}, "sid-u2")
        ]

    async def test_send_notification(
        self, realtime: Realtime, fake_sio: MagicMock, emitted
    ) -> None:
        realtime.roster.register("u2", "sid-u2")
        payload = NotificationPayload.model_validate(
            {"to": "u2", "notification": {"type": "like", "from": "u1"}}
        )

        await realtime.dispatcher.send_notification(payload)

        assert emitted(fake_sio, "receive-notification") == [
            ({"type": "like", "from": "u1"}, "sid-u2")
        ]

    async def test_null_notification_is_forwarded_as_null(
        self, realtime: Realtime, fake_sio: MagicMock
    ) -> None:
        realtime.roster.register("u2", "sid-u2")
        payload = NotificationPayload.model_validate({"to": "u2", "notification": None})

        await realtime.dispatcher.send_notification(payload)

        fake_sio.emit.assert_awaited_once_with(
            "receive-notification", None, to="sid-u2"
        )


class TestVoicePermission:
    """Voice call permission flow."""

    async def test_request(self, realtime: Realtime, fake_sio, emitted) -> None:
        realtime.roster.register("u2", "sid-u2")
        payload = VoicePermissionPayload.model_validate(
            {"to": "u2", "from": "u1", "name": "Rafi"}
        )

        await realtime.dispatcher.request_voice_permission(payload)

        assert emitted(fake_sio, "voice-permission-requested") == [
            ({"from": "u1", "name": "Rafi"}, "sid-u2")
        ]

    async def test_accept_enables_voice_call(
        self, realtime: Realtime, seed_match, session_factory, fake_sio, emitted
    ) -> None:
        await seed_match("m1", "u1", "u2")
        realtime.roster.register("u1", "sid-u1")
        # u2 accepts the request u1 sent
        payload = VoicePermissionPayload.model_validate({"to": "u1", "from": "u2"})

        await realtime.dispatcher.accept_voice_permission(payload)

        assert emitted(fake_sio, "voice-permission-granted") == [
            ({"from": "u2"}, "sid-u1")
        ]
        async with session_factory() as session:
            match = await session.get(Match, "m1")
        assert match.voice_call_enabled is True

    async def test_accept_for_offline_requester_changes_nothing(
        self, realtime: Realtime, seed_match, session_factory, fake_sio
    ) -> None:
        await seed_match("m1", "u1", "u2")
        payload = VoicePermissionPayload.model_validate({"to": "u1", "from": "u2"})

        await realtime.dispatcher.accept_voice_permission(payload)

        fake_sio.emit.assert_not_called()
        async with session_factory() as session:
            match = await session.get(Match, "m1")
        assert match.voice_call_enabled is False

    async def test_accept_without_match_still_notifies(
        self, realtime: Realtime, fake_sio, emitted
    ) -> None:
        realtime.roster.register("u1", "sid-u1")
        payload = VoicePermissionPayload.model_validate({"to": "u1", "from": "u9"})

        await realtime.dispatcher.accept_voice_permission(payload)

        assert len(emitted(fake_sio, "voice-permission-granted")) == 1

    async def test_reject(self, realtime: Realtime, fake_sio, emitted) -> None:
        realtime.roster.register("u1", "sid-u1")
        payload = VoicePermissionPayload.model_validate({"to": "u1", "from": "u2"})

        await realtime.dispatcher.reject_voice_permission(payload)

        assert emitted(fake_sio, "voice-permission-denied") == [
            ({"from": "u2"}, "sid-u1")
        ]


class TestCallSignalling:
    """WebRTC signalling relay."""

    async def test_call_user(self, realtime: Realtime, fake_sio, emitted) -> None:
        realtime.roster.register("u2", "sid-u2")
        payload = CallUserPayload.model_validate(
            {"userToCall": "u2", "signalData": {"sdp": "offer"}, "from": "u1", "name": "Rafi"}
        )

        await realtime.dispatcher.call_user(payload)

        assert emitted(fake_sio, "call-made") == [
            ({"signal": {"sdp": "offer"}, "from": "u1", "name": "Rafi"}, "sid-u2")
        ]

    async def test_answer_call(self, realtime: Realtime, fake_sio, emitted) -> None:
        realtime.roster.register("u1", "sid-u1")
        payload = AnswerCallPayload.model_validate(
            {"to": "u1", "signal": {"sdp": "answer"}}
        )

        await realtime.dispatcher.answer_call(payload)

        assert emitted(fake_sio, "call-answered") == [
            ({"signal": {"sdp": "answer"}}, "sid-u1")
        ]

    async def test_reject_call_has_no_payload(
        self, realtime: Realtime, fake_sio: MagicMock
    ) -> None:
        realtime.roster.register("u1", "sid-u1")

        await realtime.dispatcher.reject_call(RejectCallPayload(to="u1"))

        fake_sio.emit.assert_awaited_once_with("call-rejected", to="sid-u1")

    async def test_ice_candidate(self, realtime: Realtime, fake_sio, emitted) -> None:
        realtime.roster.register("u2", "sid-u2")
        payload = IceCandidatePayload.model_validate(
            {"to": "u2", "candidate": {"candidate": "a=1"}}
        )

        await realtime.dispatcher.ice_candidate(payload)

        assert emitted(fake_sio, "ice-candidate") == [
            ({"candidate": {"candidate": "a=1"}}, "sid-u2")
        ]

    async def test_signalling_to_offline_user_is_dropped(
        self, realtime: Realtime, fake_sio: MagicMock
    ) -> None:
        await realtime.dispatcher.answer_call(AnswerCallPayload(to="ghost"))

        fake_sio.emit.assert_not_called()
