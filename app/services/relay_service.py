"""Routing of inbound chat and call-signalling events between live sockets.

Every event is delivered only if its destination is connected right now.
A missing destination is a silent drop: durable delivery belongs to the
message HTTP API, not to this relay, so nothing is queued or retried here.
"""

from typing import Any

import socketio
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.repositories.match_repo import MatchRepository
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
from app.services.ai_responder import AIReplyRequest, AIResponder
from app.services.presence_service import PresenceRoster

logger = structlog.get_logger()

_NO_PAYLOAD = object()


class RelayDispatcher:
    """Forwards events to the destination's socket, or hands them to a persona."""

    def __init__(
        self,
        sio: socketio.AsyncServer,
        roster: PresenceRoster,
        responder: AIResponder,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._sio = sio
        self._roster = roster
        self._responder = responder
        self._session_factory = session_factory

    async def _forward(
        self, user_id: str, event: str, data: Any = _NO_PAYLOAD
    ) -> bool:
        sid = self._roster.find(user_id)
        if sid is None:
            logger.debug("Destination offline, dropping", to=user_id, socket_event=event)
            return False
        if data is _NO_PAYLOAD:
            await self._sio.emit(event, to=sid)
        else:
            await self._sio.emit(event, data, to=sid)
        return True

    # --- Chat ---

    async def send_message(
        self, sid: str, payload: SendMessagePayload, raw: dict[str, Any]
    ) -> None:
        """Forward verbatim, or answer as a persona when ``isAI`` is set."""
        if await self._forward(payload.to, "receive-message", raw):
            return
        if not payload.is_ai:
            return
        await self._responder.respond(
            AIReplyRequest(
                content=payload.content,
                persona_id=payload.to,
                sender_sid=sid,
                sender_id=payload.sender_id,
                match_id=payload.match_id,
                message_id=payload.id,
            )
        )

    async def update_message(self, payload: UpdateMessagePayload) -> None:
        await self._forward(
            payload.to,
            "update-message",
            {"messageId": payload.message_id, "updates": payload.updates},
        )

    async def send_notification(self, payload: NotificationPayload) -> None:
        await self._forward(payload.to, "receive-notification", payload.notification)

    # --- Voice permission ---

    async def request_voice_permission(self, payload: VoicePermissionPayload) -> None:
        logger.info("Voice permission requested", to=payload.to, from_=payload.from_)
        await self._forward(
            payload.to,
            "voice-permission-requested",
            {"from": payload.from_, "name": payload.name},
        )

    async def accept_voice_permission(self, payload: VoicePermissionPayload) -> None:
        """Enable voice calls on the pair's match, then notify the requester."""
        if self._roster.find(payload.to) is None:
            return
        logger.info("Voice permission accepted", to=payload.to, from_=payload.from_)
        if payload.from_:
            await self._enable_voice_call(payload.from_, payload.to)
        await self._forward(
            payload.to, "voice-permission-granted", {"from": payload.from_}
        )

    async def reject_voice_permission(self, payload: VoicePermissionPayload) -> None:
        logger.info("Voice permission rejected", to=payload.to, from_=payload.from_)
        await self._forward(
            payload.to, "voice-permission-denied", {"from": payload.from_}
        )

    async def _enable_voice_call(self, user_a: str, user_b: str) -> None:
        try:
            async with self._session_factory() as session:
                repo = MatchRepository(session)
                match = await repo.find_by_participants(user_a, user_b)
                if match is None:
                    logger.warning("No match for voice permission", a=user_a, b=user_b)
                    return
                await repo.set_voice_call_enabled(match.id, True)
                await session.commit()
        except Exception:
            logger.exception("Failed to enable voice call", a=user_a, b=user_b)

    # --- Call signalling ---

    async def call_user(self, payload: CallUserPayload) -> None:
        logger.info("Call placed", to=payload.user_to_call, from_=payload.from_)
        await self._forward(
            payload.user_to_call,
            "call-made",
            {"signal": payload.signal_data, "from": payload.from_, "name": payload.name},
        )

    async def answer_call(self, payload: AnswerCallPayload) -> None:
        await self._forward(payload.to, "call-answered", {"signal": payload.signal})

    async def reject_call(self, payload: RejectCallPayload) -> None:
        await self._forward(payload.to, "call-rejected")

    async def ice_candidate(self, payload: IceCandidatePayload) -> None:
        await self._forward(
            payload.to, "ice-candidate", {"candidate": payload.candidate}
        )
