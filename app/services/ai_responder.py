"""Synthetic replies from AI personas in live chats."""

import random
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

import socketio
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import AppException, MissingConversationError, ProviderError
from app.core.scheduler import Scheduler
from app.core.settings import ResponderConfig
from app.repositories.match_repo import MatchRepository
from app.repositories.message_repo import MessageRepository
from app.schemas.message_schema import MessageDocument
from app.services.persona import (
    build_prompt,
    is_alternate_register,
    is_valid_reply,
    select_persona,
)
from app.services.presence_service import AIPresenceTable, PresenceBroadcaster
from app.services.text_generation import GenerativeTextClient

logger = structlog.get_logger()

RECEIVE_MESSAGE_EVENT = "receive-message"
UPDATE_MESSAGE_EVENT = "update-message"


@dataclass(frozen=True)
class AIReplyRequest:
    """An inbound message addressed to a persona that is not connected."""

    content: str
    persona_id: str
    sender_sid: str
    sender_id: str | None
    match_id: str | None
    message_id: str | None


@dataclass(frozen=True)
class ReplyTarget:
    """Where a persona reply goes once the request has been validated."""

    sid: str
    match_id: str
    persona_id: str
    human_id: str


class AIResponder:
    """Answers messages sent to AI personas.

    Each call refreshes the persona's presence, schedules a read receipt,
    asks the text provider for a reply and schedules its delivery. A failed
    or unusable generation is replaced by a scripted fallback that is only
    relayed, never persisted. Invocations are independent of each other.
    """

    def __init__(
        self,
        sio: socketio.AsyncServer,
        ai_table: AIPresenceTable,
        broadcaster: PresenceBroadcaster,
        text_client: GenerativeTextClient,
        session_factory: async_sessionmaker[AsyncSession],
        scheduler: Scheduler,
        config: ResponderConfig,
        rng: random.Random | None = None,
    ) -> None:
        self._sio = sio
        self._ai_table = ai_table
        self._broadcaster = broadcaster
        self._text_client = text_client
        self._session_factory = session_factory
        self._scheduler = scheduler
        self._config = config
        self._rng = rng or random.Random()

    async def respond(self, request: AIReplyRequest) -> None:
        """Run one reply cycle for ``request``.

        Raises:
            MissingConversationError: ``match_id`` is empty.
            AppException: ``sender_id`` is empty.
        """
        if not request.match_id:
            raise MissingConversationError()
        if not request.sender_id:
            raise AppException(
                message="senderId is required for messages sent to an AI persona",
                code="MISSING_SENDER_ID",
            )

        target = ReplyTarget(
            sid=request.sender_sid,
            match_id=request.match_id,
            persona_id=request.persona_id.strip(),
            human_id=request.sender_id,
        )
        persona_id = target.persona_id
        logger.info(
            "Processing AI reply",
            persona_id=persona_id,
            match_id=target.match_id,
            message_id=request.message_id,
        )

        self._ai_table.mark_online(persona_id)
        await self._broadcaster.broadcast()
        await self._broadcaster.send_to(request.sender_sid)

        self._scheduler.call_later(
            self._config.read_receipt_delay_seconds,
            lambda: self._send_read_receipt(request),
            name=f"read-receipt:{request.message_id}",
        )

        try:
            reply = await self._generate(persona_id, request.content)
        except ProviderError as exc:
            logger.error(
                "AI reply generation failed",
                persona_id=persona_id,
                match_id=target.match_id,
                error_class=type(exc).__name__,
                error=exc.message,
                status=exc.status,
                details=exc.details,
            )
            fallback = self.fallback_text(request.content)
            self._scheduler.call_later(
                self._config.fallback_delay_seconds,
                lambda: self._send_fallback(target, fallback),
                name=f"ai-fallback:{target.match_id}",
            )
            return

        delay = self._rng.uniform(
            self._config.reply_delay_min_seconds,
            self._config.reply_delay_max_seconds,
        )
        self._scheduler.call_later(
            delay,
            lambda: self._deliver_reply(target, reply),
            name=f"ai-reply:{target.match_id}",
        )

    async def _generate(self, persona_id: str, user_message: str) -> str:
        profile = select_persona(persona_id, self._config.persona_profiles)
        prompt = build_prompt(profile, user_message)
        reply = await self._text_client.generate(prompt)
        if not is_valid_reply(reply):
            raise ProviderError(message="Invalid or empty AI response")
        return reply.strip()

    def fallback_text(self, user_message: str) -> str:
        """Scripted reply matching the register of the user's message."""
        if is_alternate_register(user_message, self._config.alternate_keywords):
            return self._config.fallback_alternate
        return self._config.fallback_default

    async def _send_read_receipt(self, request: AIReplyRequest) -> None:
        await self._sio.emit(
            UPDATE_MESSAGE_EVENT,
            {"messageId": request.message_id, "updates": {"isRead": True}},
            to=request.sender_sid,
        )

    async def _deliver_reply(self, target: ReplyTarget, reply: str) -> None:
        document = MessageDocument(
            id=str(uuid.uuid4()),
            match_id=target.match_id,
            sender_id=target.persona_id,
            receiver_id=target.human_id,
            content=reply,
            type="text",
            is_read=False,
            created_at=datetime.now(UTC),
        )
        try:
            document = await self._persist_reply(document)
        except Exception:
            logger.exception(
                "Failed to persist AI reply",
                match_id=target.match_id,
                message_id=document.id,
            )

        logger.info(
            "Sending AI reply",
            sid=target.sid,
            match_id=document.match_id,
            message_id=document.id,
        )
        await self._sio.emit(RECEIVE_MESSAGE_EVENT, document.to_wire(), to=target.sid)

    async def _persist_reply(self, document: MessageDocument) -> MessageDocument:
        async with self._session_factory() as session:
            message_repo = MessageRepository(session)
            match_repo = MatchRepository(session)
            message = await message_repo.create(
                message_id=document.id,
                match_id=document.match_id,
                sender_id=document.sender_id,
                receiver_id=document.receiver_id,
                content=document.content,
                type=document.type,
                is_read=False,
            )
            match = await match_repo.find_by_id(document.match_id)
            if match is None:
                logger.warning("AI reply for unknown match", match_id=document.match_id)
            else:
                await match_repo.touch_last_message_at(match.id, message.created_at)
                await match_repo.increment_unread(
                    match.id, match.side_of(document.receiver_id)
                )
            await session.commit()
            return MessageDocument.model_validate(message)

    async def _send_fallback(self, target: ReplyTarget, content: str) -> None:
        logger.info("Sending fallback AI reply", match_id=target.match_id)
        document = MessageDocument(
            id=str(uuid.uuid4()),
            match_id=target.match_id,
            sender_id=target.persona_id,
            receiver_id=target.human_id,
            content=content,
            type="text",
            is_read=False,
            is_delivered=True,
            created_at=datetime.now(UTC),
        )
        await self._sio.emit(RECEIVE_MESSAGE_EVENT, document.to_wire(), to=target.sid)
