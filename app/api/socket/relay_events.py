"""Socket.IO event wiring for presence and chat relay."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import socketio
import structlog
from pydantic import BaseModel, ValidationError

from app.core.exceptions import AppException
from app.schemas.socket_schema import (
    AddUserPayload,
    AnswerCallPayload,
    CallUserPayload,
    IceCandidatePayload,
    NotificationPayload,
    RejectCallPayload,
    SendMessagePayload,
    UpdateMessagePayload,
    VoicePermissionPayload,
)
from app.services.presence_service import PresenceService
from app.services.relay_service import RelayDispatcher

logger = structlog.get_logger()

ERROR_EVENT = "error"

P = TypeVar("P", bound=BaseModel)


def parse_payload(model: type[P], data: Any, sid: str, event: str) -> P | None:
    """Validate an inbound payload; invalid payloads are logged and dropped."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning(
            "Dropping invalid socket payload",
            sid=sid,
            socket_event=event,
            errors=exc.errors(include_url=False),
        )
        return None


def register_relay_handlers(
    sio: socketio.AsyncServer,
    presence: PresenceService,
    dispatcher: RelayDispatcher,
) -> None:
    """Attach every presence and relay handler to ``sio``."""

    def on(
        event: str,
        model: type[P],
        handle: Callable[[str, P, Any], Awaitable[None]],
    ) -> None:
        async def handler(sid: str, data: Any = None) -> None:
            payload = parse_payload(model, data, sid, event)
            if payload is None:
                return
            try:
                await handle(sid, payload, data)
            except AppException as exc:
                logger.warning(
                    "Socket event rejected", sid=sid, socket_event=event, code=exc.code
                )
                await sio.emit(ERROR_EVENT, exc.to_payload(), to=sid)

        sio.on(event, handler)

    @sio.event
    async def connect(sid: str, environ: dict, auth: Any = None) -> None:
        logger.info("Socket connected", sid=sid)

    @sio.event
    async def disconnect(sid: str, *args: Any) -> None:
        await presence.disconnect(sid)

    async def add_user(sid: str, data: Any = None) -> None:
        # The web client sends the bare id; structured clients send {"userId": ...}.
        if isinstance(data, str):
            data = {"userId": data}
        payload = parse_payload(AddUserPayload, data, sid, "add-user")
        if payload is None:
            return
        await presence.connect_user(payload.user_id, sid)

    sio.on("add-user", add_user)

    on(
        "send-message",
        SendMessagePayload,
        lambda sid, p, raw: dispatcher.send_message(sid, p, raw),
    )
    on(
        "update-message",
        UpdateMessagePayload,
        lambda sid, p, raw: dispatcher.update_message(p),
    )
    on(
        "send-notification",
        NotificationPayload,
        lambda sid, p, raw: dispatcher.send_notification(p),
    )
    on(
        "request-voice-permission",
        VoicePermissionPayload,
        lambda sid, p, raw: dispatcher.request_voice_permission(p),
    )
    on(
        "voice-permission-accepted",
        VoicePermissionPayload,
        lambda sid, p, raw: dispatcher.accept_voice_permission(p),
    )
    on(
        "voice-permission-rejected",
        VoicePermissionPayload,
        lambda sid, p, raw: dispatcher.reject_voice_permission(p),
    )
    on("call-user", CallUserPayload, lambda sid, p, raw: dispatcher.call_user(p))
    on("answer-call", AnswerCallPayload, lambda sid, p, raw: dispatcher.answer_call(p))
    on("reject-call", RejectCallPayload, lambda sid, p, raw: dispatcher.reject_call(p))
    on(
        "ice-candidate",
        IceCandidatePayload,
        lambda sid, p, raw: dispatcher.ice_candidate(p),
    )
