"""Socket event payload schemas.

Inbound payloads use the web client's camelCase field names; every model
accepts both the alias and the Python field name.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SocketPayload(BaseModel):
    """Base for inbound socket payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AddUserPayload(SocketPayload):
    """``add-user``: register the connection under a user id."""

    user_id: str = Field(..., min_length=1)


class SendMessagePayload(SocketPayload):
    """``send-message``: a chat message to relay or to answer as a persona."""

    to: str = Field(..., min_length=1)
    is_ai: bool = Field(default=False, alias="isAI")
    content: str = ""
    sender_id: str | None = None
    match_id: str | None = None
    id: str | None = None
    type: str = "text"


class UpdateMessagePayload(SocketPayload):
    """``update-message``: field updates for an already delivered message."""

    to: str = Field(..., min_length=1)
    message_id: str
    updates: dict[str, Any] = Field(default_factory=dict)


class NotificationPayload(SocketPayload):
    """``send-notification``."""

    to: str = Field(..., min_length=1)
    notification: Any = None


class VoicePermissionPayload(SocketPayload):
    """Voice permission request, grant and denial."""

    to: str = Field(..., min_length=1)
    from_: str | None = Field(default=None, alias="from")
    name: str | None = None


class CallUserPayload(SocketPayload):
    """``call-user``: WebRTC offer addressed to ``userToCall``."""

    user_to_call: str = Field(..., min_length=1)
    signal_data: Any = None
    from_: str | None = Field(default=None, alias="from")
    name: str | None = None


class AnswerCallPayload(SocketPayload):
    """``answer-call``."""

    to: str = Field(..., min_length=1)
    signal: Any = None


class RejectCallPayload(SocketPayload):
    """``reject-call``."""

    to: str = Field(..., min_length=1)


class IceCandidatePayload(SocketPayload):
    """``ice-candidate``."""

    to: str = Field(..., min_length=1)
    candidate: Any = None
