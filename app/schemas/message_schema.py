"""Chat message schemas shared by the socket relay and the message API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MessageType = Literal[
    "text",
    "image",
    "voice",
    "call_request",
    "call_accepted",
    "call_declined",
    "call_log",
    "missed_call",
]


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageDocument(CamelModel):
    """Message as emitted on the socket and returned by the API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    match_id: str
    sender_id: str
    receiver_id: str
    content: str
    type: str = "text"
    is_read: bool = False
    is_delivered: bool = False
    is_seen: bool = False
    is_deleted: bool = False
    created_at: datetime

    def to_wire(self) -> dict:
        """JSON-safe camelCase dict for socket emission."""
        return self.model_dump(by_alias=True, mode="json")


class CreateMessageRequest(CamelModel):
    """Request to persist a message sent by a user."""

    id: str | None = Field(default=None, max_length=64)
    match_id: str = Field(..., min_length=1, max_length=64)
    sender_id: str = Field(..., min_length=1, max_length=64)
    receiver_id: str = Field(..., min_length=1, max_length=64)
    content: str = Field(default="", max_length=10000)
    type: MessageType = "text"


class UpdateMessageRequest(CamelModel):
    """Partial update of a stored message."""

    content: str | None = Field(default=None, max_length=10000)
    type: MessageType | None = None
    is_read: bool | None = None
    is_delivered: bool | None = None
    is_seen: bool | None = None


class MarkReadRequest(CamelModel):
    """Mark a match's messages read on behalf of ``user_id``."""

    user_id: str = Field(..., min_length=1)


class MarkReadResponse(CamelModel):
    """Result of a mark-read call."""

    updated: int


class MessageListResponse(CamelModel):
    """All messages of a match in chronological order."""

    match_id: str
    messages: list[MessageDocument]
