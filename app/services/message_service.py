"""Service layer for the durable message API."""

import uuid

from app.core.exceptions import MessageNotFoundError
from app.repositories.message_repo import MessageRepository
from app.schemas.message_schema import (
    CreateMessageRequest,
    MarkReadResponse,
    MessageDocument,
    MessageListResponse,
    UpdateMessageRequest,
)


class MessageService:
    """Persists and retrieves chat history for matches."""

    def __init__(self, message_repo: MessageRepository) -> None:
        self._message_repo = message_repo

    async def list_messages(self, match_id: str) -> MessageListResponse:
        """Return a match's messages in chronological order."""
        messages = await self._message_repo.find_by_match_id(match_id)
        return MessageListResponse(
            match_id=match_id,
            messages=[MessageDocument.model_validate(m) for m in messages],
        )

    async def create_message(self, request: CreateMessageRequest) -> MessageDocument:
        """Store a message, keeping the client-generated id when one is given."""
        message = await self._message_repo.create(
            message_id=request.id or str(uuid.uuid4()),
            match_id=request.match_id,
            sender_id=request.sender_id,
            receiver_id=request.receiver_id,
            content=request.content,
            type=request.type,
        )
        return MessageDocument.model_validate(message)

    async def mark_read(self, match_id: str, reader_id: str) -> MarkReadResponse:
        """Mark everything addressed to ``reader_id`` in the match as read."""
        updated = await self._message_repo.mark_read(match_id, reader_id)
        return MarkReadResponse(updated=updated)

    async def update_message(
        self, message_id: str, request: UpdateMessageRequest
    ) -> MessageDocument:
        """Apply the fields present in ``request`` to a stored message."""
        message = await self._message_repo.find_by_id(message_id)
        if message is None:
            raise MessageNotFoundError()
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        message = await self._message_repo.update(message, changes)
        return MessageDocument.model_validate(message)

    async def delete_message(self, message_id: str) -> MessageDocument:
        """Soft-delete a message."""
        message = await self._message_repo.find_by_id(message_id)
        if message is None:
            raise MessageNotFoundError()
        message = await self._message_repo.soft_delete(message)
        return MessageDocument.model_validate(message)
