"""Message repository for chat message database operations."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.message import Message


class MessageRepository:
    """Encapsulates message queries for the relay and the message API."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        message_id: str,
        match_id: str,
        sender_id: str,
        receiver_id: str,
        content: str,
        type: str = "text",
        is_read: bool = False,
        is_delivered: bool = False,
    ) -> Message:
        """Create a single message."""
        now = datetime.now(UTC)
        message = Message(
            id=message_id,
            match_id=match_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            type=type,
            is_read=is_read,
            is_delivered=is_delivered,
            created_at=now,
            updated_at=now,
        )
        self._session.add(message)
        await self._session.flush()
        await self._session.refresh(message)
        return message

    async def find_by_id(self, message_id: str) -> Message | None:
        """Find a message by its id."""
        result = await self._session.execute(
            select(Message).where(Message.id == message_id)
        )
        return result.scalar_one_or_none()

    async def find_by_match_id(self, match_id: str) -> list[Message]:
        """Retrieve all messages of a match in chronological order."""
        result = await self._session.execute(
            select(Message)
            .where(Message.match_id == match_id)
            .order_by(Message.created_at.asc())
        )
        return list(result.scalars().all())

    async def mark_read(self, match_id: str, receiver_id: str) -> int:
        """Mark every unread message addressed to ``receiver_id`` as read."""
        result = await self._session.execute(
            update(Message)
            .where(
                and_(
                    Message.match_id == match_id,
                    Message.receiver_id == receiver_id,
                    Message.is_read.is_(False),
                )
            )
            .values(is_read=True)
        )
        return int(result.rowcount or 0)

    async def update(self, message: Message, changes: dict[str, Any]) -> Message:
        """Apply field changes to a message."""
        for field, value in changes.items():
            setattr(message, field, value)
        message.updated_at = datetime.now(UTC)
        await self._session.flush()
        await self._session.refresh(message)
        return message

    async def soft_delete(self, message: Message) -> Message:
        """Flag a message deleted and blank out its content."""
        message.is_deleted = True
        message.content = "" if message.type == "image" else "This message was deleted"
        return await self.update(message, {})
