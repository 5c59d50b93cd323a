"""Match repository for conversation-level database operations."""

from datetime import UTC, datetime

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.match import Match


class MatchRepository:
    """Encapsulates match queries used by the realtime relay."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, match_id: str) -> Match | None:
        """Find a match by its conversation id."""
        result = await self._session.execute(select(Match).where(Match.id == match_id))
        return result.scalar_one_or_none()

    async def find_by_participants(self, user_a: str, user_b: str) -> Match | None:
        """Find the match between two users regardless of participant order."""
        result = await self._session.execute(
            select(Match)
            .where(
                or_(
                    and_(Match.user1_id == user_a, Match.user2_id == user_b),
                    and_(Match.user1_id == user_b, Match.user2_id == user_a),
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def set_voice_call_enabled(self, match_id: str, enabled: bool) -> None:
        """Toggle voice calling for a match."""
        await self._session.execute(
            update(Match).where(Match.id == match_id).values(voice_call_enabled=enabled)
        )

    async def touch_last_message_at(
        self, match_id: str, when: datetime | None = None
    ) -> None:
        """Record the time of the latest message in a match."""
        await self._session.execute(
            update(Match)
            .where(Match.id == match_id)
            .values(last_message_at=when or datetime.now(UTC))
        )

    async def increment_unread(self, match_id: str, side: int) -> None:
        """Increment the unread counter of participant ``side`` (1 or 2)."""
        column = Match.unread_count1 if side == 1 else Match.unread_count2
        await self._session.execute(
            update(Match)
            .where(Match.id == match_id)
            .values({column: column + 1})
        )
