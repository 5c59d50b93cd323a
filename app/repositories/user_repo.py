"""User repository for presence bookkeeping."""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class UserRepository:
    """Encapsulates user-related database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, user_id: str) -> User | None:
        """Find a user by primary key."""
        result = await self._session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def update_online_status(self, user_id: str, is_online: bool) -> bool:
        """Set the stored online flag. Returns False if the user does not exist."""
        result = await self._session.execute(
            update(User).where(User.id == user_id).values(is_online=is_online)
        )
        return bool(result.rowcount)

    async def update_last_active(self, user_id: str, last_active: datetime) -> bool:
        """Set the last-active timestamp. Returns False if the user does not exist."""
        result = await self._session.execute(
            update(User).where(User.id == user_id).values(last_active=last_active)
        )
        return bool(result.rowcount)
