"""Match (conversation) database model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Match(Base):
    """Conversation between two users; ``id`` is the conversation identifier."""

    __tablename__ = "matches"
    __table_args__ = (
        Index("ix_matches_user1_id_user2_id", "user1_id", "user2_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user1_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user2_id: Mapped[str] = mapped_column(String(64), nullable=False)
    last_message_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    unread_count1: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unread_count2: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    voice_call_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def side_of(self, user_id: str) -> int:
        """Return 1 or 2 depending on which participant ``user_id`` is."""
        return 1 if self.user1_id == user_id else 2
