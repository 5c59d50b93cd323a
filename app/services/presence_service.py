"""Presence tracking for connected users and simulated AI personas."""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import socketio
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.scheduler import SleepFn
from app.repositories.user_repo import UserRepository
from app.schemas.presence_schema import PresenceEntry

logger = structlog.get_logger()

GET_USERS_EVENT = "get-users"

Clock = Callable[[], int]


def epoch_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RosterEntry:
    """A connected user and the socket currently representing them."""

    user_id: str
    sid: str


class PresenceRoster:
    """In-memory map of user id to the live socket id.

    One entry per user; registering again replaces the previous socket.
    Mutated only from the event loop thread.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def register(self, user_id: str, sid: str) -> None:
        self._entries.pop(user_id, None)
        self._entries[user_id] = sid

    def unregister(self, sid: str) -> str | None:
        """Remove the entry held by ``sid`` and return its user id."""
        for user_id, entry_sid in self._entries.items():
            if entry_sid == sid:
                del self._entries[user_id]
                return user_id
        return None

    def find(self, user_id: str) -> str | None:
        return self._entries.get(user_id)

    def list_all(self) -> list[RosterEntry]:
        return [RosterEntry(user_id=u, sid=s) for u, s in self._entries.items()]


class AIPresenceTable:
    """Personas shown as online until their expiry timestamp passes."""

    def __init__(self, ttl_ms: int, clock: Clock = epoch_ms) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock
        self._expires_at: dict[str, int] = {}

    def mark_online(self, persona_id: str) -> int:
        """Insert or refresh a persona; returns its new expiry."""
        expires_at = self._clock() + self._ttl_ms
        self._expires_at[persona_id.strip()] = expires_at
        return expires_at

    def sweep(self, now: int | None = None) -> bool:
        """Drop expired personas. Returns True if anything was removed."""
        now = self._clock() if now is None else now
        expired = [pid for pid, exp in self._expires_at.items() if exp <= now]
        for persona_id in expired:
            del self._expires_at[persona_id]
        return bool(expired)

    def list_online(self, now: int | None = None) -> list[str]:
        now = self._clock() if now is None else now
        return [pid for pid, exp in self._expires_at.items() if exp > now]

    def expires_at(self, persona_id: str) -> int | None:
        return self._expires_at.get(persona_id.strip())


class PresenceBroadcaster:
    """Pushes the combined human and AI roster to connected clients."""

    def __init__(
        self,
        sio: socketio.AsyncServer,
        roster: PresenceRoster,
        ai_table: AIPresenceTable,
        ai_socket_prefix: str = "ai_simulated_",
    ) -> None:
        self._sio = sio
        self._roster = roster
        self._ai_table = ai_table
        self._ai_socket_prefix = ai_socket_prefix

    def entries(self) -> list[PresenceEntry]:
        """Connected users followed by live AI personas."""
        humans = [
            PresenceEntry(user_id=e.user_id, socket_id=e.sid)
            for e in self._roster.list_all()
        ]
        personas = [
            PresenceEntry(user_id=pid, socket_id=f"{self._ai_socket_prefix}{pid}")
            for pid in self._ai_table.list_online()
        ]
        return humans + personas

    def ai_online(self) -> list[str]:
        """Persona ids currently shown as online."""
        return self._ai_table.list_online()

    def snapshot(self) -> list[dict[str, Any]]:
        """Wire form of :meth:`entries`."""
        return [entry.model_dump(by_alias=True) for entry in self.entries()]

    async def broadcast(self) -> None:
        """Emit ``get-users`` to every connected client."""
        users = self.snapshot()
        logger.debug("Broadcasting presence", total=len(users))
        await self._sio.emit(GET_USERS_EVENT, users)

    async def send_to(self, sid: str) -> None:
        """Emit ``get-users`` to a single connection."""
        await self._sio.emit(GET_USERS_EVENT, self.snapshot(), to=sid)

    async def sweep_once(self) -> bool:
        """Expire stale personas and rebroadcast if any were removed."""
        changed = self._ai_table.sweep()
        if changed:
            logger.info("Expired AI presence removed")
            await self.broadcast()
        return changed

    async def run_sweeper(
        self, interval_seconds: float, sleep: SleepFn = asyncio.sleep
    ) -> None:
        """Sweep expired personas every ``interval_seconds`` until cancelled."""
        while True:
            await sleep(interval_seconds)
            try:
                await self.sweep_once()
            except Exception:
                logger.exception("AI presence sweep failed")


class PresenceService:
    """Connection lifecycle: roster updates, broadcasts and online flags."""

    def __init__(
        self,
        roster: PresenceRoster,
        broadcaster: PresenceBroadcaster,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._roster = roster
        self._broadcaster = broadcaster
        self._session_factory = session_factory

    async def connect_user(self, user_id: str, sid: str) -> None:
        """Register ``sid`` for ``user_id`` and mark the user online."""
        self._roster.register(user_id, sid)
        logger.info("User registered", user_id=user_id, sid=sid)
        await self._broadcaster.broadcast()
        await self._store_presence(user_id, online=True)

    async def disconnect(self, sid: str) -> str | None:
        """Drop ``sid`` from the roster and mark its user offline."""
        user_id = self._roster.unregister(sid)
        await self._broadcaster.broadcast()
        if user_id is None:
            return None
        logger.info("User disconnected", user_id=user_id, sid=sid)
        await self._store_presence(user_id, online=False)
        return user_id

    async def _store_presence(self, user_id: str, online: bool) -> None:
        try:
            async with self._session_factory() as session:
                repo = UserRepository(session)
                await repo.update_online_status(user_id, online)
                if not online:
                    await repo.update_last_active(user_id, datetime.now(UTC))
                await session.commit()
        except Exception:
            logger.exception(
                "Failed to update online status", user_id=user_id, online=online
            )
