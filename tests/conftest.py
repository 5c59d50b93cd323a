"""Pytest configuration and fixtures."""

import asyncio
import random
from collections.abc import AsyncGenerator, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.core.scheduler import Scheduler
from app.dependencies import Realtime, build_realtime
from app.models.match import Match
from app.models.message import Message  # noqa: F401
from app.models.user import User
from app.services.text_generation import GenerativeTextClient

# --- Test DB (SQLite in-memory) ---

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    echo=False,
    poolclass=StaticPool,
    # sessions share one connection; a checkin must not roll back a sibling
    pool_reset_on_return=None,
)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # release the shared connection so the next test binds to its own loop
    await test_engine.dispose()


async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session."""
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return test_session_factory


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async session for repository tests."""
    async with test_session_factory() as session:
        yield session


# --- Socket server, clock and scheduler doubles ---


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class RecordingSleep:
    """Sleep replacement that records delays and only yields to the loop."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


def _emitted(sio: MagicMock, event: str) -> list[tuple[Any, str | None]]:
    """Return ``(data, to)`` for every ``sio.emit`` call of ``event``."""
    calls = []
    for call in sio.emit.call_args_list:
        if call.args and call.args[0] == event:
            data = call.args[1] if len(call.args) > 1 else None
            calls.append((data, call.kwargs.get("to")))
    return calls


@pytest.fixture
def emitted() -> Callable[[MagicMock, str], list[tuple[Any, str | None]]]:
    """Lookup of emitted socket events by name."""
    return _emitted


@pytest.fixture
def fake_sio() -> MagicMock:
    """Socket.IO server double with an awaitable ``emit``."""
    sio = MagicMock()
    sio.emit = AsyncMock()
    return sio


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def scheduler(recording_sleep: RecordingSleep) -> Scheduler:
    """Scheduler whose delays complete immediately."""
    return Scheduler(sleep=recording_sleep)


@pytest.fixture
def text_client() -> MagicMock:
    """Text client double returning a fixed persona reply."""
    client = MagicMock(spec=GenerativeTextClient)
    client.generate = AsyncMock(return_value="Hey! Nice to hear from you.")
    return client


@pytest.fixture
def realtime(
    fake_sio: MagicMock,
    text_client: MagicMock,
    scheduler: Scheduler,
    clock: FakeClock,
) -> Realtime:
    """Realtime components wired to test doubles and the test database."""
    return build_realtime(
        fake_sio,
        test_session_factory,
        text_client,
        scheduler=scheduler,
        clock=clock,
        rng=random.Random(7),
    )


# --- App override & client fixtures ---


def _get_app():  # type: ignore[no-untyped-def]
    """Import app lazily and apply overrides."""
    from app.core.database import get_async_session as original_dep
    from app.main import app

    app.dependency_overrides[original_dep] = override_get_async_session
    return app


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for async tests."""
    application = _get_app()
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- Mock LLM ---


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock LLM for testing."""
    mock = MagicMock(spec=BaseChatModel)
    mock.ainvoke = AsyncMock(return_value=AIMessage(content="Test response"))
    return mock


# --- Seed helpers ---


async def _seed_user(user_id: str, is_ai: bool = False, is_online: bool = False) -> None:
    async with test_session_factory() as session:
        session.add(
            User(id=user_id, username=f"user-{user_id}", is_ai=is_ai, is_online=is_online)
        )
        await session.commit()


async def _seed_match(match_id: str, user1_id: str, user2_id: str) -> None:
    async with test_session_factory() as session:
        session.add(Match(id=match_id, user1_id=user1_id, user2_id=user2_id))
        await session.commit()


@pytest.fixture
def seed_user() -> Callable[..., Any]:
    """Insert a user row."""
    return _seed_user


@pytest.fixture
def seed_match() -> Callable[..., Any]:
    """Insert a match row."""
    return _seed_match
