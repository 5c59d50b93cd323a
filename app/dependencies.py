"""Global dependencies for the application."""

import random
from dataclasses import dataclass
from functools import lru_cache

import socketio
from fastapi import Depends, Request
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.database import get_async_session
from app.core.scheduler import Scheduler
from app.repositories.message_repo import MessageRepository
from app.services.ai_responder import AIResponder
from app.services.message_service import MessageService
from app.services.presence_service import (
    AIPresenceTable,
    Clock,
    PresenceBroadcaster,
    PresenceRoster,
    PresenceService,
    epoch_ms,
)
from app.services.relay_service import RelayDispatcher
from app.services.text_generation import ApiKeyPool, GenerativeTextClient

# --- LLM ---


def build_chat_model(api_key: str) -> BaseChatModel:
    """Build a chat model for the configured provider bound to ``api_key``."""
    llm_config = settings.llm
    match llm_config.provider:
        case "openai":
            return ChatOpenAI(
                model=llm_config.openai_model,
                api_key=api_key,  # type: ignore[arg-type]
                timeout=llm_config.timeout_seconds,
            )
        case "anthropic":
            return ChatAnthropic(  # type: ignore[call-arg]
                model_name=llm_config.anthropic_model,
                api_key=api_key,  # type: ignore[arg-type]
                timeout=llm_config.timeout_seconds,
            )
        case _:
            raise ValueError(f"Unsupported LLM provider: {llm_config.provider}")


@lru_cache
def get_text_client() -> GenerativeTextClient:
    """Get the process-wide text client over the configured key pool."""
    keys = [key.get_secret_value() for key in settings.llm.api_keys]
    return GenerativeTextClient(ApiKeyPool(keys), build_chat_model)


# --- Realtime ---


@dataclass
class Realtime:
    """Presence and relay components shared by all socket connections."""

    roster: PresenceRoster
    ai_table: AIPresenceTable
    broadcaster: PresenceBroadcaster
    presence: PresenceService
    responder: AIResponder
    dispatcher: RelayDispatcher
    scheduler: Scheduler


def build_realtime(
    sio: socketio.AsyncServer,
    session_factory: async_sessionmaker[AsyncSession],
    text_client: GenerativeTextClient,
    scheduler: Scheduler | None = None,
    clock: Clock = epoch_ms,
    rng: random.Random | None = None,
) -> Realtime:
    """Wire the realtime components around one Socket.IO server."""
    scheduler = scheduler or Scheduler()
    roster = PresenceRoster()
    ai_table = AIPresenceTable(ttl_ms=settings.presence.ai_ttl_ms, clock=clock)
    broadcaster = PresenceBroadcaster(
        sio, roster, ai_table, ai_socket_prefix=settings.presence.ai_socket_prefix
    )
    presence = PresenceService(roster, broadcaster, session_factory)
    responder = AIResponder(
        sio=sio,
        ai_table=ai_table,
        broadcaster=broadcaster,
        text_client=text_client,
        session_factory=session_factory,
        scheduler=scheduler,
        config=settings.responder,
        rng=rng,
    )
    dispatcher = RelayDispatcher(sio, roster, responder, session_factory)
    return Realtime(
        roster=roster,
        ai_table=ai_table,
        broadcaster=broadcaster,
        presence=presence,
        responder=responder,
        dispatcher=dispatcher,
        scheduler=scheduler,
    )


def get_realtime(request: Request) -> Realtime:
    """Get the realtime components attached to the running app."""
    return request.app.state.realtime


def get_broadcaster(request: Request) -> PresenceBroadcaster:
    """Get the presence broadcaster of the running app."""
    return get_realtime(request).broadcaster


# --- Messages ---


def get_message_repository(
    session: AsyncSession = Depends(get_async_session),
) -> MessageRepository:
    """Get MessageRepository bound to the current session."""
    return MessageRepository(session)


def get_message_service(
    message_repo: MessageRepository = Depends(get_message_repository),
) -> MessageService:
    """Get MessageService for the current request."""
    return MessageService(message_repo)
