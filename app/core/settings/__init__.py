"""Domain-specific configuration models."""

from app.core.settings.app_config import AppConfig
from app.core.settings.database_config import DatabaseConfig
from app.core.settings.llm_config import LLMConfig
from app.core.settings.presence_config import PresenceConfig
from app.core.settings.responder_config import PersonaProfile, ResponderConfig
from app.core.settings.server_config import ServerConfig

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "LLMConfig",
    "PersonaProfile",
    "PresenceConfig",
    "ResponderConfig",
    "ServerConfig",
]
