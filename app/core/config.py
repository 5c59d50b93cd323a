"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.settings import (
    AppConfig,
    DatabaseConfig,
    LLMConfig,
    PersonaProfile,
    PresenceConfig,
    ResponderConfig,
    ServerConfig,
)

DEFAULT_ALTERNATE_KEYWORDS = (
    "ami,tumi,kemon,korcho,achho,kothay,ki,bolo,na,hobe,jai,khabar,sleep,love,baby"
)


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.llm.provider).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Provider
    llm_provider: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="LLM provider to use",
    )
    llm_api_keys: SecretStr = Field(
        default=SecretStr(""),
        description="Comma-separated pool of provider API keys, used round-robin",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model name",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Anthropic model name",
    )
    llm_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Per-request timeout for the provider call",
    )

    # App
    app_name: str = Field(
        default="velvii-realtime",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="Server port",
    )
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://localhost:5174",
        description="Comma-separated list of allowed browser origins",
    )
    client_url: str | None = Field(
        default=None,
        description="Deployed web client origin, appended to the CORS allow-list",
    )

    # Database
    database_url: SecretStr = Field(
        default=SecretStr("sqlite+aiosqlite:///./velvii.db"),
        description="Async database URL (mysql+aiomysql://... or sqlite+aiosqlite://...)",
    )

    # Presence
    ai_presence_ttl_seconds: int = Field(
        default=300,
        ge=1,
        description="How long an AI persona stays online after an interaction",
    )
    ai_presence_sweep_seconds: int = Field(
        default=60,
        ge=1,
        description="Interval of the expired AI presence sweep",
    )
    ai_socket_prefix: str = Field(
        default="ai_simulated_",
        description="Prefix of the synthetic socket id reported for AI personas",
    )

    # AI responder
    read_receipt_delay_seconds: float = Field(default=1.0, ge=0)
    reply_delay_min_seconds: float = Field(default=3.0, ge=0)
    reply_delay_max_seconds: float = Field(default=6.0, ge=0)
    fallback_delay_seconds: float = Field(default=2.0, ge=0)
    fallback_english: str = Field(
        default="now i'm busy talk to you later",
        description="Fallback reply for English conversations",
    )
    fallback_banglish: str = Field(
        default="Ami ekhon ektu busy. Poray kotha bolbo",
        description="Fallback reply for Banglish conversations",
    )
    banglish_keywords: str = Field(
        default=DEFAULT_ALTERNATE_KEYWORDS,
        description="Comma-separated keywords that mark a message as Banglish",
    )
    ai_persona_profiles: dict[str, PersonaProfile] = Field(
        default_factory=dict,
        description="Explicit persona id to profile mapping (JSON object)",
    )

    # --- Domain properties ---

    @cached_property
    def llm(self) -> LLMConfig:
        """LLM provider configuration."""
        keys = _split_csv(self.llm_api_keys.get_secret_value())
        return LLMConfig(
            provider=self.llm_provider,
            api_keys=tuple(SecretStr(key) for key in keys),
            openai_model=self.openai_model,
            anthropic_model=self.anthropic_model,
            timeout_seconds=self.llm_timeout_seconds,
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            version="0.1.0",
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        origins = _split_csv(self.cors_origins)
        if self.client_url:
            origins = (*origins, self.client_url)
        return ServerConfig(
            host=self.host,
            port=self.port,
            cors_origins=origins,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(url=self.database_url)

    @cached_property
    def presence(self) -> PresenceConfig:
        """Presence roster configuration."""
        return PresenceConfig(
            ai_ttl_seconds=self.ai_presence_ttl_seconds,
            sweep_interval_seconds=self.ai_presence_sweep_seconds,
            ai_socket_prefix=self.ai_socket_prefix,
        )

    @cached_property
    def responder(self) -> ResponderConfig:
        """AI responder configuration."""
        return ResponderConfig(
            read_receipt_delay_seconds=self.read_receipt_delay_seconds,
            reply_delay_min_seconds=self.reply_delay_min_seconds,
            reply_delay_max_seconds=max(
                self.reply_delay_min_seconds, self.reply_delay_max_seconds
            ),
            fallback_delay_seconds=self.fallback_delay_seconds,
            fallback_default=self.fallback_english,
            fallback_alternate=self.fallback_banglish,
            alternate_keywords=tuple(
                kw.lower() for kw in _split_csv(self.banglish_keywords)
            ),
            persona_profiles=self.ai_persona_profiles,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
