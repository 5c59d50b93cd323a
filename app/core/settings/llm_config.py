"""LLM provider configuration."""

from typing import Literal

from pydantic import BaseModel, SecretStr


class LLMConfig(BaseModel, frozen=True):
    """LLM provider settings."""

    provider: Literal["openai", "anthropic"]
    api_keys: tuple[SecretStr, ...]
    openai_model: str
    anthropic_model: str
    timeout_seconds: float

    @property
    def model_name(self) -> str:
        """Model name for the active provider."""
        if self.provider == "anthropic":
            return self.anthropic_model
        return self.openai_model
