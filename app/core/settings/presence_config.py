"""Presence roster and AI presence configuration."""

from pydantic import BaseModel


class PresenceConfig(BaseModel, frozen=True):
    """Presence settings."""

    ai_ttl_seconds: int
    sweep_interval_seconds: int
    ai_socket_prefix: str

    @property
    def ai_ttl_ms(self) -> int:
        """AI presence lifetime in epoch milliseconds."""
        return self.ai_ttl_seconds * 1000
