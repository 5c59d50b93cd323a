"""AI responder timing, fallback and persona configuration."""

from typing import Literal

from pydantic import BaseModel, Field

PersonaProfile = Literal["male", "female"]


class ResponderConfig(BaseModel, frozen=True):
    """AI responder settings."""

    read_receipt_delay_seconds: float
    reply_delay_min_seconds: float
    reply_delay_max_seconds: float
    fallback_delay_seconds: float
    fallback_default: str
    fallback_alternate: str
    alternate_keywords: tuple[str, ...]
    persona_profiles: dict[str, PersonaProfile] = Field(default_factory=dict)
