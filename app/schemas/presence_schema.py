"""Presence roster schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PresenceEntry(BaseModel):
    """One online participant as pushed in ``get-users``."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    user_id: str
    socket_id: str


class PresenceResponse(BaseModel):
    """Presence snapshot returned by the HTTP API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    users: list[PresenceEntry]
    ai_online: list[str]
