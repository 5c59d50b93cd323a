"""Presence snapshot API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.dependencies import get_broadcaster
from app.schemas.presence_schema import PresenceResponse
from app.schemas.response_schema import ApiResponse, success_response
from app.services.presence_service import PresenceBroadcaster

router = APIRouter(prefix="/api/presence", tags=["presence"])

BroadcasterDep = Annotated[PresenceBroadcaster, Depends(get_broadcaster)]


@router.get("", response_model=ApiResponse[PresenceResponse])
async def get_presence(broadcaster: BroadcasterDep) -> dict:
    """Return the roster currently pushed to clients as ``get-users``."""
    return success_response(
        PresenceResponse(
            users=broadcaster.entries(),
            ai_online=broadcaster.ai_online(),
        )
    )
