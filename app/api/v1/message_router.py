"""Message history API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.dependencies import get_message_service
from app.schemas.message_schema import (
    CreateMessageRequest,
    MarkReadRequest,
    MarkReadResponse,
    MessageDocument,
    MessageListResponse,
    UpdateMessageRequest,
)
from app.schemas.response_schema import (
    NOT_FOUND_RESPONSE,
    ApiResponse,
    success_response,
)
from app.services.message_service import MessageService

router = APIRouter(prefix="/api/messages", tags=["messages"])

MessageServiceDep = Annotated[MessageService, Depends(get_message_service)]


@router.get("/{match_id}", response_model=ApiResponse[MessageListResponse])
async def list_messages(match_id: str, service: MessageServiceDep) -> dict:
    """List a match's messages, oldest first."""
    result = await service.list_messages(match_id)
    return success_response(result)


@router.post(
    "",
    response_model=ApiResponse[MessageDocument],
    status_code=status.HTTP_201_CREATED,
)
async def create_message(
    request: CreateMessageRequest, service: MessageServiceDep
) -> dict:
    """Persist a message sent by a user."""
    result = await service.create_message(request)
    return success_response(result, status=201, message="Created")


@router.post("/{match_id}/read", response_model=ApiResponse[MarkReadResponse])
async def mark_read(
    match_id: str, request: MarkReadRequest, service: MessageServiceDep
) -> dict:
    """Mark the match's messages addressed to the reader as read."""
    result = await service.mark_read(match_id, request.user_id)
    return success_response(result)


@router.put(
    "/{message_id}",
    response_model=ApiResponse[MessageDocument],
    responses=NOT_FOUND_RESPONSE,
)
async def update_message(
    message_id: str, request: UpdateMessageRequest, service: MessageServiceDep
) -> dict:
    """Update fields of a stored message (read state, call status, ...)."""
    result = await service.update_message(message_id, request)
    return success_response(result)


@router.delete(
    "/{message_id}",
    response_model=ApiResponse[MessageDocument],
    responses=NOT_FOUND_RESPONSE,
)
async def delete_message(message_id: str, service: MessageServiceDep) -> dict:
    """Soft-delete a message."""
    result = await service.delete_message(message_id)
    return success_response(result, message="Deleted")
