"""Unified API response schemas."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ErrorBody(BaseModel):
    """Error code and human-readable message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope produced by the application exception handler."""

    success: bool = False
    error: ErrorBody


class ApiResponse(BaseModel, Generic[T]):
    """Success response with status, message, and data."""

    status: int = 200
    message: str = "Success"
    data: T | None = None


def success_response(data: T, status: int = 200, message: str = "Success") -> dict:
    """Build a success response dict for returning from endpoints."""
    return {"status": status, "message": message, "data": data}


NOT_FOUND_RESPONSE: dict[int | str, dict] = {404: {"model": ErrorResponse}}
