"""Application exception classes and handlers."""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_payload(self) -> dict[str, str]:
        """Error body shared by HTTP responses and socket ``error`` events."""
        return {"code": self.code, "message": self.message}


# --- Bad Request (400) ---


class MissingConversationError(AppException):
    """An AI-directed message arrived without a conversation id."""

    def __init__(self) -> None:
        super().__init__(
            message="matchId is required for messages sent to an AI persona",
            code="MISSING_CONVERSATION_ID",
            status_code=400,
        )


# --- Not Found (404) ---


class MessageNotFoundError(AppException):
    """Message not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Message not found",
            code="MESSAGE_NOT_FOUND",
            status_code=404,
        )


# --- Upstream provider (502/503) ---


class ProviderError(AppException):
    """The generative-text provider failed or returned unusable output."""

    def __init__(
        self,
        message: str = "Text generation failed",
        status: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message=message, code="PROVIDER_ERROR", status_code=502)
        self.status = status
        self.details = details


class ApiKeyPoolEmptyError(ProviderError):
    """No provider API key is configured."""

    def __init__(self) -> None:
        super().__init__(message="No provider API keys configured")
        self.code = "API_KEY_POOL_EMPTY"
        self.status_code = 503


# --- Exception Handlers ---


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.to_payload(),
        },
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation errors in the application error shape."""
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ],
            },
        },
    )
