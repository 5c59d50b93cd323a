"""Generative-text client with a round-robin API key pool."""

from collections.abc import Callable, Sequence
from typing import Any

import structlog
from langchain_core.language_models import BaseChatModel

from app.core.exceptions import ApiKeyPoolEmptyError, ProviderError

logger = structlog.get_logger()

ModelFactory = Callable[[str], BaseChatModel]


class ApiKeyPool:
    """Hands out provider API keys in round-robin order."""

    def __init__(self, keys: Sequence[str]) -> None:
        self._keys = [key for key in keys if key]
        self._index = 0

    def __len__(self) -> int:
        return len(self._keys)

    def acquire(self) -> tuple[int, str]:
        """Return ``(index, key)`` for the next key and advance the rotation."""
        if not self._keys:
            raise ApiKeyPoolEmptyError()
        index = self._index
        self._index = (self._index + 1) % len(self._keys)
        return index, self._keys[index]


class GenerativeTextClient:
    """Single-prompt text generation over a rotating set of credentials."""

    def __init__(self, key_pool: ApiKeyPool, model_factory: ModelFactory) -> None:
        self._key_pool = key_pool
        self._model_factory = model_factory
        self._models: dict[str, BaseChatModel] = {}

    async def generate(self, prompt: str) -> str:
        """Generate text for ``prompt``.

        Raises:
            ApiKeyPoolEmptyError: No key is configured.
            ProviderError: The provider call failed.
        """
        index, key = self._key_pool.acquire()
        logger.debug("Calling text provider", key_index=index)
        try:
            model = self._model_for(key)
            response = await model.ainvoke(prompt)
        except Exception as exc:
            raise ProviderError(
                message=f"{type(exc).__name__}: {exc}",
                status=_status_of(exc),
                details=getattr(exc, "body", None),
            ) from exc
        return _content_text(response.content)

    def _model_for(self, key: str) -> BaseChatModel:
        model = self._models.get(key)
        if model is None:
            model = self._model_factory(key)
            self._models[key] = model
        return model


def _status_of(exc: Exception) -> int | None:
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    return status if isinstance(status, int) else None


def _content_text(content: Any) -> str:
    """Flatten message content that may be a list of content blocks."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content)
