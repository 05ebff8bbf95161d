"""AI client abstraction over the Anthropic Messages API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import anthropic

from luna_chat.config import AnthropicConfig
from luna_chat.errors import (
    ContentBlockedError,
    LunaError,
    UpstreamAuthError,
    UpstreamBusyError,
    UpstreamError,
)
from luna_chat.log import get_logger

logger = get_logger(__name__)

# Provider statuses that mean "busy, try later" and are passed through to the caller.
_BUSY_STATUSES = {429: 429, 503: 503, 529: 503}


@dataclass(frozen=True)
class ToolCall:
    """A function call requested by the model."""

    id: str
    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class AIResponse:
    """Unified, validated response from the AI backend."""

    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    content: list[dict[str, Any]] = field(default_factory=list)  # assistant blocks to echo back
    stop_reason: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    raw: Any = None


class AIClient(ABC):
    """Abstract base class for AI backends."""

    model_name: str = ""

    @abstractmethod
    async def chat(
        self,
        system: str,
        messages: list[dict[str, Any]],
        model: str = "",
        max_tokens: int = 2048,
        temperature: float = 0.9,
        tools: list[dict[str, Any]] | None = None,
    ) -> AIResponse:
        """Send a conversation to the AI and return a response.

        Raises a ``LunaError`` subclass for provider failures.
        """
        ...

    async def close(self) -> None:
        return None


def parse_message(message: Any) -> AIResponse:
    """Convert an Anthropic ``Message`` into an ``AIResponse``."""
    texts: list[str] = []
    tool_calls: list[ToolCall] = []
    content: list[dict[str, Any]] = []

    for block in message.content:
        if block.type == "text":
            texts.append(block.text)
            content.append({"type": "text", "text": block.text})
        elif block.type == "tool_use":
            args = block.input if isinstance(block.input, dict) else {}
            tool_calls.append(ToolCall(id=block.id, name=block.name, args=args))
            content.append(
                {"type": "tool_use", "id": block.id, "name": block.name, "input": args}
            )

    usage = getattr(message, "usage", None)
    return AIResponse(
        text="\n".join(texts),
        tool_calls=tool_calls,
        content=content,
        stop_reason=message.stop_reason,
        input_tokens=getattr(usage, "input_tokens", 0) or 0,
        output_tokens=getattr(usage, "output_tokens", 0) or 0,
        raw=message,
    )


def translate_api_error(error: anthropic.APIError) -> LunaError:
    """Map Anthropic SDK exceptions onto the HTTP-facing error taxonomy."""
    if isinstance(error, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        logger.error("upstream_auth_error", error=str(error))
        return UpstreamAuthError(
            details="Verifique a configuração da ANTHROPIC_API_KEY e se ela é válida."
        )
    if isinstance(error, anthropic.APIStatusError):
        status = error.status_code
        if status in _BUSY_STATUSES:
            logger.warning("upstream_busy", status=status)
            return UpstreamBusyError(details=f"Provider returned {status}", status_code=_BUSY_STATUSES[status])
        logger.error("upstream_status_error", status=status, error=str(error))
        return UpstreamError(details=f"Provider returned {status}")
    if isinstance(error, anthropic.APIConnectionError):
        logger.error("upstream_connection_error", error=str(error))
        return UpstreamError(details="Falha de conexão com o provedor de IA.")
    logger.error("upstream_error", error=str(error))
    return UpstreamError(details=type(error).__name__)


class AnthropicClient(AIClient):
    """Anthropic API backend using the official SDK."""

    def __init__(self, config: AnthropicConfig, model: str = ""):
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
        )
        self.model_name = model

    async def chat(
        self,
        system: str,
        messages: list[dict[str, Any]],
        model: str = "",
        max_tokens: int = 2048,
        temperature: float = 0.9,
        tools: list[dict[str, Any]] | None = None,
    ) -> AIResponse:
        kwargs: dict[str, Any] = {
            "model": model or self.model_name,
            "max_tokens": max_tokens,
            "system": system,
            "messages": messages,
            "temperature": temperature,
        }
        if tools:
            kwargs["tools"] = tools

        logger.debug("api_request", model=kwargs["model"], message_count=len(messages))
        try:
            message = await self._client.messages.create(**kwargs)
        except anthropic.APIError as e:
            raise translate_api_error(e) from e

        response = parse_message(message)
        logger.debug(
            "api_response",
            model=kwargs["model"],
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            stop_reason=response.stop_reason,
            tool_calls=len(response.tool_calls),
        )
        if response.stop_reason == "refusal":
            logger.warning("content_blocked", stop_reason=response.stop_reason)
            raise ContentBlockedError(details="Conteúdo bloqueado pelo filtro de segurança do provedor.")
        return response

    async def close(self) -> None:
        await self._client.close()
