"""
Tests for the Anthropic client boundary: response parsing and error translation.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import anthropic
import httpx
import pytest

from luna_chat.ai.client import AnthropicClient, parse_message, translate_api_error
from luna_chat.config import AnthropicConfig
from luna_chat.errors import (
    ContentBlockedError,
    UpstreamAuthError,
    UpstreamBusyError,
    UpstreamError,
)

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _message(*blocks, stop_reason="end_turn"):
    return SimpleNamespace(
        content=list(blocks),
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=12, output_tokens=7),
    )


def _text(text):
    return SimpleNamespace(type="text", text=text)


def _tool_use(block_id, name, args):
    return SimpleNamespace(type="tool_use", id=block_id, name=name, input=args)


def _status_error(cls, status):
    return cls("failure", response=httpx.Response(status, request=REQUEST), body=None)


def test_parse_text_only():
    response = parse_message(_message(_text("Olá"), _text("amor")))

    assert response.text == "Olá\namor"
    assert response.tool_calls == []
    assert response.input_tokens == 12
    assert response.output_tokens == 7


def test_parse_tool_calls_keeps_assistant_blocks():
    response = parse_message(
        _message(
            _text("Vou ver o clima"),
            _tool_use("tu_1", "get_weather_for_city", {"cityName": "Paris"}),
            stop_reason="tool_use",
        )
    )

    assert [(c.id, c.name, c.args) for c in response.tool_calls] == [
        ("tu_1", "get_weather_for_city", {"cityName": "Paris"})
    ]
    assert response.content[1] == {
        "type": "tool_use",
        "id": "tu_1",
        "name": "get_weather_for_city",
        "input": {"cityName": "Paris"},
    }


@pytest.mark.parametrize(
    "error,expected_type,expected_status",
    [
        (_status_error(anthropic.RateLimitError, 429), UpstreamBusyError, 429),
        (_status_error(anthropic.APIStatusError, 529), UpstreamBusyError, 503),
        (_status_error(anthropic.InternalServerError, 503), UpstreamBusyError, 503),
        (_status_error(anthropic.AuthenticationError, 401), UpstreamAuthError, 500),
        (_status_error(anthropic.PermissionDeniedError, 403), UpstreamAuthError, 500),
        (_status_error(anthropic.BadRequestError, 400), UpstreamError, 500),
        (anthropic.APIConnectionError(request=REQUEST), UpstreamError, 500),
    ],
)
def test_translate_api_error(error, expected_type, expected_status):
    translated = translate_api_error(error)

    assert type(translated) is expected_type
    assert translated.status_code == expected_status
    assert "error" in translated.to_dict()


@pytest.mark.asyncio
async def test_refusal_raises_content_blocked():
    client = AnthropicClient(AnthropicConfig(api_key="test"), model="test-model")
    client._client = SimpleNamespace(
        messages=SimpleNamespace(create=AsyncMock(return_value=_message(stop_reason="refusal")))
    )

    with pytest.raises(ContentBlockedError) as exc_info:
        await client.chat(system="s", messages=[{"role": "user", "content": "x"}])

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_chat_sends_tools_and_model():
    create = AsyncMock(return_value=_message(_text("oi")))
    client = AnthropicClient(AnthropicConfig(api_key="test"), model="default-model")
    client._client = SimpleNamespace(messages=SimpleNamespace(create=create))

    tools = [{"name": "t", "description": "d", "input_schema": {"type": "object"}}]
    response = await client.chat(system="persona", messages=[], tools=tools)

    assert response.text == "oi"
    kwargs = create.await_args.kwargs
    assert kwargs["model"] == "default-model"
    assert kwargs["system"] == "persona"
    assert kwargs["tools"] == tools


@pytest.mark.asyncio
async def test_sdk_errors_are_translated_on_chat():
    create = AsyncMock(side_effect=_status_error(anthropic.RateLimitError, 429))
    client = AnthropicClient(AnthropicConfig(api_key="test"))
    client._client = SimpleNamespace(messages=SimpleNamespace(create=create))

    with pytest.raises(UpstreamBusyError) as exc_info:
        await client.chat(system="s", messages=[])

    assert exc_info.value.status_code == 429
