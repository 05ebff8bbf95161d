"""Convert stored chat history to Anthropic API message format."""

from __future__ import annotations

import json
from typing import Any

from luna_chat.ai.tools.base import ToolResult
from luna_chat.storage.models import ChatMessage

ROLE_BY_SENDER = {"user": "user", "ai": "assistant"}


def build_messages(history: list[ChatMessage], prompt: str | None = None) -> list[dict[str, Any]]:
    """Map stored messages to API messages, in order, optionally ending with *prompt*.

    ``user`` becomes the user role and ``ai`` the assistant role. Messages with
    blank text are skipped since the API rejects empty content.
    """
    messages = [
        {"role": ROLE_BY_SENDER[m.sender], "content": m.text}
        for m in history
        if m.text and m.text.strip()
    ]
    if prompt is not None:
        messages.append({"role": "user", "content": prompt})
    return messages


def parse_client_history(raw: list[dict[str, Any]] | None) -> list[ChatMessage]:
    """Accept ``[{sender, text}]`` from the HTTP client; unknown senders count as ai.

    Client timestamps are not trusted, messages are stamped on arrival.
    """
    if not raw:
        return []
    return [
        ChatMessage(sender="user" if item.get("sender") == "user" else "ai", text=str(item.get("text", "")))
        for item in raw
    ]


def tool_results_message(results: list[ToolResult]) -> dict[str, Any]:
    """Batch every result of one round into a single user message."""
    return {
        "role": "user",
        "content": [
            {
                "type": "tool_result",
                "tool_use_id": r.id,
                "content": json.dumps(r.response, ensure_ascii=False),
                "is_error": r.is_error,
            }
            for r in results
        ],
    }
