"""Iterative tool execution loop for model tool-use responses."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from luna_chat.ai.client import AIClient, AIResponse
from luna_chat.ai.conversation import tool_results_message
from luna_chat.ai.tools.base import ToolResult
from luna_chat.ai.tools.registry import ToolRegistry
from luna_chat.errors import ToolRoundLimitError
from luna_chat.log import get_logger

logger = get_logger(__name__)

MAX_TOOL_ROUNDS = 5


@dataclass
class ToolLoopResult:
    text: str
    rounds: int = 0
    tool_results: list[ToolResult] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0


async def dispatch_round(registry: ToolRegistry, response: AIResponse) -> list[ToolResult]:
    """Run every tool call of one model response concurrently, once each."""
    return list(await asyncio.gather(*(registry.dispatch(call) for call in response.tool_calls)))


async def run_tool_loop(
    ai_client: AIClient,
    tool_registry: ToolRegistry,
    messages: list[dict[str, Any]],
    system: str,
    model: str,
    max_tokens: int,
    temperature: float,
    max_rounds: int = MAX_TOOL_ROUNDS,
) -> ToolLoopResult:
    """Call the model until it answers without requesting tools.

    *messages* must end with the user's prompt and is extended in place with
    the assistant tool requests and the batched tool results of each round.
    Raises ``ToolRoundLimitError`` if the model still wants tools after
    *max_rounds* rounds.
    """
    tool_defs = tool_registry.api_definitions()
    result = ToolLoopResult(text="")

    while True:
        response = await ai_client.chat(
            system=system,
            messages=messages,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            tools=tool_defs or None,
        )
        result.input_tokens += response.input_tokens
        result.output_tokens += response.output_tokens

        if not response.tool_calls:
            result.text = response.text
            logger.info(
                "tool_loop_done",
                rounds=result.rounds,
                input_tokens=result.input_tokens,
                output_tokens=result.output_tokens,
            )
            return result

        if result.rounds >= max_rounds:
            logger.error("tool_round_limit", max_rounds=max_rounds)
            raise ToolRoundLimitError(details=f"Model still requested tools after {max_rounds} rounds")

        logger.info(
            "tool_round",
            round=result.rounds + 1,
            tools=[c.name for c in response.tool_calls],
        )
        messages.append({"role": "assistant", "content": response.content})
        round_results = await dispatch_round(tool_registry, response)
        result.tool_results.extend(round_results)
        messages.append(tool_results_message(round_results))
        result.rounds += 1
