"""Tool registry: declares tools to the model and dispatches its calls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from luna_chat.ai.client import ToolCall
from luna_chat.ai.tools.base import Tool, ToolResult, error_response
from luna_chat.log import get_logger

if TYPE_CHECKING:
    from luna_chat.services.service_manager import ServiceManager

logger = get_logger(__name__)


class ToolRegistry:
    """Registry of all available tools."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool
        logger.info("tool_registered", tool_name=tool.name)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def all_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def api_definitions(self) -> list[dict[str, Any]]:
        return [t.to_api_dict() for t in self._tools.values()]

    async def dispatch(self, call: ToolCall) -> ToolResult:
        """Run one tool call. Never raises; failures come back as error results."""
        tool = self.get(call.name)
        if tool is None:
            logger.error("tool_not_found", tool=call.name)
            return ToolResult(
                id=call.id,
                name=call.name,
                response=error_response(f"Função {call.name} não implementada no backend."),
            )

        logger.info("tool_execute", tool=call.name, args=call.args)
        try:
            response = await tool.execute(**call.args)
        except Exception as e:
            logger.error("tool_execution_error", tool=call.name, error=str(e))
            response = error_response(f"Erro ao executar {call.name}: {e}")
        return ToolResult(id=call.id, name=call.name, response=response)

    def discover_and_register(self, service_manager: ServiceManager, timezone: str) -> None:
        """Import and register all built-in tools."""
        from luna_chat.ai.tools.datetime_tool import DateTimeTool
        from luna_chat.ai.tools.weather import WeatherTool

        self.register(DateTimeTool(timezone))
        self.register(WeatherTool(service_manager.get_weather()))
