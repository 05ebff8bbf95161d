"""
Pytest configuration and shared fixtures.
Provides a temp SQLite database, scripted AI clients and a fake weather backend.
"""
import copy
from typing import Any, Dict, List, Optional, Tuple

import pytest

from luna_chat.ai.client import AIClient, AIResponse, ToolCall
from luna_chat.ai.tools.registry import ToolRegistry
from luna_chat.config import (
    AIConfig,
    AnthropicConfig,
    AppConfig,
    ServerConfig,
    StorageConfig,
    WeatherConfig,
)
from luna_chat.services.weather import WeatherService
from luna_chat.storage.database import Database
from luna_chat.storage.session_repo import SessionRepository
from luna_chat.storage.settings_repo import SettingsRepository


# ===========================
# Fakes
# ===========================

def text_response(text: str) -> AIResponse:
    return AIResponse(text=text, content=[{"type": "text", "text": text}], stop_reason="end_turn")


def tool_response(*calls: Tuple[str, str, Dict[str, Any]]) -> AIResponse:
    """Build a response requesting tools; each call is (id, name, args)."""
    tool_calls = [ToolCall(id=cid, name=name, args=args) for cid, name, args in calls]
    return AIResponse(
        text="",
        tool_calls=tool_calls,
        content=[
            {"type": "tool_use", "id": c.id, "name": c.name, "input": c.args}
            for c in tool_calls
        ],
        stop_reason="tool_use",
    )


class ScriptedAIClient(AIClient):
    """Returns queued responses in order and records a snapshot of every request."""

    def __init__(self, responses: List[Any]):
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def chat(self, system, messages, model="", max_tokens=2048, temperature=0.9, tools=None):
        self.calls.append(
            {
                "system": system,
                "messages": copy.deepcopy(messages),
                "tools": tools,
            }
        )
        if not self._responses:
            raise AssertionError("ScriptedAIClient ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


class FakeWeatherService(WeatherService):
    """WeatherService whose HTTP request is replaced by a canned (status, body) or exception."""

    def __init__(self, reply: Any = None, api_key: Optional[str] = "test-weather-key"):
        super().__init__(WeatherConfig(api_key=api_key))
        self.reply = reply
        self.queries: List[str] = []

    async def _request(self, query: str):
        self.queries.append(query)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


OPENWEATHER_PARIS = {
    "name": "Paris",
    "sys": {"country": "FR"},
    "weather": [{"description": "céu limpo", "icon": "01d"}],
    "main": {"temp": 21.4, "feels_like": 20.9, "humidity": 48},
    "wind": {"speed": 3.1},
    "cod": 200,
}


# ===========================
# Config Fixtures
# ===========================

@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(
        anthropic=AnthropicConfig(api_key="test-anthropic-key"),
        ai=AIConfig(max_tool_rounds=3),
        weather=WeatherConfig(api_key="test-weather-key"),
        storage=StorageConfig(db_path=str(tmp_path / "luna_test.db")),
        server=ServerConfig(admin_secret="s3cret", request_timeout=5),
    )


# ===========================
# Database Fixtures
# ===========================

@pytest.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "repo_test.db"))
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def session_repo(db) -> SessionRepository:
    return SessionRepository(db)


@pytest.fixture
def settings_repo(db) -> SettingsRepository:
    return SettingsRepository(db)


# ===========================
# Tool Fixtures
# ===========================

@pytest.fixture
def weather_service() -> FakeWeatherService:
    return FakeWeatherService(reply=(200, OPENWEATHER_PARIS))


@pytest.fixture
def tool_registry(weather_service) -> ToolRegistry:
    from luna_chat.ai.tools.datetime_tool import DateTimeTool
    from luna_chat.ai.tools.weather import WeatherTool

    registry = ToolRegistry()
    registry.register(DateTimeTool())
    registry.register(WeatherTool(weather_service))
    return registry
