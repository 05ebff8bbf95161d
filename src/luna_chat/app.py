"""Application orchestrator - wires all components and manages lifecycle."""

from __future__ import annotations

from luna_chat.ai.client import AIClient, AnthropicClient
from luna_chat.ai.handler import ChatHandler
from luna_chat.ai.tools.registry import ToolRegistry
from luna_chat.config import AppConfig
from luna_chat.log import get_logger
from luna_chat.services.service_manager import ServiceManager
from luna_chat.storage.database import Database
from luna_chat.storage.session_repo import SessionRepository
from luna_chat.storage.settings_repo import SettingsRepository

logger = get_logger(__name__)


class LunaApp:
    """Top-level application orchestrator.

    Everything a request needs is constructed here once and handed to the
    HTTP layer; nothing lives in module globals.
    """

    def __init__(self, config: AppConfig, ai_client: AIClient | None = None):
        self.config = config
        self.db = Database(config.storage.db_path)
        self.session_repo = SessionRepository(self.db)
        self.settings_repo = SettingsRepository(self.db)
        self.service_manager = ServiceManager(config.weather)
        self.tool_registry = ToolRegistry()
        self.ai_client = ai_client or AnthropicClient(config.anthropic, model=config.ai.model)
        self.chat_handler = ChatHandler(
            ai_client=self.ai_client,
            tool_registry=self.tool_registry,
            session_repo=self.session_repo,
            settings_repo=self.settings_repo,
            ai_config=config.ai,
            request_timeout=config.server.request_timeout,
        )

    async def start(self) -> None:
        """Initialize and start all components."""
        # 1. Database
        await self.db.initialize()

        # 2. Services
        await self.service_manager.start_all()

        # 3. Tools
        self.tool_registry.discover_and_register(self.service_manager, self.config.ai.timezone)

        logger.info(
            "luna_chat_started",
            model=self.config.ai.model,
            tools=[t.name for t in self.tool_registry.all_tools()],
        )

    async def stop(self) -> None:
        """Gracefully shut down all components."""
        await self.service_manager.stop_all()
        try:
            await self.ai_client.close()
        except Exception as e:
            logger.error("ai_client_close_error", error=str(e))
        await self.db.close()
        logger.info("luna_chat_stopped")

    async def health(self) -> dict[str, bool]:
        checks = await self.service_manager.health_check_all()
        checks["database"] = await self.db.health_check()
        return checks
