"""Chat handler: one user turn from prompt to persisted reply."""

from __future__ import annotations

import asyncio
from typing import Any

import aiosqlite

from luna_chat.ai.client import AIClient
from luna_chat.ai.conversation import build_messages, parse_client_history
from luna_chat.ai.persona import DEFAULT_PERSONA
from luna_chat.ai.tool_runner import run_tool_loop
from luna_chat.ai.tools.registry import ToolRegistry
from luna_chat.config import AIConfig
from luna_chat.errors import MissingInputError, PersistenceError, RequestTimeoutError
from luna_chat.log import get_logger
from luna_chat.storage.models import ChatMessage, utcnow
from luna_chat.storage.session_repo import SessionRepository
from luna_chat.storage.settings_repo import SettingsRepository

logger = get_logger(__name__)


class ChatHandler:
    """Handles the full flow: prompt -> session history -> model -> tools -> persisted reply."""

    def __init__(
        self,
        ai_client: AIClient,
        tool_registry: ToolRegistry,
        session_repo: SessionRepository,
        settings_repo: SettingsRepository,
        ai_config: AIConfig,
        request_timeout: float | None = None,
    ):
        self._ai_client = ai_client
        self._tool_registry = tool_registry
        self._session_repo = session_repo
        self._settings_repo = settings_repo
        self._ai_config = ai_config
        self._request_timeout = request_timeout

    async def persona(self) -> str:
        """Admin-stored persona, else the configured one, else the built-in Luna text."""
        stored = await self._settings_repo.get_persona()
        return stored or self._ai_config.system_prompt or DEFAULT_PERSONA

    async def generate(
        self,
        prompt: str | None,
        session_id: str | None,
        history: list[dict[str, Any]] | None = None,
        user_ip: str = "",
    ) -> str:
        """Answer *prompt* within *session_id* and persist the exchange.

        Stored messages are the conversation context; *history* from the client
        is only used when nothing is stored yet for the session.
        """
        if not prompt or not prompt.strip():
            raise MissingInputError()
        if not session_id or not session_id.strip() or session_id == "undefined":
            raise MissingInputError("sessionId é obrigatório")

        user_message = ChatMessage(sender="user", text=prompt)

        try:
            session = await self._session_repo.get_session(session_id)
            system = await self.persona()
        except (aiosqlite.Error, ValueError) as e:
            logger.error("session_load_failed", session_id=session_id, error=str(e))
            raise PersistenceError("Erro ao carregar o histórico da conversa.") from e

        past = session.messages if session and session.messages else parse_client_history(history)
        messages = build_messages(past, prompt)
        logger.info("turn_started", session_id=session_id, history_length=len(past))

        loop = run_tool_loop(
            ai_client=self._ai_client,
            tool_registry=self._tool_registry,
            messages=messages,
            system=system,
            model=self._ai_config.model,
            max_tokens=self._ai_config.max_tokens,
            temperature=self._ai_config.temperature,
            max_rounds=self._ai_config.max_tool_rounds,
        )
        try:
            result = await asyncio.wait_for(loop, timeout=self._request_timeout)
        except asyncio.TimeoutError as e:
            logger.error("turn_timeout", session_id=session_id, timeout=self._request_timeout)
            raise RequestTimeoutError(details=f"Timed out after {self._request_timeout}s") from e

        ai_message = ChatMessage(sender="ai", text=result.text, timestamp=utcnow())
        try:
            await self._session_repo.save_turn(
                session_id,
                user_message,
                ai_message,
                user_ip=user_ip,
                bot_id=self._ai_config.bot_id,
            )
        except aiosqlite.Error as e:
            logger.error("session_save_failed", session_id=session_id, error=str(e))
            raise PersistenceError() from e

        logger.info(
            "turn_completed",
            session_id=session_id,
            tool_rounds=result.rounds,
            reply_preview=result.text[:100],
        )
        return result.text
