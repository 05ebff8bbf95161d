"""Error taxonomy surfaced to HTTP callers.

Each error carries a user-facing ``message`` (Luna's voice), an optional
operator-facing ``details`` string and the HTTP status it maps to. Tool
failures are not part of this hierarchy: they are returned to the model as
data so the conversation can continue.
"""

from __future__ import annotations

from typing import Optional


class LunaError(Exception):
    status_code: int = 500
    default_message = (
        "Oops, tive um probleminha aqui do meu lado e não consegui responder. "
        "Tenta de novo mais tarde, amor? 😢"
    )

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class MissingInputError(LunaError):
    status_code = 400
    default_message = "Mensagem (prompt) é obrigatória"


class ContentBlockedError(LunaError):
    status_code = 400
    default_message = (
        "Sua mensagem foi bloqueada por segurança, amor. "
        "Tenta reformular, por favorzinho. 💖"
    )


class UpstreamBusyError(LunaError):
    """Rate limit or overload; the provider's status (429/503) is passed through."""

    status_code = 503
    default_message = (
        "Estou recebendo muitas mensagens agora, meu bem. "
        "Me dá um minutinho e tenta de novo? 🥺"
    )


class UpstreamAuthError(LunaError):
    status_code = 500
    default_message = (
        "Parece que há um problema com a minha conexão principal (API Key). "
        "Vou precisar que meu criador verifique isso! 😱"
    )


class UpstreamError(LunaError):
    status_code = 500
    default_message = (
        "Tive um problema de comunicação para buscar sua resposta, meu bem. 📶"
    )


class PersistenceError(LunaError):
    status_code = 500
    default_message = "Erro ao salvar a conversa."


class ToolRoundLimitError(LunaError):
    status_code = 502
    default_message = (
        "Me enrolei um pouquinho tentando buscar essas informações, amor. "
        "Pode perguntar de novo? 🤔"
    )


class RequestTimeoutError(LunaError):
    status_code = 504
    default_message = "Demorei demais para pensar na resposta, vida. Tenta de novo? ⏳"
