"""Current date/time tool, rendered in Brazilian Portuguese."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from luna_chat.ai.tools.base import Tool

DEFAULT_TIMEZONE = "America/Sao_Paulo"

_WEEKDAYS = (
    "segunda-feira",
    "terça-feira",
    "quarta-feira",
    "quinta-feira",
    "sexta-feira",
    "sábado",
    "domingo",
)
_MONTHS = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)


def format_pt_br(moment: datetime, seconds: bool = True) -> str:
    """e.g. ``sexta-feira, 26 de abril de 2024 15:30:00``"""
    time_fmt = "%H:%M:%S" if seconds else "%H:%M"
    return (
        f"{_WEEKDAYS[moment.weekday()]}, {moment.day:02d} de "
        f"{_MONTHS[moment.month - 1]} de {moment.year} {moment.strftime(time_fmt)}"
    )


def now_in(timezone: str = DEFAULT_TIMEZONE) -> datetime:
    return datetime.now(ZoneInfo(timezone))


class DateTimeTool(Tool):
    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self._timezone = timezone

    @property
    def name(self) -> str:
        return "get_current_sao_paulo_datetime"

    @property
    def description(self) -> str:
        return (
            "Obtém a data e hora atuais formatadas (fuso de São Paulo/Brasília), que é nosso "
            "fuso de referência para conversas gerais sobre 'que horas são' ou 'que dia é hoje', "
            "a menos que um local específico seja perguntado."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}}

    async def execute(self, **kwargs: Any) -> dict[str, Any]:
        return {"currentDateTime": format_pt_br(now_in(self._timezone))}
