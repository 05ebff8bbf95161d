"""Weather lookup tool backed by the OpenWeatherMap service."""

from __future__ import annotations

from typing import Any

from luna_chat.ai.tools.base import Tool
from luna_chat.services.weather import WeatherService


class WeatherTool(Tool):
    """Lets the model fetch current weather for a named city.

    State and country codes are optional but disambiguate small or common
    city names ("Springfield", "Centro").
    """

    def __init__(self, weather_service: WeatherService):
        self._weather = weather_service

    @property
    def name(self) -> str:
        return "get_weather_for_city"

    @property
    def description(self) -> str:
        return (
            "Obtém informações sobre o clima para uma cidade específica. Use esta função quando "
            "o usuário perguntar explicitamente como está o tempo, o clima, a temperatura, ou algo "
            "similar em uma cidade nomeada. Tente extrair também o código do estado (ex: 'SP', 'RJ') "
            "e/ou o código do país (ex: 'BR', 'US') se o usuário fornecer."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "cityName": {
                    "type": "string",
                    "description": "O nome da cidade. Exemplos: 'Paris', 'Salvador', 'Ouro Preto'.",
                },
                "stateCode": {
                    "type": "string",
                    "description": "Opcional. Código do estado ou província (ex: 'MG', 'CA').",
                },
                "countryCode": {
                    "type": "string",
                    "description": "Opcional. Código do país ISO 3166-1 alpha-2 (ex: 'BR', 'FR').",
                },
            },
            "required": ["cityName"],
        }

    async def execute(self, **kwargs: Any) -> dict[str, Any]:
        return await self._weather.get_weather(
            kwargs.get("cityName"),
            state_code=kwargs.get("stateCode"),
            country_code=kwargs.get("countryCode"),
        )
