"""OpenWeatherMap current-weather client."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from luna_chat.config import WeatherConfig, is_placeholder
from luna_chat.log import get_logger
from luna_chat.services.base import Service

logger = get_logger(__name__)

MSG_UNCONFIGURED = (
    "A funcionalidade de clima está temporariamente indisponível "
    "(problema de configuração da API Key)."
)
MSG_MISSING_CITY = "O nome da cidade não foi fornecido para a busca de clima."
MSG_AUTH = "Problema ao autenticar com o serviço de clima (API Key inválida)."
MSG_CONNECTION = "Não consegui me conectar ao serviço de clima agora, tente mais tarde."


def build_query(city_name: str, state_code: str | None = None, country_code: str | None = None) -> str:
    """Join city, optional state and optional country as OpenWeatherMap expects."""
    parts = [city_name.strip()]
    if state_code and state_code.strip():
        parts.append(state_code.strip())
    if country_code and country_code.strip():
        parts.append(country_code.strip())
    return ",".join(parts)


def _describe_location(city_name: str, state_code: str | None, country_code: str | None) -> str:
    location = city_name
    if state_code:
        location += f", {state_code}"
    if country_code:
        location += f", {country_code}"
    return location


class WeatherService(Service):
    """Looks up current weather for a city.

    ``get_weather`` never raises: every failure becomes an error mapping the
    model can read back to the user.
    """

    service_name = "weather"

    def __init__(self, config: WeatherConfig):
        self._config = config
        self._session: Optional[ClientSession] = None

    @property
    def configured(self) -> bool:
        return not is_placeholder(self._config.api_key)

    async def start(self) -> None:
        self._session = ClientSession(
            timeout=ClientTimeout(total=self._config.timeout),
            headers={"Accept": "application/json"},
        )
        if not self.configured:
            logger.warning("weather_api_key_missing", hint="Set OPENWEATHERMAP_API_KEY")
        logger.info("weather_service_started", configured=self.configured)

    async def stop(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None
            logger.info("weather_service_stopped")

    @property
    def started(self) -> bool:
        return self._session is not None and not self._session.closed

    async def _request(self, query: str) -> tuple[int, dict[str, Any]]:
        """GET the current weather and return (HTTP status, decoded JSON body)."""
        if self._session is None:
            raise RuntimeError("Weather service not started. Call start() first.")
        params = {
            "q": query,
            "appid": self._config.api_key,
            "units": self._config.units,
            "lang": self._config.lang,
        }
        async with self._session.get(self._config.base_url, params=params) as response:
            data = await response.json(content_type=None)
            return response.status, data or {}

    async def get_weather(
        self,
        city_name: str | None,
        state_code: str | None = None,
        country_code: str | None = None,
    ) -> dict[str, Any]:
        search_details = {
            "cityName": city_name,
            "stateCode": state_code,
            "countryCode": country_code,
        }

        if not self.configured:
            return {"error": True, "searchDetails": search_details, "message": MSG_UNCONFIGURED}

        if not city_name or not city_name.strip():
            return {"error": True, "searchDetails": search_details, "message": MSG_MISSING_CITY}

        query = build_query(city_name, state_code, country_code)
        logger.info("weather_lookup", query=query)

        try:
            status, data = await self._request(query)
        except (ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("weather_connection_error", query=query, error=str(e))
            return {
                "error": True,
                "searchDetails": search_details,
                "message": MSG_CONNECTION,
            }

        if 200 <= status < 300:
            try:
                return self._normalize(data, search_details)
            except (KeyError, IndexError, TypeError) as e:
                logger.error("weather_payload_invalid", query=query, error=str(e))
                return {
                    "error": True,
                    "searchDetails": search_details,
                    "message": "O serviço de clima respondeu com dados inesperados.",
                }

        provider_code = str(data.get("cod", status))
        provider_message = str(data.get("message", ""))[:200]
        logger.warning(
            "weather_api_error",
            status=status,
            code=provider_code,
            query=query,
            provider_message=provider_message,
        )
        if status == 401:
            message = MSG_AUTH
        elif status == 404:
            location = _describe_location(city_name, state_code, country_code)
            message = (
                f'Não consegui encontrar informações do clima para "{location}". '
                "Verifique se o nome está correto e completo."
            )
        else:
            message = f"Erro ao buscar o clima: {provider_message or status}"
        return {
            "error": True,
            "searchDetails": search_details,
            "code": provider_code,
            "message": message,
        }

    @staticmethod
    def _normalize(data: dict[str, Any], search_details: dict[str, Any]) -> dict[str, Any]:
        weather = data["weather"][0]
        description = weather.get("description", "")
        return {
            "cityName": data["name"],
            "country": data.get("sys", {}).get("country"),
            "description": description[:1].upper() + description[1:],
            "temperature": data["main"]["temp"],
            "feelsLike": data["main"].get("feels_like"),
            "humidity": data["main"].get("humidity"),
            "windSpeed": data.get("wind", {}).get("speed"),
            "icon": weather.get("icon"),
            "searchDetails": search_details,
        }
