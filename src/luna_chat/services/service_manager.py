"""Service lifecycle manager."""

from __future__ import annotations

from luna_chat.config import WeatherConfig
from luna_chat.log import get_logger
from luna_chat.services.weather import WeatherService

logger = get_logger(__name__)


class ServiceManager:
    """Manages startup and shutdown of all services."""

    def __init__(self, weather_config: WeatherConfig):
        self._weather = WeatherService(weather_config)

    def get_weather(self) -> WeatherService:
        return self._weather

    async def start_all(self) -> None:
        await self._weather.start()
        logger.info("all_services_started")

    async def stop_all(self) -> None:
        await self._weather.stop()
        logger.info("all_services_stopped")

    async def health_check_all(self) -> dict[str, bool]:
        return {
            self._weather.service_name: await self._weather.health_check(),
        }
