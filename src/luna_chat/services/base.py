"""Lifecycle contract for clients that hold an outbound HTTP session."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Service(ABC):
    """An external-API client opened at startup and closed on shutdown.

    Usable as ``async with`` so one-off callers get the same open/close pairing
    the app lifespan gives long-lived ones.
    """

    service_name: str = "service"

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @property
    def started(self) -> bool:
        return False

    async def health_check(self) -> bool:
        """Healthy while the client session is open."""
        return self.started

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
