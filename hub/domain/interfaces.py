from __future__ import annotations
from typing import Optional, Protocol, runtime_checkable
from ..messaging.events import TransportEvent
from .models import HeaterHistoryRecord, HeaterState, TemperatureRecord


@runtime_checkable
class Actuator(Protocol):
    async def publish(self, topic: str, payload: str, retained: bool, qos: int) -> None:
        ...


@runtime_checkable
class Repository(Protocol):
    async def init(self) -> None:
        ...

    async def insert_reading(self, location: str, temperature: int, humidity: int) -> None:
        ...

    async def insert_heater_state(self, heater_id: str, state: HeaterState) -> None:
        ...

    async def get_history_last_24h(self) -> list[TemperatureRecord]:
        ...

    async def get_heater_history_last_24h(self) -> list[HeaterHistoryRecord]:
        ...


@runtime_checkable
class MessageSource(Protocol):
    def poll(self, timeout: Optional[float] = None) -> Optional[TransportEvent]:
        """Blocking; raises TransportError when the connection is lost."""
        ...
