from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class HeaterState(Enum):
    """Relay state; the value is the token used on the bus."""

    OFF = "off"
    ON = "on"

    @property
    def as_int(self) -> int:
        return 1 if self is HeaterState.ON else 0

    @classmethod
    def from_int(cls, value: int) -> HeaterState:
        return cls.ON if value else cls.OFF


@dataclass(frozen=True)
class Heater:
    id: str
    name: str

    @property
    def command_topic(self) -> str:
        return f"shellies/shelly1-{self.id}/relay/0/command"


@dataclass(frozen=True)
class Measurement:
    temperature: float
    humidity: float


@dataclass(frozen=True)
class TemperatureRecord:
    timestamp: datetime
    location: str
    temperature: int
    humidity: int


@dataclass(frozen=True)
class HeaterHistoryRecord:
    timestamp: datetime
    shelly_id: str
    is_active: bool
