from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Union

from .models import HeaterState, Measurement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetDesiredTemperature:
    temperature: float


@dataclass(frozen=True)
class SetInsideTemperature:
    temperature: float


@dataclass(frozen=True)
class EnableController:
    enabled: bool


@dataclass(frozen=True)
class RegisterMeasurement:
    place: str
    measurement: Measurement


@dataclass(frozen=True)
class RegisterHeaterStateChange:
    heater_id: str
    state: HeaterState


Action = Union[
    SetDesiredTemperature,
    SetInsideTemperature,
    EnableController,
    RegisterMeasurement,
    RegisterHeaterStateChange,
]


class ActionQueue:
    """
    Bounded FIFO between the ingestor (single producer) and the executor
    (single consumer).

    send() waits while the queue is full instead of dropping, so a slow
    executor slows ingestion down.
    """

    def __init__(self, capacity: int = 10) -> None:
        self._capacity = capacity
        self._q: asyncio.Queue[Action] = asyncio.Queue(maxsize=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def qsize(self) -> int:
        return self._q.qsize()

    def full(self) -> bool:
        return self._q.full()

    async def send(self, action: Action) -> None:
        if self._q.full():
            logger.info("Action queue full (%d), waiting for executor", self._capacity)
        await self._q.put(action)

    async def receive(self) -> Action:
        return await self._q.get()
