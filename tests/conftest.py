"""
Shared fixtures for the hub test suite.

Provides:
- Fakes for the persistence, actuator and message-source collaborators
- The default heater registry
- A wired ActionExecutor

Coroutines are driven with asyncio.run() from plain test functions.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Optional

import pytest

from hub.core.config import DEFAULT_HEATERS
from hub.core.errors import ActuationError, PersistenceError
from hub.domain.actions import ActionQueue
from hub.domain.models import Heater
from hub.services.executor import ActionExecutor

logging.getLogger("hub").setLevel(logging.DEBUG)


class FakeRepository:
    """Records every write; set fail_writes to make inserts raise."""

    def __init__(self) -> None:
        self.readings: list[tuple[str, int, int]] = []
        self.heater_states: list[tuple] = []
        self.history: list = []
        self.heater_history: list = []
        self.fail_writes = False

    async def init(self) -> None:
        return None

    async def insert_reading(self, location, temperature, humidity) -> None:
        if self.fail_writes:
            raise PersistenceError("disk full")
        self.readings.append((location, temperature, humidity))

    async def insert_heater_state(self, heater_id, state) -> None:
        if self.fail_writes:
            raise PersistenceError("disk full")
        self.heater_states.append((heater_id, state))

    async def get_history_last_24h(self):
        return list(self.history)

    async def get_heater_history_last_24h(self):
        return list(self.heater_history)


class FakeActuator:
    """Records publishes; fail_on_call=n makes the n-th publish raise."""

    def __init__(self, fail_on_call: Optional[int] = None) -> None:
        self.published: list[tuple[str, str, bool, int]] = []
        self.calls = 0
        self.fail_on_call = fail_on_call

    async def publish(self, topic, payload, retained, qos) -> None:
        self.calls += 1
        if self.fail_on_call == self.calls:
            raise ActuationError(f"broker rejected {topic}")
        self.published.append((topic, payload, retained, qos))


class FakeSource:
    """MessageSource replaying scripted events; exceptions are raised from poll()."""

    def __init__(self, events=()) -> None:
        self._events = deque(events)

    def poll(self, timeout=None):
        if not self._events:
            time.sleep(min(timeout or 0.0, 0.01))
            return None
        event = self._events.popleft()
        if isinstance(event, Exception):
            raise event
        return event


@pytest.fixture()
def heaters():
    return tuple(Heater(id=h.id, name=h.name) for h in DEFAULT_HEATERS)


@pytest.fixture()
def repo():
    return FakeRepository()


@pytest.fixture()
def actuator():
    return FakeActuator()


@pytest.fixture()
def queue():
    return ActionQueue(capacity=10)


@pytest.fixture()
def executor(queue, repo, actuator, heaters):
    return ActionExecutor(queue=queue, repo=repo, actuator=actuator, heaters=heaters)
