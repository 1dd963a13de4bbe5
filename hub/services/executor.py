from __future__ import annotations
import asyncio
import contextlib
import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.errors import ActuationError
from ..domain.actions import (
    Action,
    ActionQueue,
    EnableController,
    RegisterHeaterStateChange,
    RegisterMeasurement,
    SetDesiredTemperature,
    SetInsideTemperature,
)
from ..domain.controller import ControlState
from ..domain.interfaces import Actuator, Repository
from ..domain.models import Heater, HeaterState


logger = logging.getLogger(__name__)

COMMAND_QOS = 1  # at-least-once


def round_half_away(value: float) -> int:
    """22.5 -> 23, -0.5 -> -1 (Python's round() would give 22 and 0)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass
class LiveState:
    last_decision: Optional[HeaterState] = None
    last_action: Optional[str] = None
    actions_handled: int = 0
    actions_failed: int = 0


class ActionExecutor:
    """
    Single consumer of the action queue.

    Owns the ControlState; nothing else reads or writes it while the loop
    runs, so no locking is needed.
    """

    def __init__(
        self,
        queue: ActionQueue,
        repo: Repository,
        actuator: Actuator,
        heaters: Sequence[Heater],
    ) -> None:
        self._queue = queue
        self._repo = repo
        self._actuator = actuator
        self._heaters = tuple(heaters)

        self._task: Optional[asyncio.Task] = None

        self.state = ControlState()
        self.live = LiveState()

    @property
    def heaters(self) -> tuple[Heater, ...]:
        return self._heaters

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name="executor_loop")

    async def stop(self) -> None:
        # queued actions are not drained
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        logger.info("Executor loop started (heaters=%s)", [h.id for h in self._heaters])
        try:
            while True:
                action = await self._queue.receive()
                await self.handle(action)
        finally:
            logger.info("Executor loop stopped")

    async def handle(self, action: Action) -> None:
        self.live.last_action = repr(action)
        try:
            await self._apply(action)
            self.live.actions_handled += 1
        except Exception as e:
            self.live.actions_failed += 1
            logger.exception("Failed to handle %r: %s", action, e)

    async def _apply(self, action: Action) -> None:
        if isinstance(action, SetDesiredTemperature):
            self.state.desired_temperature = action.temperature
            logger.info("Desired temperature set to %.2f", action.temperature)
            await self.check_temperature()

        elif isinstance(action, SetInsideTemperature):
            self.state.current_temperature = action.temperature
            logger.info("Inside temperature is %.2f", action.temperature)
            await self.check_temperature()

        elif isinstance(action, EnableController):
            self.state.enabled = action.enabled
            logger.info(
                "Temperature control %s state=%s",
                "enabled" if action.enabled else "disabled",
                self.state,
            )
            await self.check_temperature()

        elif isinstance(action, RegisterMeasurement):
            m = action.measurement
            await self._repo.insert_reading(
                action.place, round_half_away(m.temperature), round_half_away(m.humidity)
            )
            logger.debug("Recorded measurement place=%s %s", action.place, m)

        elif isinstance(action, RegisterHeaterStateChange):
            await self._repo.insert_heater_state(action.heater_id, action.state)
            logger.debug("Recorded heater %s is %s", action.heater_id, action.state.value)

        else:
            raise TypeError(f"Unsupported action: {action!r}")

    async def check_temperature(self) -> Optional[HeaterState]:
        """Compare current and desired temperature and command the heaters."""
        target = self.state.decision()
        if target is None:
            if not self.state.enabled:
                logger.info("Controller is disabled state=%s", self.state)
            elif self.state.desired_temperature is None:
                logger.warning("Missing desired temperature state=%s", self.state)
            else:
                logger.warning("Missing current temperature state=%s", self.state)
            return None

        self.live.last_decision = target
        logger.info(
            "decision: heaters %s (desired=%.2f current=%.2f)",
            target.value,
            self.state.desired_temperature,
            self.state.current_temperature,
        )
        await self.set_heaters_state(target)
        return target

    async def set_heaters_state(self, state: HeaterState) -> None:
        """Send the same command to every heater; stop at the first failure."""
        for heater in self._heaters:
            try:
                await self._actuator.publish(
                    heater.command_topic, state.value, retained=True, qos=COMMAND_QOS
                )
            except Exception as e:
                raise ActuationError(
                    f"Failed to set heater {heater.id} ({heater.name}) {state.value}; "
                    f"remaining heaters skipped"
                ) from e
