from __future__ import annotations
import asyncio
import contextlib
import logging
import math
import re
from typing import Optional

from pydantic import ValidationError

from ..core.errors import ParseError, TransportError
from ..domain.actions import (
    Action,
    ActionQueue,
    EnableController,
    RegisterHeaterStateChange,
    RegisterMeasurement,
    SetDesiredTemperature,
    SetInsideTemperature,
)
from ..domain.interfaces import MessageSource
from ..domain.models import HeaterState
from ..messaging.events import Publish, TransportEvent
from ..messaging.schemas import MeasurementPayload
from ..messaging.topics import MEASUREMENT, MEASUREMENT_PLACES, RELAY, TEMPERATURE, shelly_id


logger = logging.getLogger(__name__)

# plain decimal or exponent notation only: no underscores, no padding
_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def _decode(topic: str, payload: bytes) -> str:
    try:
        return payload.decode("ascii")
    except UnicodeDecodeError as e:
        raise ParseError(topic, payload, "Payload is not ASCII") from e


def _parse_temperature_value(topic: str, payload: bytes) -> float:
    text = _decode(topic, payload)
    if not _DECIMAL.fullmatch(text):
        raise ParseError(topic, payload, "Temperature is not a decimal number")
    value = float(text)
    if not math.isfinite(value):
        raise ParseError(topic, payload, "Temperature must be a finite number")
    return value


def _parse_temperature(topic: str, kind: str, payload: bytes) -> Optional[Action]:
    if kind == "set":
        return SetDesiredTemperature(_parse_temperature_value(topic, payload))
    if kind == "inside":
        return SetInsideTemperature(_parse_temperature_value(topic, payload))
    if kind == "auto":
        if payload == b"true":
            return EnableController(True)
        if payload == b"false":
            return EnableController(False)
    return None


def _parse_measurement(topic: str, place: str, payload: bytes) -> Optional[Action]:
    if place not in MEASUREMENT_PLACES:
        return None
    try:
        body = MeasurementPayload.model_validate_json(payload)
    except ValidationError as e:
        raise ParseError(topic, payload, f"Invalid measurement payload ({e.error_count()} error(s))") from e
    return RegisterMeasurement(place=place, measurement=body.to_measurement())


def _parse_relay(topic: str, device: str, payload: bytes) -> Action:
    heater_id = shelly_id(device)
    if heater_id is None:
        raise ParseError(topic, payload, f"Unrecognised relay device {device!r}")
    token = _decode(topic, payload)
    try:
        state = HeaterState(token)
    except ValueError as e:
        raise ParseError(topic, payload, f"Unrecognised heater state {token!r}") from e
    return RegisterHeaterStateChange(heater_id=heater_id, state=state)


def parse_message(topic: str, payload: bytes) -> Optional[Action]:
    """
    Classify one inbound publish.

    Returns None for topics the hub does not act on; raises ParseError when
    the topic is one of ours but the payload (or device id) is not usable.
    """
    captured = TEMPERATURE.match(topic)
    if captured is not None:
        return _parse_temperature(topic, captured[0], payload)

    captured = MEASUREMENT.match(topic)
    if captured is not None:
        return _parse_measurement(topic, captured[0], payload)

    captured = RELAY.match(topic)
    if captured is not None:
        return _parse_relay(topic, captured[0], payload)

    return None


class MessageIngestor:
    """Turns broker events into actions and feeds them to the executor."""

    def __init__(
        self,
        source: MessageSource,
        queue: ActionQueue,
        poll_timeout: float = 1.0,
    ) -> None:
        self._source = source
        self._queue = queue
        self._poll_timeout = poll_timeout

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()

    async def start(self) -> None:
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="ingestor_loop")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            # may be parked on a full queue
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        logger.info("Ingestor loop started (poll_timeout=%s)", self._poll_timeout)
        loop = asyncio.get_running_loop()

        while not self._stop.is_set():
            try:
                # poll blocks on the transport inbox; keep it off the event loop
                event = await loop.run_in_executor(None, self._source.poll, self._poll_timeout)
            except TransportError as e:
                logger.error("MQTT poll failed: %s", e)
                continue

            if event is None:
                continue

            try:
                await self.handle_event(event)
            except Exception as e:
                logger.exception("Ingestor loop error: %s", e)

        logger.info("Ingestor loop stopped")

    async def handle_event(self, event: TransportEvent) -> Optional[Action]:
        if not isinstance(event, Publish):
            logger.debug("Ignoring transport event %s", event)
            return None

        action = self.parse(event.topic, event.payload)
        if action is None:
            return None

        await self._queue.send(action)
        return action

    def parse(self, topic: str, payload: bytes) -> Optional[Action]:
        try:
            action = parse_message(topic, payload)
        except ParseError as e:
            logger.warning("Dropping message: %s", e)
            return None

        if action is None:
            logger.debug("No action for topic=%s", topic)
        else:
            logger.debug("Parsed %s from topic=%s", action, topic)
        return action
