"""
MQTT transport on top of paho-mqtt.

paho runs its network loop in its own thread. Callbacks translate paho
events into transport events and hand them over through a bounded inbox;
poll() is the blocking read side used by the ingestor. When the inbox is
full the paho thread waits on inbound messages, so a stalled consumer stops
reading from the broker instead of buffering without limit. Acknowledgements
are dropped instead: paho delivers them while holding the lock publish()
needs.

Reconnection is paho's job (loop_start reconnects on its own); the
subscriptions recorded here are re-issued on every successful connect.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Iterable, Optional

import paho.mqtt.client as mqtt

from ..core.errors import ActuationError, TransportError
from .events import Acknowledgement, ConnectionLost, Publish, TransportEvent

logger = logging.getLogger(__name__)


def create_mqtt_client(client_id: str = "") -> mqtt.Client:
    """Build a paho 2.x client using the VERSION2 callback signatures."""
    return mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        protocol=mqtt.MQTTv311,
    )


class MQTTTransport:
    def __init__(
        self,
        host: str,
        port: int = 1883,
        client_id: str = "",
        keepalive: int = 5,
        inbox_size: int = 10,
    ) -> None:
        self.host = host
        self.port = port
        self.keepalive = keepalive

        self._inbox: queue.Queue[TransportEvent] = queue.Queue(maxsize=inbox_size)
        self._closing = threading.Event()
        self._lock = threading.Lock()
        self._filters: list[tuple[str, int]] = []
        self._connected = False

        self._client = create_mqtt_client(client_id=client_id)
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message = self._on_message
        self._client.on_publish = self._on_publish
        self._client.on_subscribe = self._on_subscribe
        self._client.reconnect_delay_set(min_delay=1, max_delay=30)

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        try:
            self._client.connect(self.host, self.port, self.keepalive)
        except (OSError, ValueError) as e:
            raise TransportError(f"Unable to connect to MQTT broker {self.host}:{self.port}: {e}") from e
        self._client.loop_start()
        logger.info("MQTT network loop started for %s:%s", self.host, self.port)

    def subscribe(self, filters: Iterable[str], qos: int = 2) -> None:
        with self._lock:
            self._filters = [(f, qos) for f in filters]
            filters_now = list(self._filters) if self._connected else []
        if filters_now:
            self._client.subscribe(filters_now)
            logger.info("Subscribed to %s", [f for f, _ in filters_now])

    def close(self) -> None:
        self._closing.set()
        try:
            self._client.disconnect()
        finally:
            self._client.loop_stop()
            self._connected = False
        logger.info("Disconnected from MQTT broker")

    def poll(self, timeout: Optional[float] = None) -> Optional[TransportEvent]:
        """
        Next event from the broker, or None if nothing arrived within timeout.

        Raises TransportError when the connection was lost.
        """
        try:
            event = self._inbox.get(timeout=timeout)
        except queue.Empty:
            return None
        if isinstance(event, ConnectionLost):
            raise TransportError(f"Connection to {self.host}:{self.port} lost: {event.reason}")
        return event

    async def publish(self, topic: str, payload: str, retained: bool, qos: int) -> None:
        info = self._client.publish(topic, payload, qos=qos, retain=retained)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise ActuationError(f"Failed to publish to {topic}: {mqtt.error_string(info.rc)}")
        logger.debug("Published %s -> %s (retain=%s qos=%s)", payload, topic, retained, qos)

    # --- paho callbacks (network thread) ---

    def _put(self, event: TransportEvent) -> None:
        while not self._closing.is_set():
            try:
                self._inbox.put(event, timeout=0.5)
                return
            except queue.Full:
                continue

    def _offer(self, event: TransportEvent) -> None:
        # paho holds its outgoing-message mutex while acking; never wait here
        try:
            self._inbox.put_nowait(event)
        except queue.Full:
            logger.debug("Inbox full, dropping %s", event)

    def _on_connect(self, client, userdata, flags, reason_code, properties) -> None:
        if reason_code.is_failure:
            logger.error("MQTT connect refused: %s", reason_code)
            self._put(ConnectionLost(str(reason_code)))
            return
        with self._lock:
            self._connected = True
            filters = list(self._filters)
        logger.info("Connected to MQTT broker %s:%s", self.host, self.port)
        if filters:
            client.subscribe(filters)
            logger.info("Subscribed to %s", [f for f, _ in filters])

    def _on_disconnect(self, client, userdata, flags, reason_code, properties) -> None:
        with self._lock:
            self._connected = False
        if reason_code.is_failure and not self._closing.is_set():
            self._put(ConnectionLost(str(reason_code)))

    def _on_message(self, client, userdata, msg) -> None:
        self._put(Publish(topic=msg.topic, payload=bytes(msg.payload)))

    def _on_publish(self, client, userdata, mid, reason_code, properties) -> None:
        self._offer(Acknowledgement(kind="publish", mid=mid))

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties) -> None:
        self._offer(Acknowledgement(kind="subscribe", mid=mid))
