from __future__ import annotations

import re
from typing import Optional


class TopicFilter:
    """
    MQTT topic filter split into path segments once.

    match() returns the segments captured by the wildcards ("+" captures one
    segment, "#" captures the joined remainder), or None when the topic does
    not match.
    """

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self._segments = tuple(pattern.split("/"))

    def __repr__(self) -> str:
        return f"TopicFilter({self.pattern!r})"

    def match(self, topic: str) -> Optional[tuple[str, ...]]:
        parts = topic.split("/")
        captured: list[str] = []
        for i, seg in enumerate(self._segments):
            if seg == "#":
                captured.append("/".join(parts[i:]))
                return tuple(captured)
            if i >= len(parts):
                return None
            if seg == "+":
                captured.append(parts[i])
            elif seg != parts[i]:
                return None
        if len(parts) != len(self._segments):
            return None
        return tuple(captured)


TEMPERATURE = TopicFilter("temperature/+")
MEASUREMENT = TopicFilter("measurement/+")
RELAY = TopicFilter("shellies/+/relay/0")

SUBSCRIPTIONS = (TEMPERATURE, MEASUREMENT, RELAY)

MEASUREMENT_PLACES = frozenset({"inside", "outside"})

_SHELLY_DEVICE = re.compile(r"^shelly1-([0-9A-Fa-f]{6})$")


def shelly_id(device: str) -> Optional[str]:
    """'shelly1-C4402D' -> 'C4402D'; None for any other device segment."""
    m = _SHELLY_DEVICE.match(device)
    return m.group(1) if m else None
