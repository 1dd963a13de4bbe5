from __future__ import annotations
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Publish:
    topic: str
    payload: bytes


@dataclass(frozen=True)
class Acknowledgement:
    kind: str  # "publish" | "subscribe"
    mid: int


@dataclass(frozen=True)
class ConnectionLost:
    reason: str


TransportEvent = Union[Publish, Acknowledgement, ConnectionLost]
