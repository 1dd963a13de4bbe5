"""
Hub exceptions.

Everything the control pipeline raises on purpose derives from HubError, so
the ingestion and execution loops can tell expected failures from bugs in
their logs.
"""


class HubError(Exception):
    """Base exception for the hub."""

    pass


class ParseError(HubError):
    """Inbound message could not be turned into an action."""

    def __init__(self, topic: str, payload: bytes, reason: str) -> None:
        super().__init__(f"{reason} (topic={topic!r} payload={payload!r})")
        self.topic = topic
        self.payload = payload
        self.reason = reason


class TransportError(HubError):
    """Broker connection failed or was lost."""

    pass


class PersistenceError(HubError):
    """Database read or write failed."""

    pass


class ActuationError(HubError):
    """A heater command could not be published."""

    pass
