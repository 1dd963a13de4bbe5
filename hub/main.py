from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .core.config import settings
from .core.log import configure_logging

from .api.routes import router as api_router
import hub.api.routes as routes_module

from .domain.actions import ActionQueue
from .domain.models import Heater
from .messaging.topics import SUBSCRIPTIONS
from .messaging.transport import MQTTTransport
from .services.executor import ActionExecutor
from .services.ingestor import MessageIngestor
from .storage.sqlite_repo import SQLiteRepository


logger = logging.getLogger(__name__)

SUBSCRIBE_QOS = 2  # exactly once


# --- Singletons ---
heaters = tuple(Heater(id=h.id, name=h.name) for h in settings.heaters)
queue = ActionQueue(capacity=settings.queue_capacity)
repo = SQLiteRepository(settings.sqlite_path)
transport = MQTTTransport(
    host=settings.mqtt_host,
    port=settings.mqtt_port,
    client_id=settings.mqtt_client_id,
    keepalive=settings.mqtt_keepalive_seconds,
    inbox_size=settings.mqtt_inbox_size,
)
executor = ActionExecutor(queue=queue, repo=repo, actuator=transport, heaters=heaters)
ingestor = MessageIngestor(
    source=transport,
    queue=queue,
    poll_timeout=settings.mqtt_poll_timeout_seconds,
)


def get_executor() -> ActionExecutor:
    return executor


def get_queue() -> ActionQueue:
    return queue


def get_repo() -> SQLiteRepository:
    return repo


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting %s (broker=%s:%s)", settings.app_name, settings.mqtt_host, settings.mqtt_port)

    # Either failure here aborts startup before the loops run
    await repo.init()
    transport.subscribe([f.pattern for f in SUBSCRIPTIONS], qos=SUBSCRIBE_QOS)
    transport.connect()

    await executor.start()
    await ingestor.start()

    try:
        yield
    finally:
        await ingestor.stop()
        await executor.stop()
        transport.close()
        logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Make the dependency functions in routes resolve to the real ones
app.dependency_overrides[routes_module.get_executor] = get_executor
app.dependency_overrides[routes_module.get_queue] = get_queue
app.dependency_overrides[routes_module.get_repo] = get_repo

app.include_router(api_router, prefix="/api")
