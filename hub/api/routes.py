from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import settings
from ..core.errors import PersistenceError
from ..core.timeutil import now_utc
from ..domain.actions import ActionQueue
from ..domain.interfaces import Repository
from ..services.executor import ActionExecutor

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getters ---
# Placeholders; main.py wires the real ones via app.dependency_overrides.
def get_executor() -> ActionExecutor:  # overridden in main
    raise RuntimeError("Executor dependency not configured")

def get_queue() -> ActionQueue:  # overridden in main
    raise RuntimeError("Queue dependency not configured")

def get_repo() -> Repository:  # overridden in main
    raise RuntimeError("Repo dependency not configured")


@router.get("/live")
async def get_live(
    ex: ActionExecutor = Depends(get_executor),
    queue: ActionQueue = Depends(get_queue),
):
    decision = ex.live.last_decision
    return {
        "app": settings.app_name,
        "now_utc": now_utc().isoformat(),
        "controller": {
            "enabled": ex.state.enabled,
            "desired_temperature": ex.state.desired_temperature,
            "current_temperature": ex.state.current_temperature,
            "last_decision": decision.value if decision else None,
            "last_action": ex.live.last_action,
            "actions_handled": ex.live.actions_handled,
            "actions_failed": ex.live.actions_failed,
        },
        "queue": {"depth": queue.qsize(), "capacity": queue.capacity},
        "heaters": [{"id": h.id, "name": h.name} for h in ex.heaters],
    }


@router.get("/heaters")
async def get_heaters(ex: ActionExecutor = Depends(get_executor)):
    return {"heaters": [{"id": h.id, "name": h.name} for h in ex.heaters]}


@router.get("/history")
async def history(repo: Repository = Depends(get_repo)):
    try:
        rows = await repo.get_history_last_24h()
    except PersistenceError as e:
        logger.error("History query failed: %s", e)
        raise HTTPException(status_code=503, detail="History unavailable")
    return {
        "rows": [
            {
                "timestamp": r.timestamp.isoformat(),
                "location": r.location,
                "temperature": r.temperature,
                "humidity": r.humidity,
            }
            for r in rows
        ],
    }


@router.get("/heaters/history")
async def heater_history(repo: Repository = Depends(get_repo)):
    try:
        rows = await repo.get_heater_history_last_24h()
    except PersistenceError as e:
        logger.error("Heater history query failed: %s", e)
        raise HTTPException(status_code=503, detail="Heater history unavailable")
    return {
        "rows": [
            {
                "timestamp": r.timestamp.isoformat(),
                "shelly_id": r.shelly_id,
                "is_active": r.is_active,
            }
            for r in rows
        ],
    }
