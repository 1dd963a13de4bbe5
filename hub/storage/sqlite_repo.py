from __future__ import annotations
import asyncio
import logging
import sqlite3
from datetime import datetime
from typing import List

import aiosqlite

from ..core.errors import PersistenceError
from ..core.timeutil import now_utc, last_24h_start
from ..domain.models import HeaterHistoryRecord, HeaterState, TemperatureRecord

logger = logging.getLogger(__name__)


class SQLiteRepository:
    """
    History log for temperature readings and heater acknowledgements.

    Every call takes the lock and opens its own connection, so the executor
    and the HTTP API can use the same instance concurrently.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        async with self._lock:
            try:
                async with aiosqlite.connect(self._path) as db:
                    await db.execute(
                        """
                        CREATE TABLE IF NOT EXISTS history (
                            timestamp TEXT NOT NULL,
                            location TEXT NOT NULL,
                            temperature INTEGER NOT NULL,
                            humidity INTEGER NOT NULL
                        )
                        """
                    )
                    await db.execute(
                        """
                        CREATE TABLE IF NOT EXISTS heater_history (
                            timestamp TEXT NOT NULL,
                            shelly_id TEXT NOT NULL,
                            is_active INTEGER NOT NULL
                        )
                        """
                    )
                    await db.execute(
                        "CREATE INDEX IF NOT EXISTS history_timestamp_index ON history(timestamp)"
                    )
                    await db.execute(
                        "CREATE INDEX IF NOT EXISTS heater_history_timestamp_index ON heater_history(timestamp)"
                    )
                    await db.commit()
            except sqlite3.Error as e:
                raise PersistenceError(f"Failed to initialise database at {self._path}: {e}") from e
        logger.info("Database ready at %s", self._path)

    async def insert_reading(self, location: str, temperature: int, humidity: int) -> None:
        async with self._lock:
            try:
                async with aiosqlite.connect(self._path) as db:
                    await db.execute(
                        "INSERT INTO history(timestamp,location,temperature,humidity) VALUES (?,?,?,?)",
                        (now_utc().isoformat(timespec="microseconds"), location, int(temperature), int(humidity)),
                    )
                    await db.commit()
            except sqlite3.Error as e:
                raise PersistenceError(f"Failed to insert measurement: {e}") from e

    async def insert_heater_state(self, heater_id: str, state: HeaterState) -> None:
        async with self._lock:
            try:
                async with aiosqlite.connect(self._path) as db:
                    await db.execute(
                        "INSERT INTO heater_history(timestamp,shelly_id,is_active) VALUES (?,?,?)",
                        (now_utc().isoformat(timespec="microseconds"), heater_id, state.as_int),
                    )
                    await db.commit()
            except sqlite3.Error as e:
                raise PersistenceError(f"Failed to insert heater history: {e}") from e

    async def get_history_last_24h(self) -> List[TemperatureRecord]:
        async with self._lock:
            try:
                async with aiosqlite.connect(self._path) as db:
                    cur = await db.execute(
                        """
                        SELECT timestamp,location,temperature,humidity
                        FROM history
                        WHERE timestamp > ?
                        ORDER BY timestamp ASC, rowid ASC
                        """,
                        (last_24h_start().isoformat(timespec="microseconds"),),
                    )
                    rows = await cur.fetchall()
            except sqlite3.Error as e:
                raise PersistenceError(f"Failed to fetch history of measurements: {e}") from e
        return [
            TemperatureRecord(
                timestamp=datetime.fromisoformat(ts),
                location=loc,
                temperature=int(temp),
                humidity=int(hum),
            )
            for ts, loc, temp, hum in rows
        ]

    async def get_heater_history_last_24h(self) -> List[HeaterHistoryRecord]:
        async with self._lock:
            try:
                async with aiosqlite.connect(self._path) as db:
                    cur = await db.execute(
                        """
                        SELECT timestamp,shelly_id,is_active
                        FROM heater_history
                        WHERE timestamp > ?
                        ORDER BY timestamp ASC, rowid ASC
                        """,
                        (last_24h_start().isoformat(timespec="microseconds"),),
                    )
                    rows = await cur.fetchall()
            except sqlite3.Error as e:
                raise PersistenceError(f"Failed to fetch heater history: {e}") from e
        return [
            HeaterHistoryRecord(
                timestamp=datetime.fromisoformat(ts),
                shelly_id=sid,
                is_active=bool(active),
            )
            for ts, sid, active in rows
        ]
