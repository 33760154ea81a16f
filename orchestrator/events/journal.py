"""SQLite journal storage for orchestration events."""

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Callable

import aiosqlite

from orchestrator.events.models import Event, EventState

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, context_id, origin, type, type_version, state, created_at, scheduled_at, "
    "started_at, completed_at, retry, max_retry, data, worker_id"
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS event_journal (
    id            TEXT    PRIMARY KEY,
    context_id    TEXT    NOT NULL,
    origin        TEXT    NOT NULL,
    type          TEXT    NOT NULL,
    type_version  TEXT    NOT NULL DEFAULT '1.0.0',
    state         TEXT    NOT NULL DEFAULT 'ready',
    created_at    REAL    NOT NULL,
    scheduled_at  REAL    NOT NULL,
    started_at    REAL,
    completed_at  REAL,
    retry         INTEGER NOT NULL DEFAULT 0,
    max_retry     INTEGER NOT NULL DEFAULT 3,
    data          BLOB    NOT NULL,
    worker_id     TEXT,
    CHECK (retry >= 0 AND retry <= max_retry)
);

CREATE INDEX IF NOT EXISTS idx_ej_state_scheduled ON event_journal(state, scheduled_at);
CREATE INDEX IF NOT EXISTS idx_ej_origin_state ON event_journal(origin, state);
CREATE INDEX IF NOT EXISTS idx_ej_context ON event_journal(context_id);
"""


def row_to_event(row: tuple) -> Event:
    """Convert a journal row (selected with _COLUMNS) to an Event."""
    data = row[12]
    if isinstance(data, str):
        data = data.encode("utf-8")
    return Event(
        id=row[0],
        context_id=row[1],
        origin=row[2],
        type=row[3],
        type_version=row[4],
        state=EventState(row[5]),
        created_at=row[6],
        scheduled_at=row[7],
        started_at=row[8],
        completed_at=row[9],
        retry=row[10],
        max_retry=row[11],
        data=bytes(data) if data is not None else b"",
        worker_id=row[13],
    )


class EventJournal:
    """SQLite-backed event record store. One connection per instance.

    The connection is shared, so write transactions on it are serialized
    through write_lock. Reads do not take the lock.
    """

    def __init__(
        self,
        db_path: Path,
        busy_timeout: int = 5000,
        default_max_retry: int = 3,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = db_path
        self._busy_timeout = busy_timeout
        self._default_max_retry = default_max_retry
        self._clock = clock
        self._conn: aiosqlite.Connection | None = None
        self._open_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    @property
    def write_lock(self) -> asyncio.Lock:
        """Held for every write transaction on the shared connection."""
        return self._write_lock

    async def ensure_conn(self) -> aiosqlite.Connection:
        """Open connection and ensure schema. Idempotent."""
        if self._conn is not None:
            return self._conn
        async with self._open_lock:
            if self._conn is None:
                conn = await aiosqlite.connect(str(self._db_path))
                await conn.execute("PRAGMA journal_mode=WAL")
                await conn.execute("PRAGMA synchronous=NORMAL")
                await conn.execute(f"PRAGMA busy_timeout={self._busy_timeout}")
                await conn.executescript(_SCHEMA)
                await conn.commit()
                self._conn = conn
                logger.debug("event journal: schema ensured at %s", self._db_path)
        return self._conn

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def append(
        self,
        context_id: str,
        origin: str,
        event_type: str,
        data: bytes,
        *,
        type_version: str = "1.0.0",
        max_retry: int | None = None,
        scheduled_at: float | None = None,
        event_id: str | None = None,
    ) -> str:
        """Insert a new 'ready' event and return its id."""
        if max_retry is None:
            max_retry = self._default_max_retry
        if max_retry < 0:
            raise ValueError("max_retry must be >= 0")
        conn = await self.ensure_conn()
        now = self._clock()
        event_id = event_id or str(uuid.uuid4())
        async with self._write_lock:
            try:
                await conn.execute(
                    """
                    INSERT INTO event_journal (id, context_id, origin, type, type_version, state,
                        created_at, scheduled_at, retry, max_retry, data)
                    VALUES (?, ?, ?, ?, ?, 'ready', ?, ?, 0, ?, ?)
                    """,
                    (
                        event_id,
                        context_id,
                        origin,
                        event_type,
                        type_version,
                        now,
                        scheduled_at if scheduled_at is not None else now,
                        max_retry,
                        data,
                    ),
                )
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()
        return event_id

    async def select(
        self,
        where: str = "",
        params: tuple[Any, ...] = (),
        order_by: str = "created_at, rowid",
        limit: int | None = None,
    ) -> list[Event]:
        conn = await self.ensure_conn()
        sql = f"SELECT {_COLUMNS} FROM event_journal"
        if where:
            sql += f" WHERE {where}"
        sql += f" ORDER BY {order_by}"
        if limit is not None:
            sql += " LIMIT ?"
            params = (*params, limit)
        cursor = await conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [row_to_event(row) for row in rows]

    async def get(self, event_id: str) -> Event | None:
        events = await self.select("id = ?", (event_id,), limit=1)
        return events[0] if events else None
