"""Event repository gateway: typed queries and lifecycle commands over the journal.

Every command enforces the lifecycle:

    ready --(mark_started | claim)--> processing
    ready/processing --(mark_retry, retry < max)--> ready (rescheduled)
    ready/processing --(mark_retry, retry == max)--> failed
    ready/processing --(mark_completed)--> completed
    ready/processing --(force_state)--> failed | aborted | unprocessable

Terminal rows are never rewritten. Storage errors propagate unchanged.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol, runtime_checkable

import aiosqlite

from orchestrator.events.backoff import RetryPolicy
from orchestrator.events.errors import EventNotFoundError, EventTransitionError
from orchestrator.events.journal import EventJournal
from orchestrator.events.models import Event, EventState

logger = logging.getLogger(__name__)

__all__ = ["EventGateway", "EventRepository"]

_FORCEABLE_STATES = frozenset(
    {EventState.FAILED, EventState.ABORTED, EventState.UNPROCESSABLE}
)


@runtime_checkable
class EventGateway(Protocol):
    """Lifecycle commands processors use to record outcomes."""

    async def mark_completed(self, event_id: str) -> Event: ...

    async def mark_retry(self, event_id: str) -> Event: ...

    async def force_state(self, event_id: str, state: EventState | str) -> Event: ...


class EventRepository:
    """Gateway over EventJournal. Implements EventGateway."""

    def __init__(self, journal: EventJournal, policy: RetryPolicy | None = None) -> None:
        self._journal = journal
        self._policy = policy or RetryPolicy()

    @property
    def journal(self) -> EventJournal:
        return self._journal

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def _now(self) -> float:
        return self._journal.clock()

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = await self._journal.ensure_conn()
        async with self._journal.write_lock:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise

    async def _require(self, event_id: str) -> Event:
        event = await self._journal.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    # --- Queries ---

    async def fetch_processable(self, limit: int) -> list[Event]:
        """Ready events due now, oldest schedule first. Plain read, no claim."""
        return await self._journal.select(
            "state = ? AND scheduled_at <= ?",
            (EventState.READY.value, self._now()),
            order_by="scheduled_at, created_at, rowid",
            limit=limit,
        )

    async def fetch_by_origin_and_state(
        self, origin: str, state: EventState | str, limit: int
    ) -> list[Event]:
        return await self._journal.select(
            "origin = ? AND state = ?",
            (origin, EventState(state).value),
            order_by="scheduled_at, created_at, rowid",
            limit=limit,
        )

    async def fetch_by_id(self, event_id: str) -> Event:
        return await self._require(event_id)

    async def fetch_all(self) -> list[Event]:
        return await self._journal.select()

    # --- Commands ---

    async def claim_processable(self, limit: int, worker_id: str) -> list[Event]:
        """Atomically claim due ready events: SELECT + UPDATE to processing in one transaction."""
        now = self._now()
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                SELECT id FROM event_journal
                WHERE state = 'ready' AND scheduled_at <= ?
                ORDER BY scheduled_at, created_at, rowid
                LIMIT ?
                """,
                (now, limit),
            )
            ids = [row[0] for row in await cursor.fetchall()]
            if not ids:
                return []
            placeholders = ",".join("?" * len(ids))
            await conn.execute(
                f"UPDATE event_journal SET state = 'processing', started_at = ?, worker_id = ? "
                f"WHERE state = 'ready' AND id IN ({placeholders})",
                [now, worker_id, *ids],
            )
        claimed = await self._journal.select(
            f"worker_id = ? AND state = 'processing' AND id IN ({placeholders})",
            (worker_id, *ids),
            order_by="scheduled_at, created_at, rowid",
        )
        logger.debug("claimed %d events for worker %s", len(claimed), worker_id)
        return claimed

    async def mark_started(self, event_id: str) -> Event:
        """ready -> processing, started_at = now."""
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE event_journal SET state = 'processing', started_at = ?
                WHERE id = ? AND state = 'ready'
                """,
                (self._now(), event_id),
            )
            if cursor.rowcount == 0:
                event = await self._require(event_id)
                raise EventTransitionError(event_id, event.state.value, "start")
        return await self._require(event_id)

    async def mark_completed(self, event_id: str) -> Event:
        """-> completed, completed_at = now. No-op on an already terminal event."""
        async with self._transaction() as conn:
            event = await self._require(event_id)
            if event.is_terminal:
                logger.debug(
                    "mark_completed: event %s already terminal (%s)",
                    event_id,
                    event.state.value,
                )
                return event
            await conn.execute(
                """
                UPDATE event_journal SET state = 'completed', completed_at = ?
                WHERE id = ?
                """,
                (self._now(), event_id),
            )
        return await self._require(event_id)

    async def mark_retry(self, event_id: str) -> Event:
        """Count a failed attempt: reschedule with backoff, or fail at max_retry."""
        async with self._transaction() as conn:
            event = await self._require(event_id)
            if event.is_terminal:
                raise EventTransitionError(event_id, event.state.value, "retry")
            await self._apply_retry(conn, event, self._now())
        return await self._require(event_id)

    async def force_state(self, event_id: str, state: EventState | str) -> Event:
        """Move a live event straight to failed, aborted or unprocessable.

        retry and scheduled_at are left as they are; completed_at is stamped
        because the target is terminal.
        """
        target = EventState(state)
        if target not in _FORCEABLE_STATES:
            raise ValueError(f"cannot force event into state '{target.value}'")
        async with self._transaction() as conn:
            event = await self._require(event_id)
            if event.is_terminal:
                raise EventTransitionError(event_id, event.state.value, f"force {target.value}")
            await conn.execute(
                "UPDATE event_journal SET state = ?, completed_at = ? WHERE id = ?",
                (target.value, self._now(), event_id),
            )
        return await self._require(event_id)

    async def recover_stale(self, stale_timeout: float) -> tuple[int, int]:
        """Treat events stuck in 'processing' longer than stale_timeout as a failed attempt.

        Returns (rescheduled_count, failed_count).
        """
        now = self._now()
        rescheduled = failed = 0
        async with self._transaction() as conn:
            stale = await self._journal.select(
                "state = ? AND started_at IS NOT NULL AND started_at < ?",
                (EventState.PROCESSING.value, now - stale_timeout),
            )
            for event in stale:
                if await self._apply_retry(conn, event, now) is EventState.FAILED:
                    failed += 1
                else:
                    rescheduled += 1
        return rescheduled, failed

    async def _apply_retry(
        self, conn: aiosqlite.Connection, event: Event, now: float
    ) -> EventState:
        retry = min(event.retry + 1, event.max_retry)
        if retry < event.max_retry:
            scheduled_at = self._policy.next_schedule(event.scheduled_at, retry, now)
            await conn.execute(
                """
                UPDATE event_journal
                SET state = 'ready', retry = ?, scheduled_at = ?,
                    started_at = NULL, worker_id = NULL
                WHERE id = ?
                """,
                (retry, scheduled_at, event.id),
            )
            logger.info(
                "event %s rescheduled (retry %d/%d) in %.1fs",
                event.id,
                retry,
                event.max_retry,
                scheduled_at - now,
            )
            return EventState.READY
        await conn.execute(
            """
            UPDATE event_journal
            SET state = 'failed', retry = ?, completed_at = ?, worker_id = NULL
            WHERE id = ?
            """,
            (retry, now, event.id),
        )
        logger.error(
            "event %s failed after %d/%d retries", event.id, retry, event.max_retry
        )
        return EventState.FAILED

