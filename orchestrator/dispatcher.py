"""Polling dispatch loop: claim ready events, hand them to processors.
No business logic here; outcomes are recorded by the processors."""

import asyncio
import logging
import uuid

from orchestrator.events.errors import EventDecodeError
from orchestrator.events.models import Event, EventState
from orchestrator.events.repository import EventRepository
from orchestrator.processors.registry import ProcessorRegistry

logger = logging.getLogger(__name__)


class Dispatcher:
    """Claims due events in batches and processes them one at a time."""

    def __init__(
        self,
        repository: EventRepository,
        registry: ProcessorRegistry,
        worker_id: str | None = None,
        poll_interval: float = 5.0,
        batch_size: int = 3,
        stale_timeout: float = 300.0,
        watchdog_interval: float = 30.0,
        shutdown_timeout: float = 30.0,
    ) -> None:
        self._repository = repository
        self._registry = registry
        self._worker_id = worker_id or f"worker-{uuid.uuid4().hex[:8]}"
        self._poll_interval = poll_interval
        self._batch_size = batch_size
        self._stale_timeout = stale_timeout
        self._watchdog_interval = watchdog_interval
        self._shutdown_timeout = shutdown_timeout
        self._wake = asyncio.Event()
        self._dispatch_task: asyncio.Task[None] | None = None
        self._watchdog_task: asyncio.Task[None] | None = None
        self._stopped = False

    @property
    def worker_id(self) -> str:
        return self._worker_id

    @property
    def repository(self) -> EventRepository:
        return self._repository

    def wake(self) -> None:
        """Skip the rest of the current poll wait (e.g. after appending an event)."""
        self._wake.set()

    async def start(self) -> None:
        """Start the dispatch loop and watchdog as asyncio Tasks."""
        self._stopped = False
        self._dispatch_task = asyncio.create_task(self._dispatch_loop())
        self._watchdog_task = asyncio.create_task(self._watchdog_loop())
        logger.info("Dispatcher %s started", self._worker_id)

    async def stop(self) -> None:
        """Graceful shutdown: the batch in flight finishes, then the loops exit.
        The dispatch task is cancelled if it overruns shutdown_timeout."""
        self._stopped = True
        self._wake.set()
        if self._watchdog_task:
            self._watchdog_task.cancel()
            try:
                await self._watchdog_task
            except asyncio.CancelledError:
                pass
            self._watchdog_task = None
        if self._dispatch_task:
            try:
                await asyncio.wait_for(self._dispatch_task, timeout=self._shutdown_timeout)
            except asyncio.TimeoutError:
                logger.warning("Dispatcher %s: batch overran shutdown, cancelled", self._worker_id)
            except asyncio.CancelledError:
                pass
            self._dispatch_task = None
        logger.info("Dispatcher %s stopped", self._worker_id)

    async def run_once(self) -> int:
        """Claim one batch and process it. Returns the number of events handled."""
        events = await self._repository.claim_processable(
            limit=self._batch_size, worker_id=self._worker_id
        )
        for event in events:
            await self._handle(event)
        return len(events)

    async def recover_stale(self) -> tuple[int, int]:
        rescheduled, failed = await self._repository.recover_stale(self._stale_timeout)
        if rescheduled or failed:
            logger.info(
                "Dispatcher watchdog: rescheduled %d stale, failed %d",
                rescheduled,
                failed,
            )
        return rescheduled, failed

    async def _handle(self, event: Event) -> None:
        try:
            outcome = await self._registry.process(event)
        except EventDecodeError as e:
            # A payload that does not decode now never will.
            logger.error("event %s has a malformed payload: %s", event.id, e)
            try:
                await self._repository.force_state(event.id, EventState.FAILED)
            except Exception as record_error:
                logger.exception(
                    "Dispatcher: failing malformed %s/%s failed, left for watchdog: %s",
                    event.type,
                    event.id,
                    record_error,
                )
        except Exception as e:
            logger.exception(
                "Dispatcher: processing %s/%s failed, left for watchdog: %s",
                event.type,
                event.id,
                e,
            )
        else:
            logger.debug("event %s/%s -> %s", event.type, event.id, outcome.value)

    async def _dispatch_loop(self) -> None:
        """Main loop: wait for work, claim due events, deliver to processors."""
        while not self._stopped:
            handled = 0
            try:
                handled = await self.run_once()
            except Exception as e:
                logger.exception("Dispatcher: claim failed: %s", e)
            if handled >= self._batch_size:
                continue
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass
            self._wake.clear()

    async def _watchdog_loop(self) -> None:
        """Periodically reschedule events stuck in 'processing'."""
        while not self._stopped:
            try:
                await asyncio.sleep(self._watchdog_interval)
            except asyncio.CancelledError:
                break
            if self._stopped:
                break
            try:
                await self.recover_stale()
            except Exception as e:
                logger.exception("Dispatcher watchdog failed: %s", e)
