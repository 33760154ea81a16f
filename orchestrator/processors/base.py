"""Processor base: type tag -> payload model -> handler, plus outcome recording."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from orchestrator.domain.errors import DomainError, DomainErrorKind
from orchestrator.events.codec import EventCodec
from orchestrator.events.models import Event, EventState
from orchestrator.events.repository import EventGateway

logger = logging.getLogger(__name__)

__all__ = ["EventProcessor", "Outcome"]

Handler = Callable[[str, Any], Awaitable[Any]]


class Outcome(str, Enum):
    """What a processor recorded for an event."""

    COMPLETED = "completed"
    FAILED = "failed"
    RETRY = "retry"
    UNPROCESSABLE = "unprocessable"


# Domain refusals that retrying cannot fix. ALREADY_EXISTS on a create is
# handled before this table is consulted.
_DOMAIN_OUTCOMES: dict[DomainErrorKind, Outcome] = {
    DomainErrorKind.ALREADY_EXISTS: Outcome.FAILED,
    DomainErrorKind.NOT_FOUND: Outcome.FAILED,
    DomainErrorKind.INSUFFICIENT_FUNDS: Outcome.FAILED,
    DomainErrorKind.INVALID: Outcome.FAILED,
}


@dataclass(frozen=True)
class Route:
    model: type[BaseModel]
    handler: Handler
    creates: bool = False


class EventProcessor:
    """Applies events of one origin through a domain repository.

    Subclasses register one route per event type in register_routes(). The
    handler receives (context_id, payload) and signals domain refusals by
    raising DomainError; anything else it raises is treated as transient.
    """

    origin: str = ""

    def __init__(self, gateway: EventGateway, codec: EventCodec | None = None) -> None:
        self._gateway = gateway
        self._codec = codec or EventCodec()
        self._routes: dict[str, Route] = {}
        self.register_routes()

    def register_routes(self) -> None:
        """Hook for subclasses."""

    def route(
        self,
        event_type: str,
        model: type[BaseModel],
        handler: Handler,
        *,
        creates: bool = False,
    ) -> None:
        if event_type in self._routes:
            raise ValueError(f"{self.origin}: route for {event_type} already registered")
        self._codec.register(event_type, model)
        self._routes[event_type] = Route(model=model, handler=handler, creates=creates)

    @property
    def codec(self) -> EventCodec:
        return self._codec

    @property
    def handled_types(self) -> list[str]:
        return sorted(self._routes)

    async def process(self, event: Event) -> Outcome:
        """Decode, apply and record the outcome of one event.

        Raises EventDecodeError without touching the lifecycle when the payload
        does not decode. Gateway errors while recording propagate.
        """
        route = self._routes.get(event.type)
        if route is None:
            logger.warning(
                "%s processor: unknown event type %s for event %s",
                self.origin,
                event.type,
                event.id,
            )
            await self._gateway.force_state(event.id, EventState.UNPROCESSABLE)
            return Outcome.UNPROCESSABLE

        payload = self._codec.decode(event.type, event.data)
        outcome = await self._apply(event, route, payload)
        await self._record(event, outcome)
        return outcome

    async def _apply(self, event: Event, route: Route, payload: BaseModel) -> Outcome:
        try:
            await route.handler(event.context_id, payload)
        except DomainError as e:
            return self._classify(event, route, e)
        except Exception as e:
            logger.warning(
                "%s processor: transient failure on %s/%s (attempt %d/%d): %s",
                self.origin,
                event.type,
                event.id,
                event.retry + 1,
                event.max_retry,
                e,
            )
            return Outcome.RETRY
        return Outcome.COMPLETED

    def _classify(self, event: Event, route: Route, error: DomainError) -> Outcome:
        if error.kind is DomainErrorKind.ALREADY_EXISTS and route.creates:
            logger.info(
                "%s processor: %s for event %s already applied, completing",
                self.origin,
                event.type,
                event.id,
            )
            return Outcome.COMPLETED
        outcome = _DOMAIN_OUTCOMES[error.kind]
        logger.error(
            "%s processor: %s for event %s refused (%s): %s",
            self.origin,
            event.type,
            event.id,
            error.kind.value,
            error,
        )
        return outcome

    async def _record(self, event: Event, outcome: Outcome) -> None:
        if outcome is Outcome.COMPLETED:
            await self._gateway.mark_completed(event.id)
        elif outcome is Outcome.RETRY:
            await self._gateway.mark_retry(event.id)
        else:
            await self._gateway.force_state(event.id, EventState(outcome.value))
