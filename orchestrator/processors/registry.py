"""Routes events to the processor registered for their origin."""

import logging

from orchestrator.events.models import Event, EventState
from orchestrator.events.repository import EventGateway
from orchestrator.processors.base import EventProcessor, Outcome

logger = logging.getLogger(__name__)


class ProcessorRegistry:
    """origin -> EventProcessor. Events from an unknown origin are unprocessable."""

    def __init__(self, gateway: EventGateway) -> None:
        self._gateway = gateway
        self._processors: dict[str, EventProcessor] = {}

    def register(self, processor: EventProcessor, origin: str | None = None) -> None:
        origin = origin or processor.origin
        if not origin:
            raise ValueError(f"{type(processor).__name__} has no origin")
        if origin in self._processors:
            raise ValueError(f"processor for origin '{origin}' already registered")
        self._processors[origin] = processor

    def get(self, origin: str) -> EventProcessor | None:
        return self._processors.get(origin)

    @property
    def origins(self) -> list[str]:
        return sorted(self._processors)

    async def process(self, event: Event) -> Outcome:
        processor = self._processors.get(event.origin)
        if processor is None:
            logger.warning(
                "no processor for origin '%s' (event %s/%s)",
                event.origin,
                event.type,
                event.id,
            )
            await self._gateway.force_state(event.id, EventState.UNPROCESSABLE)
            return Outcome.UNPROCESSABLE
        return await processor.process(event)
