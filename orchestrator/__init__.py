"""Event orchestration: durable event lifecycle, retry backoff and per-origin processors."""

from orchestrator.dispatcher import Dispatcher
from orchestrator.events import Event, EventRepository, EventState
from orchestrator.processors import Outcome, ProcessorRegistry

__all__ = ["Dispatcher", "Event", "EventRepository", "EventState", "Outcome", "ProcessorRegistry"]
