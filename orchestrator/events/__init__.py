"""Event journal: durable lifecycle store, gateway, codec and backoff policy."""

from orchestrator.events.backoff import RetryPolicy
from orchestrator.events.codec import EventCodec
from orchestrator.events.errors import (
    EventDecodeError,
    EventNotFoundError,
    EventTransitionError,
    OrchestratorError,
)
from orchestrator.events.journal import EventJournal
from orchestrator.events.models import Event, EventState
from orchestrator.events.repository import EventGateway, EventRepository

__all__ = [
    "Event",
    "EventCodec",
    "EventDecodeError",
    "EventGateway",
    "EventJournal",
    "EventNotFoundError",
    "EventRepository",
    "EventState",
    "EventTransitionError",
    "OrchestratorError",
    "RetryPolicy",
]
