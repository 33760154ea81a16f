"""Event model for the orchestration journal."""

from dataclasses import dataclass
from enum import Enum

__all__ = ["Event", "EventState", "TERMINAL_STATES"]


class EventState(str, Enum):
    """Lifecycle state of a journal event."""

    READY = "ready"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"
    UNPROCESSABLE = "unprocessable"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {
        EventState.COMPLETED,
        EventState.FAILED,
        EventState.ABORTED,
        EventState.UNPROCESSABLE,
    }
)


@dataclass(frozen=True)
class Event:
    """Immutable snapshot of a journal row passed to processors."""

    id: str
    context_id: str
    origin: str
    type: str
    type_version: str
    state: EventState
    created_at: float
    scheduled_at: float
    started_at: float | None = None
    completed_at: float | None = None
    retry: int = 0
    max_retry: int = 3
    data: bytes = b""
    worker_id: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal
