"""Errors raised by the event journal, gateway and codec."""


class OrchestratorError(Exception):
    """Base class for orchestration errors."""


class EventNotFoundError(OrchestratorError):
    """No event with the given id exists in the journal."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"event {event_id} not found")
        self.event_id = event_id


class EventTransitionError(OrchestratorError):
    """Command would move an event along a transition the lifecycle forbids."""

    def __init__(self, event_id: str, state: str, action: str) -> None:
        super().__init__(f"cannot {action} event {event_id} in state '{state}'")
        self.event_id = event_id
        self.state = state
        self.action = action


class EventDecodeError(OrchestratorError):
    """Payload could not be decoded into the shape declared by its type tag."""

    def __init__(self, event_type: str, reason: str) -> None:
        super().__init__(f"decode {event_type}: {reason}")
        self.event_type = event_type
        self.reason = reason
