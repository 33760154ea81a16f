"""Envelope codec: type tag -> pydantic payload model."""

import logging

from pydantic import BaseModel, ValidationError

from orchestrator.events.errors import EventDecodeError

logger = logging.getLogger(__name__)

__all__ = ["EventCodec"]


class EventCodec:
    """Registry of payload models keyed by event type tag. Decoding fails closed."""

    def __init__(self) -> None:
        self._models: dict[str, type[BaseModel]] = {}

    def register(self, event_type: str, model: type[BaseModel]) -> None:
        existing = self._models.get(event_type)
        if existing is not None and existing is not model:
            raise ValueError(
                f"event type {event_type} already registered to {existing.__name__}"
            )
        self._models[event_type] = model

    def __contains__(self, event_type: object) -> bool:
        return event_type in self._models

    def types(self) -> list[str]:
        return sorted(self._models)

    def model_for(self, event_type: str) -> type[BaseModel]:
        try:
            return self._models[event_type]
        except KeyError:
            raise EventDecodeError(event_type, "unregistered event type") from None

    def decode(self, event_type: str, data: bytes | str | None) -> BaseModel:
        """Decode raw payload into the model registered for event_type."""
        model = self.model_for(event_type)
        if not data or not data.strip():
            raise EventDecodeError(event_type, "empty payload")
        try:
            return model.model_validate_json(data)
        except ValidationError as e:
            logger.debug("codec: %s payload rejected: %s", event_type, e)
            raise EventDecodeError(event_type, str(e)) from e

    def encode(self, payload: BaseModel) -> bytes:
        return payload.model_dump_json(by_alias=True).encode("utf-8")
