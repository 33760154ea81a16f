"""Bounded contexts consumed by the event processors."""

from orchestrator.domain.errors import DomainError, DomainErrorKind

__all__ = ["DomainError", "DomainErrorKind"]
