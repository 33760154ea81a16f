"""Per-origin event processors and the origin registry."""

from orchestrator.processors.account import AccountProcessor
from orchestrator.processors.base import EventProcessor, Outcome
from orchestrator.processors.customer import CustomerProcessor
from orchestrator.processors.registry import ProcessorRegistry

__all__ = [
    "AccountProcessor",
    "CustomerProcessor",
    "EventProcessor",
    "Outcome",
    "ProcessorRegistry",
]
