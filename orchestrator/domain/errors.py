"""Domain error kinds reported by read-side repositories."""

from enum import Enum


class DomainErrorKind(str, Enum):
    """Why a domain repository refused an operation."""

    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID = "invalid"


class DomainError(Exception):
    """Raised by domain repositories. Processors switch on `kind`."""

    def __init__(self, kind: DomainErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value.replace("_", " "))
        self.kind = kind
