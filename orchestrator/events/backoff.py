"""Retry backoff: how far to push scheduled_at after a retryable failure."""

import random
from dataclasses import dataclass
from typing import Any

__all__ = ["RetryPolicy"]


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with an optional non-negative jitter.

    delay(n) = min(base_delay * multiplier ** (n - 1), max_delay), where n is
    the retry count after the increment (first retry is n=1). Jitter only ever
    adds time, so next_schedule() is strictly greater than both the prior
    schedule and now.
    """

    base_delay: float = 5.0
    max_delay: float = 300.0
    multiplier: float = 2.0
    jitter: float = 0.0

    def __post_init__(self) -> None:
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.jitter < 0:
            raise ValueError("jitter must be >= 0")

    @classmethod
    def from_settings(cls, cfg: dict[str, Any]) -> "RetryPolicy":
        return cls(
            base_delay=float(cfg.get("base_delay", 5.0)),
            max_delay=float(cfg.get("max_delay", 300.0)),
            multiplier=float(cfg.get("multiplier", 2.0)),
            jitter=float(cfg.get("jitter", 0.0)),
        )

    def delay(self, retry: int) -> float:
        """Delay in seconds before attempt number `retry` + 1."""
        exponent = max(retry - 1, 0)
        delay = min(self.base_delay * (self.multiplier**exponent), self.max_delay)
        if self.jitter:
            delay += random.uniform(0, delay * self.jitter)
        return delay

    def next_schedule(self, prior: float, retry: int, now: float) -> float:
        return max(prior, now) + self.delay(retry)
