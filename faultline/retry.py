"""Bounded retry with exponential backoff for node stop timeouts."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try stopping a node, and how long to wait between tries."""

    max_attempts: int = 5
    base_delay: float = 0.5
    max_delay: float = 8.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")


def get_backoff_seconds(attempt: int, policy: RetryPolicy) -> float:
    """Return seconds to wait after a failed attempt.

    Exponential backoff: base, 2*base, 4*base, ... capped at max_delay.

    Args:
        attempt: Number of attempts made so far (1 after the first failure)
        policy: Retry policy in effect

    Returns:
        Seconds to wait before the next attempt
    """
    return min(policy.max_delay, policy.base_delay * 2 ** (attempt - 1))


@dataclass
class RetryTracker:
    """Tracks attempts for one retried operation."""

    policy: RetryPolicy = field(default_factory=RetryPolicy)
    attempts: int = 0
    sleep: Callable[[float], None] = time.sleep

    @property
    def exhausted(self) -> bool:
        """True once no attempts remain."""
        return self.attempts >= self.policy.max_attempts

    def record_attempt(self) -> int:
        """Record an attempt, return the new attempt count."""
        self.attempts += 1
        return self.attempts

    def wait(self) -> float:
        """Sleep for the backoff after the latest attempt, return the delay."""
        delay = get_backoff_seconds(self.attempts, self.policy)
        self.sleep(delay)
        return delay
