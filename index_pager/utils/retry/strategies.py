"""Backoff policy for retried calls."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryStrategy:
    """How many times to retry, how long to wait, and which errors qualify.

    The delay before retry ``n`` (0-based) is
    ``initial_delay * exponential_base ** n``, capped at ``max_delay`` and
    scaled by a random factor from ``jitter_range`` when ``jitter`` is on.

    ``retry_if`` takes precedence over ``exceptions`` when both are given.

    Example:
        RetryStrategy(max_attempts=5, initial_delay=0.1, retry_if=is_transient_failure)
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_range: tuple[float, float] = (0.5, 1.5)
    exceptions: tuple[type[Exception], ...] = (Exception,)
    retry_if: Callable[[Exception], bool] | None = None
    stop_after_delay: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {self.max_attempts}"
            raise ValueError(msg)
        if self.initial_delay < 0 or self.max_delay < 0:
            msg = "Retry delays cannot be negative"
            raise ValueError(msg)

    def should_retry(self, exception: Exception) -> bool:
        """Return True if ``exception`` is worth another attempt."""
        if self.retry_if is not None:
            return self.retry_if(exception)
        return isinstance(exception, self.exceptions)

    def calculate_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (0-based)."""
        delay = min(self.initial_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            low, high = self.jitter_range
            delay *= random.uniform(low, high)
        return delay

    def delays(self) -> Iterator[float]:
        """Delays between consecutive attempts, one fewer than ``max_attempts``."""
        for attempt in range(self.max_attempts - 1):
            yield self.calculate_delay(attempt)
