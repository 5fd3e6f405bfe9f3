"""Retry outcome types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RetryStatistics:
    """What happened across the attempts of one retried call."""

    attempts: int = 0
    total_delay: float = 0.0
    start_time: float = 0.0
    end_time: float = 0.0
    exceptions: list[str] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class RetryError(Exception):
    """Raised when a call kept failing until its retries ran out.

    Attributes:
        operation: Name of the retried callable
        last_exception: The error from the final attempt
        attempts: Attempts made, including the first
        statistics: Timing and error history, when collected
    """

    def __init__(
        self,
        last_exception: Exception,
        attempts: int,
        statistics: RetryStatistics | None = None,
        *,
        operation: str = "call",
    ) -> None:
        self.operation = operation
        self.last_exception = last_exception
        self.attempts = attempts
        self.statistics = statistics
        super().__init__(
            f"{operation} failed after {attempts} attempts. Last error: {last_exception}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Summary suitable for ``extra=`` in log calls."""
        summary: dict[str, Any] = {
            "operation": self.operation,
            "attempts": self.attempts,
            "last_exception": type(self.last_exception).__name__,
        }
        if self.statistics is not None:
            summary["total_delay"] = self.statistics.total_delay
            summary["errors"] = list(self.statistics.exceptions)
        return summary
