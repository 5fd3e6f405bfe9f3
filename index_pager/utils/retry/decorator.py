"""Retry decorators with exponential backoff.

``retry`` wraps coroutine functions and ``retry_sync`` blocking ones. Both
share the bookkeeping in ``_RetryRun``: a failed attempt either raises (the
error is not retryable, or attempts/time ran out) or yields the delay
before the next one.

Usage:
    @retry_sync(max_attempts=5, initial_delay=0.1, exceptions=(TimeoutError,))
    def fetch(request): ...

    @retry(strategy=RetryStrategy(max_attempts=3, retry_if=is_transient_failure))
    async def afetch(request): ...
"""

from __future__ import annotations

import asyncio
import logging
import time
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

from index_pager.infra.metrics.tracking import (
    track_retry_attempt,
    track_retry_exhausted,
    track_retry_success,
)

from .exceptions import RetryError, RetryStatistics
from .strategies import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


class _RetryRun:
    """State of one decorated call across its attempts."""

    def __init__(self, strategy: RetryStrategy, name: str) -> None:
        self.strategy = strategy
        self.name = name
        self.stats = RetryStatistics(start_time=time.monotonic())

    def succeeded(self) -> None:
        if self.stats.attempts:
            track_retry_success(self.name, self.stats.attempts + 1)
            logger.info(
                f"{self.name} succeeded after {self.stats.attempts + 1} attempts",
                extra={"function": self.name, "attempts": self.stats.attempts + 1},
            )

    def failed(self, attempt: int, error: Exception) -> float:
        """Record failed attempt ``attempt`` (0-based); return the delay or raise."""
        if not self.strategy.should_retry(error):
            logger.debug(
                f"{self.name} raised non-retryable {type(error).__name__}",
                extra={"function": self.name, "exception": str(error)},
            )
            raise error

        self.stats.exceptions.append(type(error).__name__)
        out_of_time = (
            self.strategy.stop_after_delay is not None
            and time.monotonic() - self.stats.start_time >= self.strategy.stop_after_delay
        )
        if out_of_time or attempt + 1 >= self.strategy.max_attempts:
            self.stats.end_time = time.monotonic()
            track_retry_exhausted(self.name)
            exhausted = RetryError(error, attempt + 1, self.stats, operation=self.name)
            logger.error(f"Retries exhausted for {self.name}", extra=exhausted.to_dict())
            raise exhausted from error

        delay = self.strategy.calculate_delay(attempt)
        self.stats.attempts += 1
        self.stats.total_delay += delay
        track_retry_attempt(self.name, attempt + 2)
        logger.warning(
            f"Retrying {self.name} in {delay:.2f}s ({attempt + 1}/{self.strategy.max_attempts} failed)",
            extra={"function": self.name, "attempt": attempt + 1, "delay": delay, "exception": str(error)},
        )
        return delay


def _resolve(strategy: RetryStrategy | None, options: dict[str, Any]) -> RetryStrategy:
    return strategy if strategy is not None else RetryStrategy(**options)


def retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    jitter_range: tuple[float, float] = (0.5, 1.5),
    exceptions: tuple[type[Exception], ...] = (Exception,),
    retry_if: Callable[[Exception], bool] | None = None,
    stop_after_delay: float | None = None,
    on_retry: Callable[[Exception, int], None] | None = None,
    *,
    strategy: RetryStrategy | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry a coroutine function; ``strategy`` replaces the individual options."""
    resolved = _resolve(
        strategy,
        {
            "max_attempts": max_attempts,
            "initial_delay": initial_delay,
            "max_delay": max_delay,
            "exponential_base": exponential_base,
            "jitter": jitter,
            "jitter_range": jitter_range,
            "exceptions": exceptions,
            "retry_if": retry_if,
            "stop_after_delay": stop_after_delay,
        },
    )

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        name = getattr(func, "__name__", type(func).__name__)

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            run = _RetryRun(resolved, name)
            attempt = 0
            while True:
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    delay = run.failed(attempt, e)
                    if on_retry is not None:
                        on_retry(e, attempt + 1)
                    await asyncio.sleep(delay)
                    attempt += 1
                else:
                    run.succeeded()
                    return result

        return wrapper

    return decorator


def retry_sync(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    jitter_range: tuple[float, float] = (0.5, 1.5),
    exceptions: tuple[type[Exception], ...] = (Exception,),
    retry_if: Callable[[Exception], bool] | None = None,
    stop_after_delay: float | None = None,
    on_retry: Callable[[Exception, int], None] | None = None,
    *,
    strategy: RetryStrategy | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Blocking counterpart of ``retry``."""
    resolved = _resolve(
        strategy,
        {
            "max_attempts": max_attempts,
            "initial_delay": initial_delay,
            "max_delay": max_delay,
            "exponential_base": exponential_base,
            "jitter": jitter,
            "jitter_range": jitter_range,
            "exceptions": exceptions,
            "retry_if": retry_if,
            "stop_after_delay": stop_after_delay,
        },
    )

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        name = getattr(func, "__name__", type(func).__name__)

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            run = _RetryRun(resolved, name)
            attempt = 0
            while True:
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    delay = run.failed(attempt, e)
                    if on_retry is not None:
                        on_retry(e, attempt + 1)
                    time.sleep(delay)
                    attempt += 1
                else:
                    run.succeeded()
                    return result

        return wrapper

    return decorator
