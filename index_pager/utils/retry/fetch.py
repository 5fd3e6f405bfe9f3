"""Retry wrappers for page-fetch functions.

The traversal never retries on its own. Callers that want resilience wrap
the fetch function before handing it over:

    fetch = retrying_fetch(index.fetch, RetryStrategy(max_attempts=5, initial_delay=0.1))
    for customer in PageCursorIterator(fetch, page_size=8):
        ...

Only transient fetch failures are retried by default; a permanent failure
is raised on the first attempt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from index_pager.core.exceptions import FetchFailure

from .decorator import retry, retry_sync
from .strategies import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from index_pager.core.pagination.schemas import Page, PageRequest


def is_transient_failure(exc: Exception) -> bool:
    """Return True for errors worth retrying."""
    if isinstance(exc, FetchFailure):
        return exc.transient
    return isinstance(exc, (TimeoutError, ConnectionError))


def _default_strategy() -> RetryStrategy:
    return RetryStrategy(
        max_attempts=3,
        initial_delay=0.2,
        max_delay=5.0,
        retry_if=is_transient_failure,
    )


def retrying_fetch(
    fetch: Callable[[PageRequest], Page[Any]],
    strategy: RetryStrategy | None = None,
) -> Callable[[PageRequest], Page[Any]]:
    """Wrap a blocking fetch function with retries on transient failures."""
    return retry_sync(strategy=strategy or _default_strategy())(fetch)


def retrying_async_fetch(
    fetch: Callable[[PageRequest], Awaitable[Page[Any]]],
    strategy: RetryStrategy | None = None,
) -> Callable[[PageRequest], Awaitable[Page[Any]]]:
    """Wrap a coroutine fetch function with retries on transient failures."""
    return retry(strategy=strategy or _default_strategy())(fetch)
