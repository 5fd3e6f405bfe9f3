from __future__ import annotations

from index_pager.utils.retry.decorator import retry, retry_sync
from index_pager.utils.retry.exceptions import RetryError, RetryStatistics
from index_pager.utils.retry.fetch import (
    is_transient_failure,
    retrying_async_fetch,
    retrying_fetch,
)
from index_pager.utils.retry.strategies import RetryStrategy

__all__ = [
    "RetryError",
    "RetryStatistics",
    "RetryStrategy",
    "is_transient_failure",
    "retry",
    "retry_sync",
    "retrying_async_fetch",
    "retrying_fetch",
]
