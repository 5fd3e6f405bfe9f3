"""Helper functions for tracking traversal and retry metrics."""

from __future__ import annotations

import logging

from index_pager.infra.metrics import prometheus

logger = logging.getLogger(__name__)


# ============================================================================
# Traversal Tracking
# ============================================================================


def track_page_fetched(index: str, direction: str, items: int) -> None:
    """Track one successful page fetch.

    Args:
        index: Index the page came from
        direction: Traversal direction ("forward" or "backward")
        items: Number of raw entries on the page

    Example:
            track_page_fetched("customer_id_filter", "forward", 8)
    """
    prometheus.pages_fetched_total.labels(index=index, direction=direction).inc()
    prometheus.page_items.labels(index=index).observe(items)


def track_records_yielded(index: str, count: int) -> None:
    """Track records handed to the caller."""
    if count:
        prometheus.records_yielded_total.labels(index=index).inc(count)


def track_traversal_failure(index: str, kind: str) -> None:
    """Track a traversal entering its failed state.

    Args:
        index: Index being traversed
        kind: Failure kind (e.g. 'fetch', 'materialization', 'misuse')
    """
    prometheus.traversal_failures_total.labels(index=index, kind=kind).inc()


# ============================================================================
# Retry Tracking
# ============================================================================


def track_retry_attempt(operation: str, attempt_number: int) -> None:
    """Track a retry attempt.

    Args:
        operation: Name of the operation being retried
        attempt_number: Current attempt number (1-indexed)

    Example:
            track_retry_attempt("fetch_page", 2)
    """
    prometheus.retry_attempts_total.labels(
        operation=operation,
        attempt_number=str(attempt_number),
    ).inc()


def track_retry_exhausted(operation: str) -> None:
    """Track when all retry attempts are exhausted."""
    prometheus.retry_exhausted_total.labels(operation=operation).inc()


def track_retry_success(operation: str, attempts_needed: int) -> None:
    """Track successful operation after retries."""
    prometheus.retry_success_after_failure_total.labels(
        operation=operation,
        attempts_needed=str(attempts_needed),
    ).inc()
