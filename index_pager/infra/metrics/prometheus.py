"""Prometheus registry and metric definitions for index traversal."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram

REGISTRY = CollectorRegistry()

DEFAULT_PAGE_SIZE_BUCKETS = (0, 1, 8, 16, 64, 256, 1024, 4096, 16384, 100_000)

# ============================================================================
# Traversal Metrics
# ============================================================================

pages_fetched_total = Counter(
    "index_pages_fetched_total",
    "Total number of pages fetched by index and direction",
    ["index", "direction"],
    registry=REGISTRY,
)

page_items = Histogram(
    "index_page_items",
    "Number of raw entries returned per page",
    ["index"],
    buckets=DEFAULT_PAGE_SIZE_BUCKETS,
    registry=REGISTRY,
)

records_yielded_total = Counter(
    "index_records_yielded_total",
    "Total number of materialized records handed to callers",
    ["index"],
    registry=REGISTRY,
)

traversal_failures_total = Counter(
    "index_traversal_failures_total",
    "Total number of failed traversals by failure kind",
    ["index", "kind"],
    registry=REGISTRY,
)

# ============================================================================
# Retry Metrics
# ============================================================================

retry_attempts_total = Counter(
    "retry_attempts_total",
    "Total number of retry attempts",
    ["operation", "attempt_number"],
    registry=REGISTRY,
)

retry_exhausted_total = Counter(
    "retry_exhausted_total",
    "Total number of operations that exhausted all retries",
    ["operation"],
    registry=REGISTRY,
)

retry_success_after_failure_total = Counter(
    "retry_success_after_failure_total",
    "Total number of operations that succeeded after retry",
    ["operation", "attempts_needed"],
    registry=REGISTRY,
)
