"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: cache isolation and explicit settings instances
    - Index Fixtures: in-memory indexes seeded with customer entries
    - Fetch Fixtures: scripted fetch functions for driving the iterator
      through exact page sequences and failures

When adding new features:
    1. Add fixtures to the appropriate section below
    2. Use @pytest.fixture with clear docstrings
    3. Make fixtures composable (fixtures can depend on other fixtures)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from typing import Any

import pytest

from index_pager.core.pagination import Page, PageRequest
from index_pager.core.settings import PaginationSettings, clear_all_caches
from index_pager.infra.logging import config as log_config
from index_pager.infra.store import MemoryIndex

# Keep tests independent of a developer's environment
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("STORE_DATABASE_URL", "sqlite:///:memory:")


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings before and after every test."""
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def pagination_settings() -> PaginationSettings:
    """Default pagination settings, independent of the environment."""
    return PaginationSettings(default_page_size=64, max_page_size=100_000, max_pages=None)


# ============================================================================
# Index Fixtures
# ============================================================================


def customer_entries(count: int) -> list[tuple[int, str]]:
    """Build ``(id, ref)`` entries for customers 1..count."""
    return [(i, f"customers/{i}") for i in range(1, count + 1)]


@pytest.fixture
def customer_index() -> MemoryIndex:
    """Index of twenty customer entries keyed 1..20."""
    return MemoryIndex("customer_id_filter", customer_entries(20))


@pytest.fixture
def empty_index() -> MemoryIndex:
    """Index with no entries."""
    return MemoryIndex("empty")


# ============================================================================
# Fetch Fixtures
# ============================================================================


class ScriptedFetch:
    """Fetch function that replays a fixed sequence of outcomes.

    Each step is either a ``Page`` (returned) or an exception (raised).
    Every request is recorded. Running past the script fails the test.

    Example:
        fetch = ScriptedFetch([Page(items=[1], after="c1"), TimeoutError("slow")])
    """

    def __init__(self, steps: Iterable[Any]) -> None:
        self.steps = list(steps)
        self.requests: list[PageRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: PageRequest) -> Any:
        self.requests.append(request)
        if len(self.requests) > len(self.steps):
            pytest.fail(f"Unexpected fetch #{len(self.requests)}: {request!r}")
        step = self.steps[len(self.requests) - 1]
        if isinstance(step, BaseException):
            raise step
        return step


class AsyncScriptedFetch(ScriptedFetch):
    """Coroutine form of ``ScriptedFetch``."""

    async def __call__(self, request: PageRequest) -> Any:  # type: ignore[override]
        return ScriptedFetch.__call__(self, request)


@pytest.fixture
def scripted_fetch():
    """Factory for ``ScriptedFetch`` instances."""
    return ScriptedFetch


@pytest.fixture
def async_scripted_fetch():
    """Factory for ``AsyncScriptedFetch`` instances."""
    return AsyncScriptedFetch


def page(items: list[Any], after: str | None = None, before: str | None = None) -> Page[Any]:
    """Shorthand for building a page in tests."""
    return Page(items=items, after=after, before=before)


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def restore_root_logger():
    """Undo queue logging set up by a test (or by a CLI invocation)."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    log_config._LOGGING_INITIALIZED = False
    yield root
    log_config.shutdown()
    root.handlers = handlers
    root.setLevel(level)
    logging.captureWarnings(False)
    log_config._LOGGING_INITIALIZED = False
