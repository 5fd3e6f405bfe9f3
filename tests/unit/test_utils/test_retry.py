"""Unit tests for retry utilities and retrying fetch wrappers."""
from __future__ import annotations

import pytest

from index_pager.core.exceptions import FetchFailure, PermanentFetchError, TransientFetchError
from index_pager.core.pagination import AsyncPageCursorIterator, PageCursorIterator
from index_pager.utils.retry import (
    RetryError,
    RetryStrategy,
    is_transient_failure,
    retry,
    retry_sync,
    retrying_async_fetch,
    retrying_fetch,
)
from tests.conftest import page

NO_WAIT = RetryStrategy(max_attempts=3, initial_delay=0, jitter=False, retry_if=is_transient_failure)


@pytest.mark.unit
class TestRetryStrategy:
    """Tests for RetryStrategy."""

    def test_exponential_delay(self):
        strategy = RetryStrategy(initial_delay=1.0, exponential_base=2.0, jitter=False)

        assert [strategy.calculate_delay(a) for a in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_delay_capped(self):
        strategy = RetryStrategy(initial_delay=1.0, max_delay=3.0, jitter=False)

        assert strategy.calculate_delay(10) == 3.0

    def test_jitter_within_range(self):
        strategy = RetryStrategy(initial_delay=1.0, jitter=True, jitter_range=(0.5, 1.5))

        assert 0.5 <= strategy.calculate_delay(0) <= 1.5

    def test_should_retry_by_type(self):
        strategy = RetryStrategy(exceptions=(ConnectionError,))

        assert strategy.should_retry(ConnectionError()) is True
        assert strategy.should_retry(ValueError()) is False

    def test_at_least_one_attempt(self):
        with pytest.raises(ValueError, match="max_attempts"):
            RetryStrategy(max_attempts=0)

    def test_delays_between_attempts(self):
        strategy = RetryStrategy(max_attempts=4, initial_delay=0.5, jitter=False)

        assert list(strategy.delays()) == [0.5, 1.0, 2.0]

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            RetryStrategy(initial_delay=-1)


@pytest.mark.unit
class TestTransientClassification:
    """Tests for is_transient_failure."""

    def test_fetch_failures(self):
        assert is_transient_failure(TransientFetchError("slow")) is True
        assert is_transient_failure(PermanentFetchError("denied")) is False

    def test_builtin_errors(self):
        assert is_transient_failure(TimeoutError()) is True
        assert is_transient_failure(ConnectionResetError()) is True
        assert is_transient_failure(KeyError("x")) is False


@pytest.mark.unit
class TestRetrySync:
    """Tests for retry_sync decorator."""

    def test_succeeds_after_failures(self):
        calls = []

        @retry_sync(max_attempts=3, initial_delay=0, jitter=False)
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("reset")
            return "ok"

        assert flaky() == "ok"
        assert len(calls) == 3

    def test_exhausted(self):
        @retry_sync(max_attempts=2, initial_delay=0, jitter=False)
        def always_fails():
            raise ConnectionError("reset")

        with pytest.raises(RetryError) as exc_info:
            always_fails()

        assert exc_info.value.attempts == 2
        assert isinstance(exc_info.value.last_exception, ConnectionError)
        assert exc_info.value.operation == "always_fails"
        assert exc_info.value.to_dict()["attempts"] == 2

    def test_non_retryable_raised_immediately(self):
        calls = []

        @retry_sync(max_attempts=3, initial_delay=0, exceptions=(ConnectionError,))
        def broken():
            calls.append(1)
            raise ValueError("bad")

        with pytest.raises(ValueError):
            broken()
        assert len(calls) == 1

    def test_on_retry_callback(self):
        seen = []
        state = {"n": 0}

        @retry_sync(max_attempts=3, initial_delay=0, jitter=False, on_retry=lambda e, n: seen.append(n))
        def flaky():
            state["n"] += 1
            if state["n"] == 1:
                raise TimeoutError
            return state["n"]

        assert flaky() == 2
        assert seen == [1]


@pytest.mark.unit
@pytest.mark.asyncio
class TestRetryAsync:
    """Tests for the async retry decorator."""

    async def test_succeeds_after_failure(self):
        state = {"n": 0}

        @retry(max_attempts=3, initial_delay=0, jitter=False)
        async def flaky():
            state["n"] += 1
            if state["n"] == 1:
                raise TimeoutError
            return "ok"

        assert await flaky() == "ok"
        assert state["n"] == 2

    async def test_exhausted(self):
        @retry(max_attempts=2, initial_delay=0, jitter=False)
        async def always_fails():
            raise TimeoutError

        with pytest.raises(RetryError):
            await always_fails()


@pytest.mark.unit
class TestRetryingFetch:
    """Tests for wrapping fetch functions in retries."""

    def test_transient_failure_retried(self, scripted_fetch):
        fetch = scripted_fetch([TransientFetchError("reset"), page([1, 2])])

        pager = PageCursorIterator(retrying_fetch(fetch, NO_WAIT), page_size=2)

        assert list(pager) == [1, 2]
        assert fetch.calls == 2
        assert fetch.requests[0] == fetch.requests[1]

    def test_permanent_failure_not_retried(self, scripted_fetch):
        original = PermanentFetchError("denied")
        fetch = scripted_fetch([original])

        pager = PageCursorIterator(retrying_fetch(fetch, NO_WAIT), page_size=2)

        with pytest.raises(PermanentFetchError) as exc_info:
            next(pager)
        assert exc_info.value is original
        assert fetch.calls == 1

    def test_exhausted_retries_fail_traversal(self, scripted_fetch):
        fetch = scripted_fetch([TimeoutError("slow")] * 3)

        pager = PageCursorIterator(retrying_fetch(fetch, NO_WAIT), page_size=2)

        with pytest.raises(FetchFailure) as exc_info:
            next(pager)
        assert isinstance(exc_info.value.__cause__, RetryError)
        assert fetch.calls == 3

    @pytest.mark.asyncio
    async def test_async_wrapper(self, async_scripted_fetch):
        fetch = async_scripted_fetch([TimeoutError("slow"), page([7])])

        pager = AsyncPageCursorIterator(retrying_async_fetch(fetch, NO_WAIT), page_size=1)

        assert await pager.collect() == [7]
        assert fetch.calls == 2
