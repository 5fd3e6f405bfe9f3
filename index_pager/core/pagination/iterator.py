"""Cursor-driven traversal of a paginated index.

``PageCursorIterator`` turns a page-fetch function into a lazy stream of
records. It asks the store for one page at a time, keeps the entries that
pass the range filter, materializes them, and follows the continuation
cursor of each page until the store stops handing one out.

State machine:

    IDLE --next()--> FETCHING --page with records--> BUFFERED
    FETCHING --empty page, no cursor--> EXHAUSTED
    FETCHING --fetch or materialization fails--> FAILED
    BUFFERED --buffer drains, cursor present--> FETCHING
    BUFFERED --buffer drains, no cursor--> EXHAUSTED

EXHAUSTED and FAILED are terminal. An exhausted iterator keeps raising
``StopIteration`` and a failed one keeps raising its failure, neither of
them issuing another request.

Usage:
    from index_pager.core.pagination import PageCursorIterator, RangeQuery

    customers = PageCursorIterator.for_range(
        index.fetch,
        RangeQuery(lower=5, upper=11),
        page_size=8,
        materialize=to_customer,
    )
    for customer in customers:
        print(customer)

``AsyncPageCursorIterator`` runs the same state machine over a coroutine
fetch function and is consumed with ``async for``.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator, Sequence
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from index_pager.core.exceptions import (
    CursorStalledError,
    FetchFailure,
    MaterializationFailure,
    MisuseFailure,
    PageLimitExceeded,
    PaginationException,
)
from index_pager.core.pagination.filters import (
    AcceptAll,
    KeyFunc,
    RangeFilter,
    RangeQuery,
    first_component,
)
from index_pager.core.pagination.schemas import CursorPosition, Direction, Page, PageRequest
from index_pager.core.settings import PaginationSettings, get_pagination_settings
from index_pager.infra.metrics.tracking import (
    track_page_fetched,
    track_records_yielded,
    track_traversal_failure,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

Materializer = Callable[[Any], T]
FetchFn = Callable[[PageRequest], Page[Any]]
AsyncFetchFn = Callable[[PageRequest], Awaitable[Page[Any]]]


class PagerState(StrEnum):
    """Lifecycle states of a traversal."""

    IDLE = "idle"
    FETCHING = "fetching"
    BUFFERED = "buffered"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


def identity(raw: Any) -> Any:
    """Materializer that hands raw entries through unchanged."""
    return raw


def model_materializer(
    model: type[M],
    fields: Sequence[str] | None = None,
) -> Callable[[Any], M]:
    """Build a materializer that validates raw entries into a pydantic model.

    Args:
        model: Target model class
        fields: Field names for tuple/list entries, matched by position.
            Mapping entries are validated directly.

    Example:
        to_customer = model_materializer(Customer, fields=("id", "balance"))
        to_customer((7, 70))  # Customer(id=7, balance=70)
    """

    def materialize(raw: Any) -> M:
        if fields is not None and isinstance(raw, (tuple, list)):
            if len(raw) != len(fields):
                msg = f"Expected {len(fields)} values, got {len(raw)}"
                raise ValueError(msg)
            raw = dict(zip(fields, raw, strict=True))
        return model.model_validate(raw)

    return materialize


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, (TimeoutError, ConnectionError))


class _PageCursorBase(Generic[T]):
    """State machine shared by the sync and async iterators.

    Subclasses only differ in how they call ``fetch``.
    """

    def __init__(
        self,
        fetch: Callable[[PageRequest], Any],
        page_size: int | None = None,
        *,
        range_filter: RangeFilter | None = None,
        upper_bound: Any = None,
        upper_inclusive: bool = True,
        direction: Direction = "forward",
        materialize: Materializer[T] = identity,
        index: str = "default",
        settings: PaginationSettings | None = None,
    ) -> None:
        """Initialize the traversal.

        Args:
            fetch: Page-fetch function, the only link to the store
            page_size: Requested entries per page (settings default if None)
            range_filter: Client-side predicate over raw entries
            upper_bound: Store-side upper bound sent with every request
            upper_inclusive: Whether the upper bound itself qualifies
            direction: "forward" follows ``after`` cursors, "backward"
                follows ``before`` cursors
            materialize: Converts a raw entry into a record
            index: Identity of the index being traversed
            settings: Pagination settings (cached settings if None)

        Raises:
            MisuseFailure: If page_size is not a positive integer or the
                direction is unknown
        """
        settings = settings or get_pagination_settings()

        if page_size is None:
            page_size = settings.default_page_size
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            raise MisuseFailure(
                detail=f"page_size must be a positive integer, got {page_size!r}",
                extra={"page_size": page_size},
            )
        if page_size > settings.max_page_size:
            logger.warning(
                f"Requested page size {page_size} exceeds store maximum, capping",
                extra={"index": index, "page_size": page_size, "max_page_size": settings.max_page_size},
            )
            page_size = settings.max_page_size
        if direction not in ("forward", "backward"):
            raise MisuseFailure(
                detail=f"direction must be 'forward' or 'backward', got {direction!r}",
                extra={"direction": direction},
            )

        self._fetch = fetch
        self.page_size = page_size
        self.range_filter = range_filter or AcceptAll()
        self.upper_bound = upper_bound
        self.upper_inclusive = upper_inclusive
        self.direction: Direction = direction
        self.index = index
        self._materialize = materialize
        self._max_pages = settings.max_pages

        self._state = PagerState.IDLE
        self._buffer: deque[T] = deque()
        self._cursor: CursorPosition | None = None
        self._failure: PaginationException | None = None
        self._pages_fetched = 0
        self._records_yielded = 0

    @classmethod
    def for_range(
        cls,
        fetch: Callable[[PageRequest], Any],
        query: RangeQuery,
        page_size: int | None = None,
        *,
        key: KeyFunc = first_component,
        **kwargs: Any,
    ):
        """Build a traversal over a key range.

        The lower bound becomes the client-side filter and the upper bound
        is sent to the store with every request.
        """
        range_filter, upper_bound = query.split(key)
        return cls(
            fetch,
            page_size,
            range_filter=range_filter,
            upper_bound=upper_bound,
            upper_inclusive=query.upper_inclusive,
            **kwargs,
        )

    # ──────────────────────────────────────────────────────────────
    # Introspection
    # ──────────────────────────────────────────────────────────────

    @property
    def state(self) -> PagerState:
        """Current lifecycle state."""
        return self._state

    @property
    def cursor(self) -> CursorPosition | None:
        """Continuation cursor of the last fetched page."""
        return self._cursor

    @property
    def pages_fetched(self) -> int:
        """Number of fetch calls that returned a page."""
        return self._pages_fetched

    @property
    def records_yielded(self) -> int:
        """Number of records handed to the caller so far."""
        return self._records_yielded

    @property
    def buffered(self) -> int:
        """Records fetched but not yet consumed."""
        return len(self._buffer)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(index={self.index!r}, direction={self.direction!r}, "
            f"page_size={self.page_size}, state={self._state.value})"
        )

    # ──────────────────────────────────────────────────────────────
    # State machine steps
    # ──────────────────────────────────────────────────────────────

    def _check_usable(self) -> bool:
        """Raise on failed or busy iterators; return True once exhausted."""
        if self._state is PagerState.FAILED and self._failure is not None:
            # Drop frames collected by earlier re-raises.
            raise self._failure.with_traceback(None)
        if self._state is PagerState.FETCHING:
            raise MisuseFailure(
                detail="next() called while a fetch is in flight on the same iterator",
                extra={"index": self.index},
            )
        return self._state is PagerState.EXHAUSTED

    def _has_more(self) -> bool:
        return self._state is PagerState.IDLE or self._cursor is not None

    def _pop(self) -> T:
        record = self._buffer.popleft()
        self._records_yielded += 1
        track_records_yielded(self.index, 1)
        if not self._buffer and self._cursor is None:
            self._exhaust()
        return record

    def _drain(self) -> list[T]:
        batch = list(self._buffer)
        self._buffer.clear()
        self._records_yielded += len(batch)
        track_records_yielded(self.index, len(batch))
        if self._cursor is None:
            self._exhaust()
        return batch

    def _exhaust(self) -> None:
        if self._state is not PagerState.EXHAUSTED:
            logger.debug(
                f"Traversal of {self.index} exhausted",
                extra={
                    "index": self.index,
                    "pages": self._pages_fetched,
                    "records": self._records_yielded,
                },
            )
        self._state = PagerState.EXHAUSTED

    def _enter_failed(self, failure: PaginationException, kind: str) -> PaginationException:
        self._state = PagerState.FAILED
        self._failure = failure
        self._buffer.clear()
        track_traversal_failure(self.index, kind)
        logger.warning(
            f"Traversal of {self.index} failed: {failure.detail}",
            extra={"index": self.index, "kind": kind, "pages": self._pages_fetched},
        )
        return failure

    def _start_fetch(self) -> PageRequest:
        if self._max_pages is not None and self._pages_fetched >= self._max_pages:
            raise self._enter_failed(PageLimitExceeded(self._max_pages), "misuse")

        self._state = PagerState.FETCHING
        cursor_field = "after" if self.direction == "forward" else "before"
        return PageRequest(
            index=self.index,
            size=self.page_size,
            direction=self.direction,
            upper_bound=self.upper_bound,
            upper_inclusive=self.upper_inclusive,
            **{cursor_field: self._cursor},
        )

    def _fetch_failed(self, request: PageRequest, exc: Exception) -> PaginationException:
        if isinstance(exc, PaginationException):
            return self._enter_failed(exc, "fetch")

        failure = FetchFailure(
            f"Fetching a page of {self.index} failed: {exc}",
            transient=_is_transient(exc),
            request=request,
            extra={"error_type": type(exc).__name__},
        )
        failure.__cause__ = exc
        return self._enter_failed(failure, "fetch")

    def _complete_fetch(
        self,
        request: PageRequest,
        page: Any,
        previous: PagerState,
        pages_fetched: int,
    ) -> None:
        try:
            self._finish_fetch(request, page)
        except BaseException:
            # Interrupted before the page was committed: the same request
            # is repeated on the next call.
            if self._state is PagerState.FETCHING:
                self._state = previous
                self._pages_fetched = pages_fetched
            raise

    def _finish_fetch(self, request: PageRequest, page: Any) -> None:
        if not isinstance(page, Page):
            try:
                page = Page.model_validate(page)
            except Exception as e:
                failure = FetchFailure(
                    f"Fetch for {self.index} returned {type(page).__name__}, not a page",
                    request=request,
                )
                failure.__cause__ = e
                raise self._enter_failed(failure, "fetch") from e

        self._pages_fetched += 1
        next_cursor = page.cursor_for(self.direction)
        track_page_fetched(self.index, self.direction, len(page.items))

        if next_cursor is not None and next_cursor == request.cursor:
            raise self._enter_failed(CursorStalledError(next_cursor, request=request), "fetch")

        records: list[T] = []
        for position, raw in enumerate(page.items):
            try:
                if not self.range_filter.matches(raw):
                    continue
                records.append(self._materialize(raw))
            except Exception as e:
                failure = MaterializationFailure(
                    f"Entry {position} of page {self._pages_fetched} from {self.index} "
                    f"could not be materialized: {e}",
                    raw_items=page.items,
                    position=position,
                    extra={"index": self.index, "error_type": type(e).__name__},
                )
                failure.__cause__ = e
                raise self._enter_failed(failure, "materialization") from e

        logger.debug(
            f"Fetched page {self._pages_fetched} of {self.index}",
            extra={
                "index": self.index,
                "page": self._pages_fetched,
                "items": len(page.items),
                "kept": len(records),
                "has_more": next_cursor is not None,
            },
        )

        self._buffer.extend(records)
        self._cursor = next_cursor
        if records:
            self._state = PagerState.BUFFERED
        elif next_cursor is None:
            self._exhaust()
        else:
            # Nothing survived filtering; the next call fetches again.
            self._state = PagerState.BUFFERED


class PageCursorIterator(_PageCursorBase[T], Iterator[T]):
    """Blocking traversal over a page-fetch function.

    ``next()`` blocks while a page is fetched. Iterating to the end yields
    every qualifying entry once, in store order.
    """

    def __init__(self, fetch: FetchFn, page_size: int | None = None, **kwargs: Any) -> None:
        super().__init__(fetch, page_size, **kwargs)

    def __iter__(self) -> PageCursorIterator[T]:
        return self

    def __next__(self) -> T:
        while True:
            if self._check_usable():
                raise StopIteration
            if self._buffer:
                return self._pop()
            if not self._has_more():
                self._exhaust()
                raise StopIteration
            self._fetch_next_page()

    def iter_pages(self) -> Iterator[list[T]]:
        """Yield the records of each page that kept at least one record."""
        while True:
            if self._check_usable():
                return
            if self._buffer:
                yield self._drain()
                continue
            if not self._has_more():
                self._exhaust()
                return
            self._fetch_next_page()

    def _fetch_next_page(self) -> None:
        previous = self._state
        pages_fetched = self._pages_fetched
        request = self._start_fetch()
        try:
            page = self._fetch(request)
        except Exception as exc:
            failure = self._fetch_failed(request, exc)
            if failure is exc:
                raise
            raise failure from exc
        except BaseException:
            self._state = previous
            raise
        self._complete_fetch(request, page, previous, pages_fetched)


class AsyncPageCursorIterator(_PageCursorBase[T], AsyncIterator[T]):
    """Non-blocking traversal over a coroutine page-fetch function.

    At most one fetch is in flight per instance; a concurrent ``__anext__``
    raises ``MisuseFailure``. Cancelling a pending fetch leaves the cursor
    where it was, so the next call repeats the same request.
    """

    def __init__(self, fetch: AsyncFetchFn, page_size: int | None = None, **kwargs: Any) -> None:
        super().__init__(fetch, page_size, **kwargs)

    def __aiter__(self) -> AsyncPageCursorIterator[T]:
        return self

    async def __anext__(self) -> T:
        while True:
            if self._check_usable():
                raise StopAsyncIteration
            if self._buffer:
                return self._pop()
            if not self._has_more():
                self._exhaust()
                raise StopAsyncIteration
            await self._fetch_next_page()

    async def iter_pages(self) -> AsyncIterator[list[T]]:
        """Yield the records of each page that kept at least one record."""
        while True:
            if self._check_usable():
                return
            if self._buffer:
                yield self._drain()
                continue
            if not self._has_more():
                self._exhaust()
                return
            await self._fetch_next_page()

    async def collect(self) -> list[T]:
        """Consume the remaining traversal into a list."""
        return [record async for record in self]

    async def _fetch_next_page(self) -> None:
        previous = self._state
        pages_fetched = self._pages_fetched
        request = self._start_fetch()
        try:
            page = await self._fetch(request)
        except Exception as exc:
            failure = self._fetch_failed(request, exc)
            if failure is exc:
                raise
            raise failure from exc
        except BaseException:
            self._state = previous
            raise
        self._complete_fetch(request, page, previous, pages_fetched)


__all__ = [
    "AsyncPageCursorIterator",
    "PageCursorIterator",
    "PagerState",
    "identity",
    "model_materializer",
]
