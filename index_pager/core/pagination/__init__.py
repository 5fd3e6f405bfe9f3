"""Cursor-based traversal of paginated indexes.

This package turns a store's "fetch the page after this cursor" call into a
lazy stream of typed records:
- Lazy: pages are requested only as records are consumed
- Sequential: each request carries the cursor returned by the previous page
- Split ranges: upper bounds go to the store, lower bounds are checked here

Blocking style:
    pager = PageCursorIterator(index.fetch, page_size=8, materialize=to_customer)
    for customer in pager:
        ...

Async style:
    pager = AsyncPageCursorIterator(fetcher.fetch, page_size=8)
    async for entry in pager:
        ...

The cursor is an opaque string. Stores mint it with ``CursorCodec``; the
iterator only passes it back.
"""

from index_pager.core.pagination.cursor import CursorCodec, CursorData
from index_pager.core.pagination.filters import (
    AcceptAll,
    AllOf,
    LowerBound,
    RangeFilter,
    RangeQuery,
    first_component,
)
from index_pager.core.pagination.iterator import (
    AsyncPageCursorIterator,
    PageCursorIterator,
    PagerState,
    identity,
    model_materializer,
)
from index_pager.core.pagination.schemas import (
    CursorPosition,
    Direction,
    Page,
    PageRequest,
)

__all__ = [
    # Filters
    "AcceptAll",
    "AllOf",
    # Iterators
    "AsyncPageCursorIterator",
    # Cursor utilities
    "CursorCodec",
    "CursorData",
    # Schemas
    "CursorPosition",
    "Direction",
    "LowerBound",
    "Page",
    "PageCursorIterator",
    "PageRequest",
    "PagerState",
    "RangeFilter",
    "RangeQuery",
    "first_component",
    "identity",
    "model_materializer",
]
