"""Customer queries expressed as index traversals.

Each query walks the customer id index with a ``PageCursorIterator``:

- point lookups are ranges whose lower and upper bounds are the same id
- "less than" is an exclusive upper bound, enforced by the store
- "between" keeps the upper bound at the store and checks the lower bound
  on each fetched page
- "all" walks the whole index page by page

Usage:
    store = open_store("memory", seed=20)
    lesson = CustomerLesson(store, page_size=8)

    lesson.read_customer(1)
    lesson.read_between(5, 11)
    for page in lesson.read_all_pages():
        print(len(page))
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Iterator

from index_pager.core.pagination import (
    AsyncPageCursorIterator,
    PageCursorIterator,
    RangeQuery,
)
from index_pager.lessons.models import Customer
from index_pager.lessons.stores import CustomerStore

logger = logging.getLogger(__name__)


class CustomerLesson:
    """Runs the customer queries against one store."""

    def __init__(self, store: CustomerStore, page_size: int | None = None) -> None:
        self.store = store
        self.page_size = page_size

    def walk(self, query: RangeQuery | None = None) -> PageCursorIterator[Customer]:
        """Start a traversal of the customer index over an optional range."""
        return PageCursorIterator.for_range(
            self.store.fetch,
            query or RangeQuery(),
            self.page_size,
            materialize=self.store.materialize,
            index=self.store.index_name,
        )

    def awalk(self, query: RangeQuery | None = None) -> AsyncPageCursorIterator[Customer]:
        """Async form of ``walk``."""
        return AsyncPageCursorIterator.for_range(
            self.store.afetch,
            query or RangeQuery(),
            self.page_size,
            materialize=self.store.materialize,
            index=self.store.index_name,
        )

    def read_customer(self, customer_id: int) -> Customer | None:
        """Look up one customer by id."""
        customer = next(self.walk(RangeQuery(lower=customer_id, upper=customer_id)), None)
        logger.info(
            f"Read customer {customer_id}: {customer}",
            extra={"customer_id": customer_id, "found": customer is not None},
        )
        return customer

    def read_customers(self, customer_ids: Iterable[int]) -> list[Customer]:
        """Look up several customers; the result is ordered by id, without repeats."""
        requested = sorted(set(customer_ids))
        customers = []
        for customer_id in requested:
            customer = self.read_customer(customer_id)
            if customer is not None:
                customers.append(customer)
        logger.info(
            f"Read {len(customers)} customers",
            extra={"requested": len(requested), "returned": len(customers)},
        )
        return customers

    def read_less_than(self, max_id: int) -> list[Customer]:
        """Customers with an id strictly below ``max_id``."""
        customers = list(self.walk(RangeQuery(upper=max_id, upper_inclusive=False)))
        logger.info(
            f"Read {len(customers)} customers below {max_id}",
            extra={"max_id": max_id, "returned": len(customers)},
        )
        return customers

    def read_between(self, min_id: int, max_id: int) -> list[Customer]:
        """Customers with ``min_id <= id <= max_id``."""
        customers = list(self.walk(RangeQuery(lower=min_id, upper=max_id)))
        logger.info(
            f"Read {len(customers)} customers between {min_id} and {max_id}",
            extra={"min_id": min_id, "max_id": max_id, "returned": len(customers)},
        )
        return customers

    def read_all_pages(self) -> Iterator[list[Customer]]:
        """Every customer, one list per fetched page."""
        pager = self.walk()
        for number, page in enumerate(pager.iter_pages(), start=1):
            logger.info(
                f"Read page {number} with {len(page)} customers",
                extra={"page": number, "returned": len(page), "has_more": pager.cursor is not None},
            )
            yield page

    async def aread_all(self) -> AsyncIterator[Customer]:
        """Every customer, fetched without blocking the event loop."""
        async for customer in self.awalk():
            yield customer
