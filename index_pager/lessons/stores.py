"""Customer stores for the lessons.

Each store holds customers and exposes the same three things to a lesson:
- ``fetch``: the page-fetch function over the customer id index
- ``afetch``: the coroutine form of ``fetch``
- ``materialize``: turns one index entry into a ``Customer``

The memory store keeps documents by reference and indexes ``(id, ref)``
entries, so materialization dereferences each entry. The SQL store indexes
``(id, balance)`` rows and validates them directly.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from index_pager.core.pagination import Page, PageRequest, model_materializer
from index_pager.core.settings import StoreSettings, get_store_settings
from index_pager.infra.store import MemoryIndex, SqlIndexFetcher
from index_pager.lessons.models import Base, Customer, CustomerRecord

logger = logging.getLogger(__name__)

INDEX_NAME = "customer_id_filter"

Backend = Literal["memory", "sql"]


class CustomerStore(ABC):
    """A place customers live, reachable through a page-fetch function."""

    index_name = INDEX_NAME

    @abstractmethod
    def fetch(self, request: PageRequest) -> Page[Any]:
        """Fetch one page of the customer id index."""
        ...

    async def afetch(self, request: PageRequest) -> Page[Any]:
        """Coroutine form of ``fetch``; runs the blocking call in a thread."""
        return await asyncio.to_thread(self.fetch, request)

    @abstractmethod
    def materialize(self, entry: Any) -> Customer:
        """Convert one index entry into a customer."""
        ...

    @abstractmethod
    def save(self, customer: Customer) -> None:
        """Store one customer."""
        ...

    def save_all(self, customers: Iterable[Customer]) -> int:
        """Store many customers, returning how many were saved."""
        count = 0
        for customer in customers:
            self.save(customer)
            count += 1
        logger.info(
            f"Saved {count} customers",
            extra={"index": self.index_name, "count": count},
        )
        return count

    def seed(self, count: int) -> int:
        """Create customers 1..count, each with a balance of id * 10."""
        return self.save_all(Customer(id=i, balance=i * 10) for i in range(1, count + 1))


class MemoryCustomerStore(CustomerStore):
    """Customers as documents plus an ``(id, ref)`` index over them."""

    collection = "customers"

    def __init__(self) -> None:
        self.index = MemoryIndex(INDEX_NAME)
        self.documents: dict[str, dict[str, Any]] = {}

    def fetch(self, request: PageRequest) -> Page[Any]:
        return self.index.fetch(request)

    async def afetch(self, request: PageRequest) -> Page[Any]:
        return await self.index.afetch(request)

    def materialize(self, entry: Any) -> Customer:
        _, ref = entry
        return Customer.model_validate(self.documents[ref])

    def save(self, customer: Customer) -> None:
        ref = f"{self.collection}/{customer.id}"
        if ref in self.documents:
            self.index.remove((customer.id, ref))
        self.documents[ref] = customer.model_dump()
        self.index.add(customer.id, ref)


class SqlCustomerStore(CustomerStore):
    """Customers in a SQL table, paged with a keyset fetcher."""

    def __init__(self, settings: StoreSettings | None = None) -> None:
        settings = settings or get_store_settings()
        engine_kwargs: dict[str, Any] = {"echo": settings.echo}
        if settings.database_url.startswith("sqlite") and ":memory:" in settings.database_url:
            # One shared connection, or every session sees an empty database
            engine_kwargs.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        self.engine = create_engine(settings.database_url, **engine_kwargs)
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(self.engine, expire_on_commit=False)
        self.fetcher = SqlIndexFetcher(
            self.session_factory,
            CustomerRecord.id,
            columns=(CustomerRecord.id, CustomerRecord.balance),
            name=INDEX_NAME,
        )
        self._to_customer = model_materializer(Customer, fields=("id", "balance"))

    def fetch(self, request: PageRequest) -> Page[Any]:
        return self.fetcher.fetch(request)

    def materialize(self, entry: Any) -> Customer:
        return self._to_customer(entry)

    def save(self, customer: Customer) -> None:
        with self.session_factory.begin() as session:
            session.merge(CustomerRecord(id=customer.id, balance=customer.balance))

    def close(self) -> None:
        """Release the engine's connections."""
        self.engine.dispose()


def open_store(
    backend: Backend = "memory",
    *,
    seed: int | None = None,
    settings: StoreSettings | None = None,
) -> CustomerStore:
    """Create a customer store and seed it.

    Args:
        backend: "memory" or "sql"
        seed: Customers to create (``settings.seed_count`` if None)
        settings: Store settings (cached settings if None)
    """
    settings = settings or get_store_settings()
    if backend == "memory":
        store: CustomerStore = MemoryCustomerStore()
    elif backend == "sql":
        store = SqlCustomerStore(settings)
    else:
        msg = f"Unknown backend: {backend!r}"
        raise ValueError(msg)

    store.seed(settings.seed_count if seed is None else seed)
    return store
