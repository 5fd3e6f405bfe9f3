"""Fetch adapters: stores that speak the page-fetch contract."""

from index_pager.infra.store.memory import Entry, MemoryIndex
from index_pager.infra.store.sql import AsyncSqlIndexFetcher, SqlIndexFetcher

__all__ = [
    "AsyncSqlIndexFetcher",
    "Entry",
    "MemoryIndex",
    "SqlIndexFetcher",
]
