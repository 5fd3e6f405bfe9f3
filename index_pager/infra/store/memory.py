"""Ordered in-memory index exposing the page-fetch contract.

Entries are value tuples kept sorted; the first component is the key that
range bounds compare against. Cursor semantics follow the document store
the lessons were written for:

- an ``after`` cursor is inclusive: the page starts at the cursor's entry
- a ``before`` cursor is exclusive: the page ends just before it
- the ``upper_bound`` of a request hides every entry above it, on every page

Example:
    >>> index = MemoryIndex("customer_id_filter")
    >>> index.extend((i, f"customers/{i}") for i in range(1, 21))
    >>> page = index.fetch(PageRequest(index="customer_id_filter", size=8))
    >>> [entry[0] for entry in page.items]
    [1, 2, 3, 4, 5, 6, 7, 8]
    >>> page.after is not None
    True
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable
from typing import Any

from index_pager.core.exceptions import PermanentFetchError
from index_pager.core.pagination.cursor import CursorCodec
from index_pager.core.pagination.schemas import Page, PageRequest

logger = logging.getLogger(__name__)

Entry = tuple[Any, ...]


def _as_entry(values: Any) -> Entry:
    if isinstance(values, (tuple, list)):
        return tuple(values)
    return (values,)


class MemoryIndex:
    """Sorted list of index entries with cursor-based page access.

    Keys must be JSON-native values (numbers, strings) so they survive the
    round trip through a cursor.

    Attributes:
        name: Index identity reported in requests and logs
        requests: Every request received, in order
    """

    def __init__(self, name: str = "default", entries: Iterable[Any] = ()) -> None:
        self.name = name
        self._entries: list[Entry] = sorted(_as_entry(e) for e in entries)
        self.requests: list[PageRequest] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def fetch_calls(self) -> int:
        """Number of fetch calls served."""
        return len(self.requests)

    def add(self, *values: Any) -> Entry:
        """Insert one entry, keeping the index sorted."""
        entry = tuple(values)
        bisect.insort(self._entries, entry)
        return entry

    def extend(self, entries: Iterable[Any]) -> None:
        """Insert many entries at once."""
        self._entries.extend(_as_entry(e) for e in entries)
        self._entries.sort()

    def remove(self, entry: Any) -> None:
        """Remove an entry; missing entries are ignored."""
        entry = _as_entry(entry)
        pos = bisect.bisect_left(self._entries, entry)
        if pos < len(self._entries) and self._entries[pos] == entry:
            del self._entries[pos]

    # ──────────────────────────────────────────────────────────────
    # Fetch contract
    # ──────────────────────────────────────────────────────────────

    def fetch(self, request: PageRequest) -> Page[Entry]:
        """Return the page addressed by ``request``."""
        self.requests.append(request)
        candidates = self._bounded(request)

        if request.direction == "forward":
            start = 0
            if request.after is not None:
                start = bisect.bisect_left(candidates, self._decode(request.after, request))
            end = min(start + request.size, len(candidates))
        else:
            end = len(candidates)
            if request.before is not None:
                end = bisect.bisect_left(candidates, self._decode(request.before, request))
            start = max(0, end - request.size)

        items = candidates[start:end]
        before = CursorCodec.for_entry(items[0], "backward") if items and start > 0 else None
        after = CursorCodec.for_entry(candidates[end], "forward") if end < len(candidates) else None

        logger.debug(
            f"Served page of {self.name}",
            extra={"index": self.name, "start": start, "items": len(items)},
        )
        return Page(items=items, before=before, after=after)

    async def afetch(self, request: PageRequest) -> Page[Entry]:
        """Coroutine form of ``fetch`` for async traversals."""
        return self.fetch(request)

    def _bounded(self, request: PageRequest) -> list[Entry]:
        if request.upper_bound is None:
            return self._entries
        keys = [entry[0] for entry in self._entries]
        try:
            if request.upper_inclusive:
                cut = bisect.bisect_right(keys, request.upper_bound)
            else:
                cut = bisect.bisect_left(keys, request.upper_bound)
        except TypeError as e:
            raise PermanentFetchError(
                f"Upper bound {request.upper_bound!r} is not comparable with keys of {self.name}",
                request=request,
            ) from e
        return self._entries[:cut]

    def _decode(self, cursor: str, request: PageRequest) -> Entry:
        try:
            data = CursorCodec.decode(cursor)
            return tuple(data.values["entry"])
        except (ValueError, KeyError, TypeError) as e:
            raise PermanentFetchError(
                f"Cursor was not issued by index {self.name}",
                request=request,
                extra={"cursor": cursor},
            ) from e


__all__ = ["Entry", "MemoryIndex"]
