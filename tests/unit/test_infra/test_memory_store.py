"""Unit tests for the in-memory index."""
from __future__ import annotations

import pytest

from index_pager.core.exceptions import PermanentFetchError
from index_pager.core.pagination import CursorCodec, PageRequest
from index_pager.infra.store import MemoryIndex


def keys(page):
    return [entry[0] for entry in page.items]


@pytest.mark.unit
class TestMemoryIndexFetch:
    """Tests for MemoryIndex.fetch."""

    def test_first_page(self, customer_index):
        page = customer_index.fetch(PageRequest(size=8))

        assert keys(page) == list(range(1, 9))
        assert page.before is None
        assert page.after is not None

    def test_after_cursor_is_inclusive(self, customer_index):
        """An after cursor points at the first entry of the next page."""
        first = customer_index.fetch(PageRequest(size=8))

        assert CursorCodec.decode(first.after).values["entry"] == [9, "customers/9"]
        second = customer_index.fetch(PageRequest(size=8, after=first.after))
        assert keys(second)[0] == 9

    def test_last_page_has_no_after(self, customer_index):
        first = customer_index.fetch(PageRequest(size=16))
        last = customer_index.fetch(PageRequest(size=16, after=first.after))

        assert keys(last) == [17, 18, 19, 20]
        assert last.after is None
        assert last.before is not None

    def test_before_cursor_is_exclusive(self, customer_index):
        """A before cursor ends the page just before its entry."""
        last = customer_index.fetch(PageRequest(size=8, direction="backward"))
        assert keys(last) == list(range(13, 21))

        previous = customer_index.fetch(
            PageRequest(size=8, before=last.before, direction="backward")
        )
        assert keys(previous) == list(range(5, 13))

    def test_upper_bound(self, customer_index):
        inclusive = customer_index.fetch(PageRequest(size=50, upper_bound=11))
        exclusive = customer_index.fetch(PageRequest(size=50, upper_bound=11, upper_inclusive=False))

        assert keys(inclusive)[-1] == 11
        assert keys(exclusive)[-1] == 10
        assert inclusive.after is None

    def test_requests_recorded(self, customer_index):
        request = PageRequest(size=3)
        customer_index.fetch(request)

        assert customer_index.requests == [request]
        assert customer_index.fetch_calls == 1

    def test_foreign_cursor_rejected(self, customer_index):
        with pytest.raises(PermanentFetchError, match="not issued"):
            customer_index.fetch(PageRequest(size=3, after="garbage"))

    def test_incomparable_bound_rejected(self, customer_index):
        with pytest.raises(PermanentFetchError, match="not comparable"):
            customer_index.fetch(PageRequest(size=3, upper_bound="x"))

    @pytest.mark.asyncio
    async def test_afetch(self, customer_index):
        page = await customer_index.afetch(PageRequest(size=2))

        assert keys(page) == [1, 2]


@pytest.mark.unit
class TestMemoryIndexEntries:
    """Tests for maintaining index entries."""

    def test_entries_sorted(self):
        index = MemoryIndex("letters", ["c", "a", "b"])

        assert list(index) == [("a",), ("b",), ("c",)]

    def test_add_and_remove(self):
        index = MemoryIndex("numbers", [(1,), (3,)])
        index.add(2)
        index.remove((3,))
        index.remove((99,))

        assert list(index) == [(1,), (2,)]
        assert len(index) == 2

    def test_extend(self):
        index = MemoryIndex("numbers", [(5,)])
        index.extend([(1,), (9,)])

        assert [e[0] for e in index] == [1, 5, 9]

    def test_entry_inserted_during_walk_is_seen(self):
        """An entry added ahead of the cursor shows up in a later page."""
        index = MemoryIndex("numbers", [(n,) for n in (1, 2, 3, 10)])
        first = index.fetch(PageRequest(size=2))
        index.add(5)

        second = index.fetch(PageRequest(size=5, after=first.after))
        assert keys(second) == [3, 5, 10]
