"""Unit tests for the pagination exception hierarchy."""
from __future__ import annotations

import pytest

from index_pager.core.exceptions import (
    CursorStalledError,
    FetchFailure,
    MaterializationFailure,
    MisuseFailure,
    PageLimitExceeded,
    PaginationException,
    PermanentFetchError,
    TransientFetchError,
)
from index_pager.core.pagination import PageRequest


@pytest.mark.unit
class TestPaginationException:
    """Tests for the base exception."""

    def test_fields(self):
        exc = PaginationException(detail="boom", type="custom", extra={"index": "x"})

        assert str(exc) == "boom"
        assert exc.title == "Pagination Error"
        assert exc.to_dict() == {
            "type": "custom",
            "title": "Pagination Error",
            "detail": "boom",
            "index": "x",
        }

    def test_title_override(self):
        assert PaginationException("boom", title="Custom").title == "Custom"


@pytest.mark.unit
class TestFetchFailures:
    """Tests for fetch failure types."""

    def test_request_index_recorded(self):
        """The failing request's index should appear in extra."""
        request = PageRequest(index="customer_id_filter", size=8)
        exc = FetchFailure("down", request=request)

        assert exc.request is request
        assert exc.extra["index"] == "customer_id_filter"
        assert exc.extra["transient"] is False

    def test_transient_and_permanent(self):
        assert TransientFetchError("slow").transient is True
        assert PermanentFetchError("denied").transient is False
        assert TransientFetchError("slow").type == "fetch-transient"
        assert isinstance(PermanentFetchError("denied"), FetchFailure)

    def test_cursor_stalled(self):
        exc = CursorStalledError("abc")

        assert exc.extra["cursor"] == "abc"
        assert "abc" in exc.detail
        assert exc.transient is False


@pytest.mark.unit
class TestMaterializationFailure:
    """Tests for MaterializationFailure."""

    def test_carries_whole_page(self):
        exc = MaterializationFailure("bad", raw_items=(1, 2, "x"), position=2)

        assert exc.raw_items == [1, 2, "x"]
        assert exc.failed_item == "x"
        assert exc.extra["position"] == 2
        assert exc.extra["page_items"] == 3


@pytest.mark.unit
class TestMisuse:
    """Tests for misuse failures."""

    def test_page_limit_is_misuse(self):
        exc = PageLimitExceeded(5)

        assert isinstance(exc, MisuseFailure)
        assert exc.type == "page-limit-exceeded"
        assert exc.extra == {"max_pages": 5}
        assert exc.title == "Invalid Usage"
