"""Exception classes for paginated traversal.

Every failure raised by the pagination core derives from
``PaginationException``. The fields mirror RFC 7807 problem details so the
errors can be logged or rendered the same way regardless of where they were
raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from index_pager.core.pagination.schemas import PageRequest


class PaginationException(Exception):
    """Base pagination exception.

    All custom exceptions should inherit from this class.

    Attributes:
        detail: Human-readable error message.
        type: Error type identifier.
        title: Short, human-readable summary of the problem type.
        extra: Additional context-specific information about the error.

    Example:
        raise PaginationException(
            detail="Index 'customer_id_filter' is not available",
            type="index-unavailable",
            extra={"index": "customer_id_filter"},
        )
    """

    default_title = "Pagination Error"

    def __init__(
        self,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize pagination exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.type = type
        self.title = title or self.default_title
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> dict[str, Any]:
        """Render the exception as a problem-details mapping."""
        return {
            "type": self.type,
            "title": self.title,
            "detail": self.detail,
            **self.extra,
        }


class FetchFailure(PaginationException):
    """The page-fetch function failed.

    Raised for network, auth and store-side errors. The pagination core
    never retries; callers wrap ``fetch`` with
    ``index_pager.utils.retry.retrying_fetch`` when they need resilience.

    Attributes:
        transient: True when retrying the same request may succeed.
        request: The request that failed, when known.
    """

    default_title = "Fetch Failed"

    def __init__(
        self,
        detail: str,
        *,
        transient: bool = False,
        request: PageRequest | None = None,
        type: str = "fetch-failed",
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.transient = transient
        self.request = request
        merged = {"transient": transient, **(extra or {})}
        if request is not None:
            merged.setdefault("index", request.index)
        super().__init__(detail=detail, type=type, extra=merged)


class TransientFetchError(FetchFailure):
    """Fetch failed for a reason that may clear up (timeout, dropped link)."""

    default_title = "Transient Fetch Error"

    def __init__(
        self,
        detail: str,
        *,
        request: PageRequest | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            detail,
            transient=True,
            request=request,
            type="fetch-transient",
            extra=extra,
        )


class PermanentFetchError(FetchFailure):
    """Fetch failed for a reason retrying will not fix (bad request, auth)."""

    default_title = "Permanent Fetch Error"

    def __init__(
        self,
        detail: str,
        *,
        request: PageRequest | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            detail,
            transient=False,
            request=request,
            type="fetch-permanent",
            extra=extra,
        )


class CursorStalledError(FetchFailure):
    """The store handed back the cursor it was just given.

    Following such a cursor would request the same page forever.
    """

    default_title = "Cursor Stalled"

    def __init__(self, cursor: str, *, request: PageRequest | None = None) -> None:
        super().__init__(
            f"Store returned the same cursor it was sent: {cursor!r}",
            transient=False,
            request=request,
            type="cursor-stalled",
            extra={"cursor": cursor},
        )


class MaterializationFailure(PaginationException):
    """A raw entry of a fetched page could not be converted to a record.

    The whole page is failed. ``raw_items`` holds every entry of the page,
    so the valid entries stay visible to the caller.

    Attributes:
        raw_items: The page's raw entries, in store order.
        position: Index into ``raw_items`` of the entry that failed.
    """

    default_title = "Materialization Failed"

    def __init__(
        self,
        detail: str,
        *,
        raw_items: Sequence[Any],
        position: int,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.raw_items = list(raw_items)
        self.position = position
        super().__init__(
            detail=detail,
            type="materialization-failed",
            extra={
                "position": position,
                "page_items": len(self.raw_items),
                **(extra or {}),
            },
        )

    @property
    def failed_item(self) -> Any:
        """The raw entry that could not be converted."""
        return self.raw_items[self.position]


class MisuseFailure(PaginationException):
    """The iterator was constructed or driven incorrectly.

    Example:
        raise MisuseFailure(
            detail="page_size must be a positive integer, got 0",
            extra={"page_size": 0},
        )
    """

    default_title = "Invalid Usage"

    def __init__(
        self,
        detail: str,
        type: str = "misuse",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail=detail, type=type, extra=extra)


class PageLimitExceeded(MisuseFailure):
    """The traversal needed more pages than ``max_pages`` allows."""

    def __init__(self, max_pages: int) -> None:
        super().__init__(
            detail=f"Traversal exceeded the limit of {max_pages} pages",
            type="page-limit-exceeded",
            extra={"max_pages": max_pages},
        )


__all__ = [
    "CursorStalledError",
    "FetchFailure",
    "MaterializationFailure",
    "MisuseFailure",
    "PageLimitExceeded",
    "PaginationException",
    "PermanentFetchError",
    "TransientFetchError",
]
