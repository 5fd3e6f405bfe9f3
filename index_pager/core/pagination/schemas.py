"""Request and response models exchanged with a page-fetch function.

A traversal talks to its store through exactly two shapes:

1. ``PageRequest``: what to fetch (index, cursor, size, standing bound)
2. ``Page``: what came back (raw entries plus continuation cursors)

Cursors are opaque strings. Only the store that issued a cursor knows what
it means; everything else passes it back unchanged.
"""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field, model_validator

RawT = TypeVar("RawT")

CursorPosition = str
Direction = Literal["forward", "backward"]


class PageRequest(BaseModel):
    """Parameters of one fetch call.

    Attributes:
        index: Identity of the index being traversed
        after: Cursor to continue forward from (None for the first page)
        before: Cursor to continue backward from (None for the first page)
        size: Requested page size; the store may return fewer entries
        direction: Traversal direction; without a cursor, "forward" asks for
            the first page and "backward" for the last one
        upper_bound: Standing upper limit on the first key component,
            enforced by the store on every request
        upper_inclusive: Whether entries equal to ``upper_bound`` qualify
    """

    index: str = Field(default="default", min_length=1, description="Index identity")
    after: CursorPosition | None = Field(
        default=None,
        description="Forward continuation cursor",
    )
    before: CursorPosition | None = Field(
        default=None,
        description="Backward continuation cursor",
    )
    size: int = Field(ge=1, description="Requested page size")
    direction: Direction = Field(
        default="forward",
        description="Which end a cursorless request starts from",
    )
    upper_bound: Any = Field(
        default=None,
        description="Store-side upper bound on the first key component",
    )
    upper_inclusive: bool = Field(
        default=True,
        description="Whether the upper bound itself is included",
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _cursors_are_exclusive(self) -> PageRequest:
        if self.after is not None and self.before is not None:
            msg = "A page request takes an 'after' or a 'before' cursor, not both"
            raise ValueError(msg)
        if self.after is not None and self.direction == "backward":
            msg = "A backward request continues from a 'before' cursor"
            raise ValueError(msg)
        if self.before is not None and self.direction == "forward":
            msg = "A forward request continues from an 'after' cursor"
            raise ValueError(msg)
        return self

    @property
    def cursor(self) -> CursorPosition | None:
        """The cursor this request continues from, whichever side it is on."""
        return self.after if self.after is not None else self.before


class Page(BaseModel, Generic[RawT]):
    """One response unit from the store.

    Items keep the order the store returned them in.

    Attributes:
        items: Raw entries of this page
        before: Cursor preceding the first entry (present if more data lies backward)
        after: Cursor following the last entry (present if more data lies forward)
    """

    items: list[RawT] = Field(
        default_factory=list,
        description="Raw entries in store order",
    )
    before: CursorPosition | None = Field(
        default=None,
        description="Cursor for the previous page",
    )
    after: CursorPosition | None = Field(
        default=None,
        description="Cursor for the next page",
    )

    model_config = {"frozen": True}

    @property
    def has_next(self) -> bool:
        """Whether more data may exist after this page."""
        return self.after is not None

    @property
    def has_previous(self) -> bool:
        """Whether more data may exist before this page."""
        return self.before is not None

    def cursor_for(self, direction: Direction) -> CursorPosition | None:
        """Return the continuation cursor for a traversal direction."""
        return self.after if direction == "forward" else self.before

    def __len__(self) -> int:
        return len(self.items)


__all__ = [
    "CursorPosition",
    "Direction",
    "Page",
    "PageRequest",
]
