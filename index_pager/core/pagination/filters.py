"""Client-side range filters for fetched pages.

A range filter is a predicate over one ordered key extracted from a raw
index entry. It runs after a page has been fetched and before its entries
are materialized.

Range bounds are split between the two sides of the fetch boundary:
- the upper bound travels with every ``PageRequest`` so the store stops
  returning pages past it
- the lower bound is checked here, against the entries of each page

Usage:
    from index_pager.core.pagination.filters import RangeQuery

    range_filter, upper_bound = RangeQuery(lower=5, upper=11).split()
    # range_filter keeps entries whose first component is >= 5
    # upper_bound (11) goes to the store on every request
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel, Field, model_validator

KeyFunc = Callable[[Any], Any]


def first_component(raw: Any) -> Any:
    """Extract the ordering key of a raw entry.

    Tuple and list entries are keyed by their first element; any other
    value is its own key.
    """
    if isinstance(raw, (tuple, list)):
        if not raw:
            msg = "Cannot take the key of an empty entry"
            raise ValueError(msg)
        return raw[0]
    return raw


class RangeFilter(ABC):
    """Base class for range filters.

    All filters implement ``matches()`` for a single raw entry. ``apply()``
    filters a whole page, keeping store order.
    """

    @abstractmethod
    def matches(self, raw: Any) -> bool:
        """Return True if the raw entry qualifies."""
        ...

    def __call__(self, raw: Any) -> bool:
        return self.matches(raw)

    def apply(self, items: Iterable[Any]) -> list[Any]:
        """Keep the entries that match, in their original order."""
        return [item for item in items if self.matches(item)]

    def __and__(self, other: RangeFilter) -> RangeFilter:
        if isinstance(other, AcceptAll):
            return self
        return AllOf(self, other)


class AcceptAll(RangeFilter):
    """Identity filter: every entry qualifies."""

    def matches(self, raw: Any) -> bool:
        return True

    def apply(self, items: Iterable[Any]) -> list[Any]:
        return list(items)

    def __and__(self, other: RangeFilter) -> RangeFilter:
        return other

    def __repr__(self) -> str:
        return "AcceptAll()"


class LowerBound(RangeFilter):
    """Keep entries whose key is at or above a lower bound.

    Example:
        # Generates: key >= 5
        LowerBound(5)

        # Generates: key > 5
        LowerBound(5, inclusive=False)
    """

    def __init__(
        self,
        value: Any,
        *,
        inclusive: bool = True,
        key: KeyFunc = first_component,
    ) -> None:
        """Initialize lower bound filter.

        Args:
            value: Lowest key that qualifies
            inclusive: Whether an entry equal to ``value`` qualifies
            key: Extracts the comparison key from a raw entry
        """
        self.value = value
        self.inclusive = inclusive
        self.key = key

    def matches(self, raw: Any) -> bool:
        k = self.key(raw)
        if self.inclusive:
            return self.value <= k
        return self.value < k

    def __repr__(self) -> str:
        op = ">=" if self.inclusive else ">"
        return f"LowerBound(key {op} {self.value!r})"


class AllOf(RangeFilter):
    """Entries must satisfy every wrapped filter."""

    def __init__(self, *filters: RangeFilter) -> None:
        flattened: list[RangeFilter] = []
        for f in filters:
            if isinstance(f, AllOf):
                flattened.extend(f.filters)
            elif not isinstance(f, AcceptAll):
                flattened.append(f)
        self.filters = tuple(flattened)

    def matches(self, raw: Any) -> bool:
        return all(f.matches(raw) for f in self.filters)

    def __repr__(self) -> str:
        return f"AllOf({', '.join(repr(f) for f in self.filters)})"


class RangeQuery(BaseModel):
    """A key range split across the store and the client.

    Attributes:
        lower: Lowest qualifying key, checked client-side (None for unbounded)
        upper: Highest qualifying key, sent to the store (None for unbounded)
        lower_inclusive: Whether ``lower`` itself qualifies
        upper_inclusive: Whether ``upper`` itself qualifies

    Example:
        # Keys 5 through 11
        RangeQuery(lower=5, upper=11)

        # Keys below 5
        RangeQuery(upper=5, upper_inclusive=False)
    """

    lower: Any = Field(default=None, description="Client-side lower bound")
    upper: Any = Field(default=None, description="Store-side upper bound")
    lower_inclusive: bool = Field(default=True, description="Lower bound is inclusive")
    upper_inclusive: bool = Field(default=True, description="Upper bound is inclusive")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _lower_not_above_upper(self) -> RangeQuery:
        if self.lower is not None and self.upper is not None:
            try:
                inverted = self.lower > self.upper
            except TypeError as e:
                msg = f"Range bounds are not comparable: {self.lower!r}, {self.upper!r}"
                raise ValueError(msg) from e
            if inverted:
                msg = "Lower bound cannot be greater than upper bound"
                raise ValueError(msg)
        return self

    def client_filter(self, key: KeyFunc = first_component) -> RangeFilter:
        """Build the client-side part of the range."""
        if self.lower is None:
            return AcceptAll()
        return LowerBound(self.lower, inclusive=self.lower_inclusive, key=key)

    def split(self, key: KeyFunc = first_component) -> tuple[RangeFilter, Any]:
        """Return ``(client_filter, store_upper_bound)``."""
        return self.client_filter(key), self.upper


__all__ = [
    "AcceptAll",
    "AllOf",
    "KeyFunc",
    "LowerBound",
    "RangeFilter",
    "RangeQuery",
    "first_component",
]
