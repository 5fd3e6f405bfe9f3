"""Unit tests for client-side range filters."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from index_pager.core.pagination.filters import (
    AcceptAll,
    AllOf,
    LowerBound,
    RangeQuery,
    first_component,
)


@pytest.mark.unit
class TestFirstComponent:
    """Tests for key extraction."""

    def test_tuple_entry(self):
        assert first_component((5, "customers/5")) == 5

    def test_list_entry(self):
        assert first_component(["b", 1]) == "b"

    def test_scalar_entry(self):
        assert first_component(7) == 7

    def test_empty_entry_rejected(self):
        with pytest.raises(ValueError, match="empty entry"):
            first_component(())


@pytest.mark.unit
class TestLowerBound:
    """Tests for LowerBound filter."""

    def test_inclusive(self):
        """An inclusive bound keeps the bound itself."""
        f = LowerBound(5)

        assert f.apply([(4,), (5,), (6,)]) == [(5,), (6,)]

    def test_exclusive(self):
        """An exclusive bound drops the bound itself."""
        f = LowerBound(5, inclusive=False)

        assert f.apply([(4,), (5,), (6,)]) == [(6,)]

    def test_custom_key(self):
        """A key function can pick any component."""
        f = LowerBound(100, key=lambda entry: entry[1])

        assert f((1, 150)) is True
        assert f((2, 50)) is False

    def test_repr(self):
        assert repr(LowerBound(5, inclusive=False)) == "LowerBound(key > 5)"


@pytest.mark.unit
class TestComposition:
    """Tests for combining filters."""

    def test_accept_all_is_identity(self):
        """AcceptAll keeps everything and vanishes when combined."""
        bound = LowerBound(3)

        assert AcceptAll().apply([1, 2]) == [1, 2]
        assert (AcceptAll() & bound) is bound
        assert (bound & AcceptAll()) is bound

    def test_all_of_flattens(self):
        """Nested AllOf filters should be flattened."""
        combined = LowerBound(1) & LowerBound(2) & LowerBound(3)

        assert isinstance(combined, AllOf)
        assert len(combined.filters) == 3
        assert combined.apply([1, 2, 3, 4]) == [3, 4]

    def test_all_of_drops_accept_all(self):
        combined = AllOf(AcceptAll(), LowerBound(2))

        assert len(combined.filters) == 1
        assert combined.matches(1) is False


@pytest.mark.unit
class TestRangeQuery:
    """Tests for RangeQuery splitting."""

    def test_unbounded(self):
        """An unbounded query filters nothing and sends no bound."""
        range_filter, upper = RangeQuery().split()

        assert isinstance(range_filter, AcceptAll)
        assert upper is None

    def test_split(self):
        """Lower bound stays client-side, upper bound goes to the store."""
        range_filter, upper = RangeQuery(lower=5, upper=11).split()

        assert isinstance(range_filter, LowerBound)
        assert range_filter.value == 5
        assert upper == 11

    def test_lower_inclusive_carried(self):
        range_filter = RangeQuery(lower=5, lower_inclusive=False).client_filter()

        assert range_filter.inclusive is False

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValidationError, match="greater than upper"):
            RangeQuery(lower=12, upper=11)

    def test_incomparable_bounds_rejected(self):
        with pytest.raises(ValidationError, match="not comparable"):
            RangeQuery(lower="a", upper=3)

    def test_equal_bounds_allowed(self):
        assert RangeQuery(lower=7, upper=7).upper == 7
