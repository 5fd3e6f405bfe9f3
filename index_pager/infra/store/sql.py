"""Page-fetch adapters over a SQLAlchemy table.

Implements the seek/keyset method instead of OFFSET:
- each request seeks straight to the cursor position with a WHERE clause
- one extra row is fetched to learn whether another page exists
- the standing upper bound of the request is applied on every page

How it works:
    For ORDER BY key ASC, tiebreaker ASC with an ``after`` cursor at (k1, t1):
    WHERE (key > k1) OR (key = k1 AND tiebreaker >= t1)

    For a ``before`` cursor the order is reversed and the comparison is strict:
    WHERE (key < k1) OR (key = k1 AND tiebreaker < t1)

Usage:
    fetcher = SqlIndexFetcher(
        session_factory,
        key=CustomerRecord.id,
        columns=(CustomerRecord.id, CustomerRecord.balance),
        name="customer_id_filter",
    )
    for customer in PageCursorIterator(fetcher.fetch, page_size=8):
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from index_pager.core.exceptions import PermanentFetchError, TransientFetchError
from index_pager.core.pagination.cursor import CursorCodec, CursorData
from index_pager.core.pagination.schemas import Page, PageRequest

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute, Session

logger = logging.getLogger(__name__)

_KEY = "_page_key"
_TIEBREAKER = "_page_tiebreaker"


def _declared_unique(column: InstrumentedAttribute[Any]) -> bool:
    expression = getattr(column, "expression", column)
    return bool(getattr(expression, "primary_key", False) or getattr(expression, "unique", False))


class _KeysetIndex:
    """Statement building and page assembly shared by both fetchers."""

    def __init__(
        self,
        key: InstrumentedAttribute[Any],
        *,
        tiebreaker: InstrumentedAttribute[Any] | None = None,
        columns: Sequence[InstrumentedAttribute[Any]] = (),
        criteria: Sequence[Any] = (),
        name: str | None = None,
    ) -> None:
        """Initialize the keyset index.

        The key must be unique unless a tiebreaker is given. A key column not
        declared primary key or unique is accepted with a warning: rows that
        share a key value at a page boundary are returned again on the next
        page.

        Args:
            key: Ordering column; range bounds compare against it
            tiebreaker: Unique column ordering rows that share a key
            columns: Columns returned in each entry (key and tiebreaker if empty)
            criteria: Extra WHERE clauses restricting the index
            name: Index identity (defaults to the key's table and column)
        """
        self.key = key
        self.tiebreaker = tiebreaker
        self.columns = tuple(columns)
        self.criteria = tuple(criteria)
        self.name = name or str(key)
        if tiebreaker is None and not _declared_unique(key):
            logger.warning(
                f"Key of index {self.name} is not declared unique and has no tiebreaker; "
                "rows sharing a key value can repeat across pages",
                extra={"index": self.name},
            )

    def build_statement(self, request: PageRequest) -> Select[Any]:
        """Build the SELECT for one page request.

        Adds:
        1. Upper bound condition (if the request carries one)
        2. Seek condition past the cursor (if provided)
        3. ORDER BY in the traversal direction
        4. LIMIT of size + 1 to detect another page
        """
        key_columns = [self.key.label(_KEY)]
        if self.tiebreaker is not None:
            key_columns.append(self.tiebreaker.label(_TIEBREAKER))
        payload = self.columns or tuple(c for c in (self.key, self.tiebreaker) if c is not None)

        statement = select(*key_columns, *payload)
        if self.criteria:
            statement = statement.where(*self.criteria)

        if request.upper_bound is not None:
            bound = self._convert_cursor_value(self.key, request.upper_bound)
            statement = statement.where(
                self.key <= bound if request.upper_inclusive else self.key < bound
            )

        if request.after is not None:
            statement = statement.where(self._seek(self._decode(request.after, request), forward=True))
        elif request.before is not None:
            statement = statement.where(self._seek(self._decode(request.before, request), forward=False))

        ordering = [self.key] + ([self.tiebreaker] if self.tiebreaker is not None else [])
        if request.direction == "forward":
            statement = statement.order_by(*(col.asc() for col in ordering))
        else:
            statement = statement.order_by(*(col.desc() for col in ordering))

        return statement.limit(request.size + 1)

    def to_page(self, request: PageRequest, rows: Sequence[Any]) -> Page[tuple[Any, ...]]:
        """Turn size + 1 fetched rows into a page with cursors."""
        offset = 2 if self.tiebreaker is not None else 1
        extra_row = rows[request.size] if len(rows) > request.size else None
        rows = list(rows[: request.size])

        if request.direction == "forward":
            items = [tuple(row[offset:]) for row in rows]
            # The extra row is where the next page starts.
            after = self._cursor_for(extra_row, "forward") if extra_row is not None else None
            before = (
                self._cursor_for(rows[0], "backward")
                if rows and request.after is not None
                else None
            )
        else:
            rows.reverse()
            items = [tuple(row[offset:]) for row in rows]
            before = self._cursor_for(rows[0], "backward") if extra_row is not None else None
            # The entry at the request's before cursor starts the following page.
            after = request.before

        return Page(items=items, before=before, after=after)

    def _cursor_for(self, row: Any, direction: str) -> str:
        values = {"key": row[0]}
        if self.tiebreaker is not None:
            values["tiebreaker"] = row[1]
        return CursorCodec.encode(CursorData(values=values, direction=direction))

    def _seek(self, position: dict[str, Any], *, forward: bool) -> Any:
        key_value = self._convert_cursor_value(self.key, position["key"])
        if self.tiebreaker is None or "tiebreaker" not in position:
            return self.key >= key_value if forward else self.key < key_value

        tb_value = self._convert_cursor_value(self.tiebreaker, position["tiebreaker"])
        if forward:
            return or_(self.key > key_value, and_(self.key == key_value, self.tiebreaker >= tb_value))
        return or_(self.key < key_value, and_(self.key == key_value, self.tiebreaker < tb_value))

    def _decode(self, cursor: str, request: PageRequest) -> dict[str, Any]:
        try:
            values = CursorCodec.decode(cursor).values
        except ValueError as e:
            raise PermanentFetchError(
                f"Cursor was not issued by index {self.name}",
                request=request,
                extra={"cursor": cursor},
            ) from e
        if "key" not in values:
            raise PermanentFetchError(
                f"Cursor was not issued by index {self.name}",
                request=request,
                extra={"cursor": cursor},
            )
        return values

    def _convert_cursor_value(
        self,
        column: InstrumentedAttribute[Any],
        value: Any,
    ) -> Any:
        """Convert cursor value to appropriate Python type.

        Handles datetime strings, UUIDs, etc. that were serialized
        when creating the cursor.
        """
        if value is None:
            return None

        column_type = getattr(column.type, "impl", column.type)
        type_name = type(column_type).__name__

        if type_name in ("DateTime", "TIMESTAMP"):
            if isinstance(value, str):
                return datetime.fromisoformat(value)
            return value

        if type_name in ("Uuid", "UUID"):
            if isinstance(value, str):
                return UUID(value)
            return value

        return value

    def _translate_error(self, request: PageRequest, error: SQLAlchemyError) -> Exception:
        if isinstance(error, (OperationalError, PoolTimeoutError)):
            return TransientFetchError(
                f"Database unavailable while reading {self.name}: {error}",
                request=request,
            )
        return PermanentFetchError(
            f"Query against {self.name} failed: {error}",
            request=request,
        )


class SqlIndexFetcher(_KeysetIndex):
    """Blocking fetch adapter over a ``Session`` factory."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        key: InstrumentedAttribute[Any],
        **kwargs: Any,
    ) -> None:
        super().__init__(key, **kwargs)
        self._session_factory = session_factory

    def fetch(self, request: PageRequest) -> Page[tuple[Any, ...]]:
        """Fetch the page addressed by ``request``."""
        statement = self.build_statement(request)
        try:
            with self._session_factory() as session:
                rows = session.execute(statement).all()
        except SQLAlchemyError as e:
            raise self._translate_error(request, e) from e
        return self.to_page(request, rows)


class AsyncSqlIndexFetcher(_KeysetIndex):
    """Coroutine fetch adapter over an ``AsyncSession`` factory."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        key: InstrumentedAttribute[Any],
        **kwargs: Any,
    ) -> None:
        super().__init__(key, **kwargs)
        self._session_factory = session_factory

    async def fetch(self, request: PageRequest) -> Page[tuple[Any, ...]]:
        """Fetch the page addressed by ``request``."""
        statement = self.build_statement(request)
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                rows = result.all()
        except SQLAlchemyError as e:
            raise self._translate_error(request, e) from e
        return self.to_page(request, rows)


__all__ = ["AsyncSqlIndexFetcher", "SqlIndexFetcher"]
