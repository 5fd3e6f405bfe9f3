"""Opaque cursor tokens for stores that issue them.

A store mints a cursor for the position its next page starts from and reads
it back when the token returns in a ``PageRequest``. Nothing between the
two ever looks inside: to the traversal a cursor is just a string.

Token format: URL-safe base64 of compact JSON,

    {"v": {"entry": [9, "customers/9"]}, "d": "forward"}

where ``v`` holds whatever position values the store chose and ``d`` is the
direction the cursor was issued for.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from index_pager.core.pagination.schemas import Direction


class CursorData(BaseModel):
    """Decoded contents of a cursor.

    Attributes:
        values: Position values chosen by the issuing store
        direction: Traversal direction the cursor was issued for
    """

    values: dict[str, Any] = Field(description="Position values")
    direction: Direction = Field(default="forward", description="Traversal direction")

    model_config = {"frozen": True}


def _json_default(value: Any) -> Any:
    # datetimes, UUIDs and decimals come back as strings; the issuing store
    # converts them to column types again when it decodes
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    msg = f"Cannot store {type(value).__name__} in a cursor"
    raise TypeError(msg)


class CursorCodec:
    """Mint and read cursor tokens.

    Usage:
        token = CursorCodec.encode(CursorData(values={"key": 9}))
        CursorCodec.decode(token).values  # {"key": 9}
    """

    @staticmethod
    def encode(data: CursorData) -> str:
        """Encode cursor data as a URL-safe token."""
        payload = json.dumps(
            {"v": data.values, "d": data.direction},
            separators=(",", ":"),
            default=_json_default,
        )
        return base64.urlsafe_b64encode(payload.encode()).decode()

    @staticmethod
    def decode(cursor: str) -> CursorData:
        """Decode a token minted by ``encode``.

        Raises:
            ValueError: If the token is not a cursor this codec produced
        """
        try:
            payload = json.loads(base64.urlsafe_b64decode(cursor.encode()))
            return CursorData(values=payload["v"], direction=payload.get("d", "forward"))
        except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
            raise ValueError(f"Invalid cursor: {e}") from e

    @staticmethod
    def for_entry(entry: Sequence[Any], direction: Direction = "forward") -> str:
        """Mint a cursor positioned at an index entry (its full value tuple)."""
        return CursorCodec.encode(CursorData(values={"entry": list(entry)}, direction=direction))


__all__ = ["CursorCodec", "CursorData"]
