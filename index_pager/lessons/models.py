"""Customer records used by the lessons.

``Customer`` is the materialized record handed to callers. ``CustomerRecord``
is its table for the SQL backend.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from sqlalchemy import Integer, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Consistent naming convention for database constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base for lesson tables."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class CustomerRecord(Base):
    """Row of the ``customers`` table, keyed by customer id."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    balance: Mapped[int] = mapped_column(Integer, nullable=False)


class Customer(BaseModel):
    """A customer and their account balance."""

    id: int = Field(description="Customer id, the index key")
    balance: int = Field(description="Account balance")

    model_config = {"frozen": True, "extra": "ignore"}

    def __str__(self) -> str:
        return f"Customer(id={self.id}, balance={self.balance})"
