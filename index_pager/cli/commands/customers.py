"""Customer lesson commands."""

import asyncio
import sys
from collections.abc import Callable
from functools import wraps
from typing import Any

import click

from index_pager.cli.utils import customers_table, header, problem, success, warning
from index_pager.core.exceptions import PaginationException
from index_pager.lessons import CustomerLesson, open_store


def store_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add backend/page-size/seed options and pass a ready ``CustomerLesson``."""

    @click.option(
        "--backend",
        type=click.Choice(["memory", "sql"]),
        default="memory",
        show_default=True,
        help="Store holding the customers",
    )
    @click.option(
        "--page-size",
        type=click.IntRange(min=1),
        default=None,
        help="Entries requested per page (PAGINATION_DEFAULT_PAGE_SIZE if omitted)",
    )
    @click.option(
        "--seed",
        type=click.IntRange(min=0),
        default=None,
        help="Customers to create before querying (STORE_SEED_COUNT if omitted)",
    )
    @wraps(func)
    def wrapper(*args: Any, backend: str, page_size: int | None, seed: int | None, **kwargs: Any) -> Any:
        store = open_store(backend, seed=seed)  # type: ignore[arg-type]
        lesson = CustomerLesson(store, page_size=page_size)
        try:
            return func(lesson, *args, **kwargs)
        except PaginationException as e:
            problem(e)
            sys.exit(1)

    return wrapper


@click.group(name="customers")
def customers() -> None:
    """Query a seeded customer index."""


@customers.command(name="read")
@click.argument("customer_id", type=int)
@store_options
def read(lesson: CustomerLesson, customer_id: int) -> None:
    """Read one customer by id."""
    customer = lesson.read_customer(customer_id)
    if customer is None:
        warning(f"Customer {customer_id} not found")
        sys.exit(1)
    click.echo(str(customer))


@customers.command(name="lookup")
@click.argument("customer_ids", nargs=-1, required=True, type=int)
@store_options
def lookup(lesson: CustomerLesson, customer_ids: tuple[int, ...]) -> None:
    """Read several customers by id."""
    found = lesson.read_customers(customer_ids)
    header(f"{len(found)} of {len(set(customer_ids))} customers found")
    customers_table(found)


@customers.command(name="less-than")
@click.argument("max_id", type=int)
@store_options
def less_than(lesson: CustomerLesson, max_id: int) -> None:
    """Read customers whose id is below MAX_ID."""
    found = lesson.read_less_than(max_id)
    header(f"Customers with id < {max_id}: {len(found)}")
    customers_table(found)


@customers.command(name="between")
@click.argument("min_id", type=int)
@click.argument("max_id", type=int)
@store_options
def between(lesson: CustomerLesson, min_id: int, max_id: int) -> None:
    """Read customers with MIN_ID <= id <= MAX_ID."""
    if min_id > max_id:
        raise click.BadParameter("MIN_ID must not be greater than MAX_ID")
    found = lesson.read_between(min_id, max_id)
    header(f"Customers with {min_id} <= id <= {max_id}: {len(found)}")
    customers_table(found)


@customers.command(name="walk")
@store_options
def walk(lesson: CustomerLesson) -> None:
    """Read every customer, one page at a time."""
    total = 0
    for number, page in enumerate(lesson.read_all_pages(), start=1):
        header(f"Page {number} ({len(page)} customers)")
        total += customers_table(page)
    success(f"Read {total} customers")


@customers.command(name="stream")
@store_options
def stream(lesson: CustomerLesson) -> None:
    """Read every customer through the async traversal."""

    async def _consume() -> int:
        return customers_table([customer async for customer in lesson.aread_all()])

    total = asyncio.run(_consume())
    success(f"Streamed {total} customers")
