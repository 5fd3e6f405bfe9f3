"""Output helpers shared by the CLI commands."""

from collections.abc import Iterable

import click

from index_pager.core.exceptions import PaginationException
from index_pager.lessons.models import Customer


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green")


def warning(message: str) -> None:
    """Print a warning message in yellow."""
    click.secho(f"⚠ {message}", fg="yellow")


def header(message: str) -> None:
    """Print a section header in cyan bold."""
    click.secho(f"\n{message}", fg="cyan", bold=True)


def problem(exc: PaginationException) -> None:
    """Print a pagination failure to stderr, with its context fields."""
    click.secho(f"✗ {exc.title}: {exc.detail}", fg="red", err=True)
    for key, value in exc.extra.items():
        click.secho(f"    {key}: {value}", fg="red", dim=True, err=True)


def customers_table(customers: Iterable[Customer]) -> int:
    """Print one customer per line; returns how many were printed."""
    count = 0
    for customer in customers:
        click.echo(f"  {customer}")
        count += 1
    return count
