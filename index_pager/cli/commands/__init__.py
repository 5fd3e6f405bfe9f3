"""CLI command modules."""

from index_pager.cli.commands import config, customers

__all__ = [
    "config",
    "customers",
]
