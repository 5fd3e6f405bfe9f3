"""CLI utilities."""

from index_pager.cli.utils.formatters import customers_table, header, problem, success, warning

__all__ = [
    "customers_table",
    "header",
    "problem",
    "success",
    "warning",
]
