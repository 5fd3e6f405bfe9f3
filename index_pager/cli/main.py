"""Main CLI entry point for index-pager commands."""

import click

from index_pager import __version__
from index_pager.cli.commands import config, customers
from index_pager.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="index-pager")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL for this run",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """index-pager - walk paginated indexes with cursors.

    \b
    Command Groups:
      customers  Query a seeded customer index
      config     Configuration management

    \b
    Quick Start:
      index-pager customers walk --page-size 8
      index-pager customers between 5 11
      index-pager customers lookup 1 3 7 --backend sql
    """
    ctx.ensure_object(dict)
    overrides = {"level": log_level.upper()} if log_level else {}
    setup_logging(**overrides)


cli.add_command(customers.customers)
cli.add_command(config.config)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
