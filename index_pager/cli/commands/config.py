"""Configuration inspection commands."""

import json

import click

from index_pager.core.settings import (
    get_logging_settings,
    get_pagination_settings,
    get_store_settings,
)


@click.group(name="config")
def config() -> None:
    """Configuration management commands."""


@config.command(name="show")
def show() -> None:
    """Print the effective settings as JSON."""
    settings = {
        "pagination": get_pagination_settings().model_dump(mode="json"),
        "store": get_store_settings().model_dump(mode="json"),
        "logging": get_logging_settings().model_dump(mode="json"),
    }
    click.echo(json.dumps(settings, indent=2))
