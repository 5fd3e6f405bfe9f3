"""Tests for the customers and config CLI commands.

Testing approach:
- Uses Click's CliRunner for command invocation
- Runs against real in-memory stores (memory and SQLite backends)
- Tests output formatting and exit codes
"""

import json

from click.testing import CliRunner
import pytest

from index_pager import __version__
from index_pager.cli.main import cli


@pytest.fixture
def cli_runner(monkeypatch, restore_root_logger):
    """Create Click CLI runner with console logging disabled.

    Returns:
        CliRunner instance configured for testing.
    """
    monkeypatch.setenv("LOG_CONSOLE_ENABLED", "false")
    return CliRunner()


@pytest.mark.unit
class TestWalkCommand:
    """Tests for `customers walk` and `customers stream`."""

    def test_walk_prints_pages(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "walk", "--page-size", "8"])

        assert result.exit_code == 0, result.output
        assert "Page 1 (8 customers)" in result.output
        assert "Page 3 (4 customers)" in result.output
        assert "Read 20 customers" in result.output

    def test_walk_sql_backend(self, cli_runner):
        result = cli_runner.invoke(
            cli, ["customers", "walk", "--backend", "sql", "--page-size", "8", "--seed", "10"]
        )

        assert result.exit_code == 0, result.output
        assert "Read 10 customers" in result.output

    def test_stream(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "stream", "--page-size", "8"])

        assert result.exit_code == 0, result.output
        assert "Customer(id=20, balance=200)" in result.output
        assert "Streamed 20 customers" in result.output

    def test_rejects_zero_page_size(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "walk", "--page-size", "0"])

        assert result.exit_code == 2


@pytest.mark.unit
class TestQueryCommands:
    """Tests for lookups and range commands."""

    def test_read(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "read", "7"])

        assert result.exit_code == 0, result.output
        assert "Customer(id=7, balance=70)" in result.output

    def test_read_missing(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "read", "99"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_lookup(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "lookup", "1", "3", "3", "99"])

        assert result.exit_code == 0, result.output
        assert "2 of 3 customers found" in result.output

    def test_less_than(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "less-than", "5", "--backend", "sql"])

        assert result.exit_code == 0, result.output
        assert "Customers with id < 5: 4" in result.output
        assert "Customer(id=5" not in result.output

    def test_between(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "between", "5", "11", "--page-size", "8"])

        assert result.exit_code == 0, result.output
        assert "Customers with 5 <= id <= 11: 7" in result.output

    def test_between_inverted(self, cli_runner):
        result = cli_runner.invoke(cli, ["customers", "between", "11", "5"])

        assert result.exit_code == 2
        assert "MIN_ID" in result.output

    def test_page_limit_reported(self, cli_runner, monkeypatch):
        monkeypatch.setenv("PAGINATION_MAX_PAGES", "1")

        result = cli_runner.invoke(cli, ["customers", "walk", "--page-size", "8"])

        assert result.exit_code == 1
        assert "exceeded the limit of 1 pages" in result.output


@pytest.mark.unit
class TestRootCommand:
    """Tests for the root group and config commands."""

    def test_version(self, cli_runner):
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_show(self, cli_runner, monkeypatch):
        monkeypatch.setenv("PAGINATION_DEFAULT_PAGE_SIZE", "8")

        result = cli_runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0, result.output
        settings = json.loads(result.output)
        assert settings["pagination"]["default_page_size"] == 8
        assert settings["store"]["seed_count"] == 20
        assert "level" in settings["logging"]
