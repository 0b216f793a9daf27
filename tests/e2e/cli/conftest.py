"""Fixtures and test helpers for end-to-end CLI tests.

Provides a test-only `log-demo` Click command that emits structured log
messages, fixtures to register that command, obtain a CliRunner, and run tests
within an isolated filesystem, plus a migrated SQLite database for the
commands that need one.
"""

import logging

import click
import pytest
from click.testing import CliRunner

from marketbase.entrypoints.cli.main import marketbase

# pylint: disable=redefined-outer-name


@click.command()
def log_demo():
    """Emit representative log messages for CLI/flight-recorder tests.

    Emits DEBUG/INFO/WARNING/ERROR/CRITICAL messages on the 'marketbase.demo'
    logger and additional messages on a 'some.thirdparty' logger to exercise
    logger-level filtering and flight-recorder behavior.
    """
    logger = logging.getLogger("marketbase.demo")
    logger.debug("This is a debug-level test message.")
    logger.info("This is an info-level test message.")
    logger.warning("This is a warning-level test message.")
    logger.error("This is an error-level test message.")
    logger.critical("This is a critical-level test message.")
    third_party_logger = logging.getLogger("some.thirdparty")
    third_party_logger.debug("This is a debug-level third-party test message.")
    third_party_logger.info("This is an info-level third-party test message.")
    third_party_logger.warning("This is a warning-level third-party test message.")
    logger.debug("This is a final debug-level test message.")


def _remove_command_everywhere(group, name: str) -> None:
    """Remove a command from a Click group and its internal sections."""
    group.commands.pop(name, None)
    if hasattr(group, "_default_section"):
        group._default_section.commands.pop(name, None)  # pylint: disable=protected-access
    for sec in getattr(group, "_sections", []):
        getattr(sec, "commands", {}).pop(name, None)


@pytest.fixture
def registered_log_demo():
    """Register the 'log-demo' command on `marketbase` for one test."""
    marketbase.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        _remove_command_everywhere(marketbase, "log-demo")


@pytest.fixture
def runner():
    """Return a Click CliRunner for invoking CLI commands in tests."""
    return CliRunner()


@pytest.fixture
def fs(runner):
    """Run the test inside runner.isolated_filesystem()."""
    with runner.isolated_filesystem():
        yield


@pytest.fixture
def cli_env(sqlite_url, tmp_path):
    """Environment for commands that talk to a migrated SQLite database.

    The flight recorder writes under `tmp_path`, and the administrator
    credentials are set so `startup` can bootstrap one.
    """
    return {
        "MARKETBASE_DB_URL": sqlite_url,
        "MARKETBASE_LOG_PATH": str(tmp_path / "marketbase.log"),
        "MARKETBASE_ADMIN_EMAIL": "admin@example.com",
        "MARKETBASE_ADMIN_PASSWORD": "s3cret",
        "MARKETBASE_SCHEMA_MODE": "reconcile",
        "MARKETBASE_SCHEMA_POLICY": "rebuild",
    }
