"""Functional tests for the ``marketbase db`` subcommands.

End-to-end verification of the database CLI via ``click.testing.CliRunner``,
from a brand-new SQLite file to migrated tables. Commands covered:
``current``, ``heads``, ``history``, ``status`` and ``upgrade``.

* Without ``MARKETBASE_DB_URL`` the commands needing a connection exit with
  code 1 and print :data:`MISSING_DB_URL_MSG`.
* ``db upgrade`` prompts with a backup warning unless ``--force``/``--sql``.
* ``db status`` reports connectivity, backend, masked URL and table state.
"""

import re

import pytest
from click.testing import CliRunner

from marketbase.entrypoints.cli.db import (
    INVALID_URL_FORMAT_MSG,
    UPGRADE_SCHEMA_INSTRUCTIONS,
    UPGRADE_SCHEMA_WARNING,
)
from marketbase.entrypoints.cli.helpers.app import MISSING_DB_URL_MSG
from marketbase.entrypoints.cli.main import marketbase as marketbase_cli

# pylint: disable=magic-value-comparison

BASE_REVISION = "3f1c9a7d2b64"
REV_RE = re.compile(r"\b[0-9a-f]{12,}\b")


@pytest.mark.parametrize(
    "cmd",
    [["db", "current"], ["db", "history", "-i"], ["db", "upgrade"]],
)
def test_db_no_url(cmd, tmp_path):
    """db commands requiring a connection fail if MARKETBASE_DB_URL is unset."""
    runner = CliRunner(
        env={"MARKETBASE_DB_URL": "", "MARKETBASE_LOG_PATH": str(tmp_path / "x.log")}
    )
    result = runner.invoke(marketbase_cli, cmd)
    assert result.exit_code == 1
    assert MISSING_DB_URL_MSG in result.output


def test_db_invalid_url(tmp_path):
    """A malformed URL is reported as such."""
    runner = CliRunner(
        env={
            "MARKETBASE_DB_URL": "not a valid url",
            "MARKETBASE_LOG_PATH": str(tmp_path / "x.log"),
        }
    )
    result = runner.invoke(marketbase_cli, ["db", "upgrade"])
    assert result.exit_code != 0
    assert INVALID_URL_FORMAT_MSG in result.output


def test_new_operator_initial_db_setup(tmp_path):
    """An operator prepares a fresh SQLite database step by step."""
    url = f"sqlite:///{tmp_path / 'marketbase.db'}"
    runner = CliRunner(
        env={"MARKETBASE_DB_URL": url, "MARKETBASE_LOG_PATH": str(tmp_path / "x.log")}
    )

    # The available head is the first revision.
    result = runner.invoke(marketbase_cli, ["db", "heads"])
    assert result.exit_code == 0, result.output
    assert BASE_REVISION in result.output

    # Nothing is applied yet.
    result = runner.invoke(marketbase_cli, ["db", "current"])
    assert result.exit_code == 0, result.output
    assert REV_RE.search(result.output) is None

    # Status says so and explains what to do.
    result = runner.invoke(marketbase_cli, ["db", "status"])
    assert result.exit_code == 0, result.output
    assert "Database reachable" in result.output
    assert "Backend : sqlite" in result.output
    assert "uninitialized" in result.output
    assert UPGRADE_SCHEMA_INSTRUCTIONS in result.output

    # Declining the prompt changes nothing.
    result = runner.invoke(marketbase_cli, ["db", "upgrade"], input="n\n")
    assert result.exit_code == 1
    assert UPGRADE_SCHEMA_WARNING in result.output
    assert "Are you sure you want to proceed?" in result.output
    result = runner.invoke(marketbase_cli, ["db", "current"])
    assert REV_RE.search(result.output) is None

    # The SQL can be previewed.
    result = runner.invoke(marketbase_cli, ["db", "upgrade", "--sql"])
    assert result.exit_code == 0, result.output
    assert "CREATE TABLE collections" in result.output

    # Confirming applies the migration.
    result = runner.invoke(marketbase_cli, ["db", "upgrade"], input="y\n")
    assert result.exit_code == 0, result.output
    assert "Upgrade complete!" in result.output

    result = runner.invoke(marketbase_cli, ["db", "current"])
    assert BASE_REVISION in result.output
    result = runner.invoke(marketbase_cli, ["db", "history", "-i"])
    assert "(current)" in result.output
    result = runner.invoke(marketbase_cli, ["db", "status"])
    assert "up to date" in result.output
    assert UPGRADE_SCHEMA_INSTRUCTIONS not in result.output
