"""Global pytest fixtures and default marks for the marketbase test suite."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

# pylint: disable=unused-argument

pytest_plugins = [
    "tests.fixtures.sqlite",
    "tests.fixtures.postgres",
    "tests.fixtures.datagen",
]

TESTS_ROOT = Path(__file__).parent.resolve()

# Top-level test folder -> mark applied to everything collected below it.
FOLDER_MARKS = {
    "unit": "unit",
    "contract": "contract",
    "integration": "integration",
    "e2e": "e2e",
    "functional": "functional",
}


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Mark each item after the top-level folder it lives in.

    An explicit mark of the same name on the test wins.
    """
    for item in items:
        try:
            folder = item.path.resolve().relative_to(TESTS_ROOT).parts[0]
        except (ValueError, IndexError):
            continue
        if (name := FOLDER_MARKS.get(folder)) is None:
            continue
        if not any(marker.name == name for marker in item.iter_markers()):
            item.add_marker(getattr(pytest.mark, name))


# Helper to route to an existing engine fixture by name
@pytest.fixture
def engine(request: pytest.FixtureRequest) -> Engine:
    """Indirection fixture to parametrize over engine-providing fixtures.

    Example:
        ```py
        @pytest.mark.parametrize(
            "engine", ["postgres_engine", "sqlite_engine_file"], indirect=True
        )
        def test_something(engine): ...
        ```
    """
    return request.getfixturevalue(request.param)
