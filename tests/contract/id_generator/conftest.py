"""Fixtures for id_generator contract tests."""

from collections.abc import Iterable

import pytest

from marketbase.adapters.id_generators import SimpleIdGenerator, ULIDGenerator
from marketbase.interfaces.id_generator import IdGenerator


@pytest.fixture(params=["ulid", "simple"])
def id_generator(request: pytest.FixtureRequest) -> Iterable[IdGenerator]:
    """Return a fresh IdGenerator for the requested backend.

    Supported params:
      - `"ulid"` → ULIDGenerator (record store default)
      - `"simple"` → SimpleIdGenerator (readable ids for tests)
    """
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "simple":
            yield SimpleIdGenerator()
        case _:
            raise ValueError(f"unknown id generator type: {request.param}")


@pytest.fixture(params=["ulid"])
def monotonic_id_generators(request: pytest.FixtureRequest) -> Iterable[IdGenerator]:
    """Yield generators whose ids sort in creation order across threads."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case _:
            raise ValueError(f"unknown monotonic id generator type: {request.param}")
