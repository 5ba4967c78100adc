"""Shared pytest fixtures for chainql unit and integration tests."""
from __future__ import annotations

import pytest

from chainql import IdentifierPolicy, PostgresDialect, SQLiteDialect
from tests.fixtures import ALL_DIALECTS, MARKER_DIALECTS


@pytest.fixture(params=ALL_DIALECTS)
def dialect_name(request: pytest.FixtureRequest) -> str:
    """Every registered built-in dialect tag."""
    return request.param


@pytest.fixture(params=MARKER_DIALECTS)
def marker_dialect(request: pytest.FixtureRequest) -> str:
    """Dialects that bind with the anonymous ``?`` marker."""
    return request.param


@pytest.fixture()
def quoting_pg() -> PostgresDialect:
    return PostgresDialect(IdentifierPolicy.QUOTE)


@pytest.fixture()
def quoting_sqlite() -> SQLiteDialect:
    return SQLiteDialect(IdentifierPolicy.QUOTE)
