"""Unit tests for placeholder, identifier and dialect helpers."""

from __future__ import annotations

import pytest

from chainql.compile.base import IdentifierPolicy
from chainql.compile.mysql import MariaDBDialect, MySQLDialect
from chainql.compile.placeholders import (
    allocate_placeholders,
    count_markers,
    escape_identifier,
    rewrite_condition,
    shift_placeholders,
    validate_direction,
)
from chainql.compile.postgres import PostgresDialect
from chainql.compile.registry import DialectFactory, resolve_dialect
from chainql.compile.sqlite import SQLiteDialect
from chainql.errors import EmptyIdentifierError, InvalidDialectError
from tests.fixtures import ALL_DIALECTS

PG = PostgresDialect()
SQ = SQLiteDialect()


# ---------------------------------------------------------------------------
# Placeholder allocation
# ---------------------------------------------------------------------------


def test_allocate_numbered_tokens():
    assert allocate_placeholders(PG, 3, 3) == ["$3", "$4", "$5"]


def test_allocate_marker_tokens(marker_dialect):
    dialect = resolve_dialect(marker_dialect)
    assert allocate_placeholders(dialect, 7, 3) == ["?", "?", "?"]


@pytest.mark.parametrize("count", [0, -2])
def test_allocate_non_positive_count_is_empty(count):
    assert allocate_placeholders(PG, 1, count) == []


def test_rewrite_condition_numbers_left_to_right():
    assert rewrite_condition(PG, "a = ? AND b = ?", 3) == "a = $3 AND b = $4"


def test_rewrite_condition_is_identity_for_markers(marker_dialect):
    dialect = resolve_dialect(marker_dialect)
    assert rewrite_condition(dialect, "a = ? AND b = ?", 9) == "a = ? AND b = ?"


def test_rewrite_condition_without_markers():
    assert rewrite_condition(PG, "deleted_at IS NULL", 4) == "deleted_at IS NULL"


def test_count_markers():
    assert count_markers("a = ? OR (b BETWEEN ? AND ?)") == 3
    assert count_markers("active") == 0


def test_shift_placeholders_numbered():
    assert shift_placeholders(PG, "id = $1 OR id = $12", 2) == "id = $3 OR id = $14"


def test_shift_placeholders_marker_identity():
    assert shift_placeholders(SQ, "id = ?", 5) == "id = ?"


# ---------------------------------------------------------------------------
# Identifier escaping
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("policy", list(IdentifierPolicy))
def test_star_is_never_escaped(dialect_name, policy):
    dialect = DialectFactory.create(dialect_name, policy)
    assert escape_identifier(dialect, "*") == "*"


@pytest.mark.parametrize("name", ["", "   "])
def test_empty_identifier_rejected(dialect_name, name):
    with pytest.raises(EmptyIdentifierError) as exc_info:
        escape_identifier(resolve_dialect(dialect_name), name, role="column")
    assert exc_info.value.code == "EMPTY_IDENTIFIER"
    assert exc_info.value.details == {"role": "column"}


def test_pass_through_keeps_name_verbatim(dialect_name):
    dialect = resolve_dialect(dialect_name)
    assert escape_identifier(dialect, "users u") == "users u"
    assert escape_identifier(dialect, "u.created_at") == "u.created_at"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("users", '"users"'),
        ("public.users", '"public"."users"'),
        ("users u", '"users" "u"'),
        ("users AS u", '"users" AS "u"'),
        ("u.*", '"u".*'),
        ('we"ird', '"we""ird"'),
    ],
)
def test_quote_policy_postgres(quoting_pg, name, expected):
    assert escape_identifier(quoting_pg, name) == expected


def test_quote_policy_mysql_uses_backticks():
    dialect = MySQLDialect(IdentifierPolicy.QUOTE)
    assert escape_identifier(dialect, "shop.orders") == "`shop`.`orders`"
    assert escape_identifier(dialect, "we`ird") == "`we``ird`"


# ---------------------------------------------------------------------------
# Direction
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("desc", "DESC"),
        (" Asc ", "ASC"),
        ("DESC", "DESC"),
        ("sideways", "ASC"),
        ("", "ASC"),
        ("DESC; DROP TABLE users", "ASC"),
    ],
)
def test_validate_direction(raw, expected):
    assert validate_direction(raw) == expected


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_registered_dialects():
    registered = DialectFactory.registered_dialects()
    for name in ALL_DIALECTS:
        assert name in registered
    assert "sqlite3" in registered


def test_sqlite3_alias():
    assert isinstance(resolve_dialect("sqlite3"), SQLiteDialect)


def test_resolve_returns_instances_unchanged(quoting_pg):
    assert resolve_dialect(quoting_pg) is quoting_pg


def test_unknown_dialect_raises():
    with pytest.raises(InvalidDialectError) as exc_info:
        DialectFactory.create("oracle")
    err = exc_info.value
    assert err.code == "INVALID_DIALECT"
    assert err.details["dialect"] == "oracle"
    assert "postgres" in err.details["registered"]


def test_dialect_capabilities():
    assert PG.numbered and PG.supports_returning
    assert not SQ.numbered and not SQ.supports_returning
    assert MariaDBDialect().dialect_name == "mariadb"
    assert MariaDBDialect().quote_char == "`"


def test_dialect_policy_defaults_to_pass_through():
    assert PostgresDialect().identifier_policy is IdentifierPolicy.PASS_THROUGH
    assert DialectFactory.create("mysql", IdentifierPolicy.QUOTE).identifier_policy is (
        IdentifierPolicy.QUOTE
    )


def test_markers_inside_string_literals_are_ignored():
    assert count_markers("note = 'why?' AND id = ?") == 1
    assert rewrite_condition(PG, "note = 'why?' AND id = ?", 1) == "note = 'why?' AND id = $1"
    assert rewrite_condition(PG, "s = 'it''s ?' OR t = ?", 2) == "s = 'it''s ?' OR t = $2"


def test_shift_placeholders_skips_string_literals():
    assert shift_placeholders(PG, "memo <> '$1' AND id = $1", 3) == "memo <> '$1' AND id = $4"
