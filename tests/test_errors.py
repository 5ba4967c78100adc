"""Unit tests for error capture and the fail-once builder state."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

import chainql.compile.builder as builder_module
from chainql import (
    EmptyConditionError,
    EmptyIdentifierError,
    InternalPlaceholderError,
    InvalidDialectError,
    Operation,
    QueryBuilder,
    StatementError,
    UnsupportedOperationError,
    WrongOperationError,
    build_delete,
    build_insert,
    build_select,
    build_update,
)


def test_invalid_dialect_captured():
    qb = build_select("oracle", "users")
    assert qb.failed
    assert isinstance(qb.error, InvalidDialectError)
    with pytest.raises(InvalidDialectError):
        qb.build()


def test_empty_table_captured(dialect_name):
    qb = build_select(dialect_name, "")
    assert isinstance(qb.error, EmptyIdentifierError)
    assert qb.error.details == {"role": "table name"}


def test_empty_initial_column_captured():
    assert isinstance(build_select("postgres", "users", "id", "").error, EmptyIdentifierError)


@pytest.mark.parametrize("clause", ["where", "or_where", "having"])
def test_empty_condition(clause):
    qb = getattr(build_select("postgres", "users"), clause)("")
    assert isinstance(qb.error, EmptyConditionError)


def test_mutators_after_failure_are_no_ops():
    qb = build_select("postgres", "users").where("", "ignored")
    first = qb.error

    chained = (
        qb.select("name")
        .where("a = ?", 1)
        .where_in("id", [1, 2])
        .limit(5)
        .order_by("", "DESC")
        .values({})
    )
    assert chained is qb
    assert qb.error is first
    with pytest.raises(EmptyConditionError) as exc_info:
        qb.build()
    assert exc_info.value is first


def test_first_error_wins():
    qb = build_insert("postgres", "users").select("name").values({}).returning("id")
    assert isinstance(qb.error, WrongOperationError)
    assert qb.error.details["method"] == "select"


def test_build_error_is_sticky():
    qb = build_update("postgres", "users").where("id = ?", 1)
    with pytest.raises(StatementError) as first:
        qb.build()
    with pytest.raises(StatementError) as second:
        qb.build()
    assert first.value is second.value
    assert first.value.code == "NO_DATA_PROVIDED"


def test_failed_subquery_fails_outer():
    outer = build_select("postgres", "users")
    inner = build_select("postgres", "orders").where("")
    assert outer.subquery(inner, "o") == ""
    assert outer.error is inner.error


def test_subquery_on_failed_outer_returns_empty():
    outer = build_select("postgres", "")
    assert outer.subquery(build_select("postgres", "orders"), "o") == ""
    assert isinstance(outer.error, EmptyIdentifierError)


@pytest.mark.parametrize(
    "chain",
    [
        lambda: build_update("postgres", "users").distinct(),
        lambda: build_delete("postgres", "users").aggregate("COUNT", "*"),
        lambda: build_insert("postgres", "users").select("id"),
    ],
)
def test_select_only_mutators(chain):
    assert isinstance(chain().error, WrongOperationError)


@pytest.mark.parametrize(
    "chain",
    [
        lambda: build_select("postgres", "users").aggregate("", "id"),
        lambda: build_select("postgres", "users").aggregate("SUM", ""),
        lambda: build_select("postgres", "users").group_by("a", ""),
        lambda: build_select("postgres", "users").left_join("", "x = y"),
        lambda: build_select("postgres", "users").where_in("", [1]),
        lambda: build_select("postgres", "users").where_between("", 1, 2),
        lambda: build_select("postgres", "users").order_by(""),
    ],
)
def test_empty_identifiers(chain):
    assert isinstance(chain().error, EmptyIdentifierError)


def test_failed_mutator_leaves_no_partial_state():
    qb = build_select("postgres", "users").group_by("a", "")
    with pytest.raises(EmptyIdentifierError):
        qb.build()


def test_unsupported_operation():
    qb = QueryBuilder("postgres", "users", "MERGE")
    assert isinstance(qb.error, UnsupportedOperationError)
    assert qb.error.details == {"operation": "MERGE"}


def test_operation_accepts_names():
    assert QueryBuilder("postgres", "users", "delete").build().sql == "DELETE FROM users"
    assert QueryBuilder("postgres", "users", Operation.SELECT, "id").build().sql == (
        "SELECT id FROM users"
    )


def test_between_requires_two_placeholders(monkeypatch):
    monkeypatch.setattr(builder_module, "allocate_placeholders", lambda *_args: ["?"])
    qb = build_select("sqlite", "events").where_between("day", 1, 2)
    assert isinstance(qb.error, InternalPlaceholderError)
    assert qb.error.details == {"clause": "BETWEEN", "expected": 2, "got": 1}


def test_error_response_shape():
    err = build_select("postgres", "users").where("").error
    assert err.to_error_response() == {
        "error": "EMPTY_CONDITION",
        "message": "WHERE condition cannot be empty.",
        "details": {"clause": "WHERE"},
    }


def test_failure_is_logged():
    with capture_logs() as logs:
        build_select("postgres", "users").where("")
    events = [e for e in logs if e["event"] == "statement_failed"]
    assert events and events[0]["code"] == "EMPTY_CONDITION"


def test_placeholder_mismatch_warns_but_builds():
    with capture_logs() as logs:
        compiled = build_select("postgres", "users").where("a = ? AND b = ?", 1).build()
    assert compiled.sql == "SELECT * FROM users WHERE a = $1 AND b = $2"
    warnings = [e for e in logs if e["event"] == "placeholder_count_mismatch"]
    assert warnings and warnings[0]["log_level"] == "warning"
    assert warnings[0]["markers"] == 2 and warnings[0]["arg_count"] == 1


def test_repr():
    assert "failed=EMPTY_IDENTIFIER" in repr(build_select("postgres", ""))
    assert "SELECT 'users'" in repr(build_select("postgres", "users"))
