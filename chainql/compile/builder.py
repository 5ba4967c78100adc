"""Fluent statement builder.

``QueryBuilder`` accumulates validated fragments and bound arguments for one
statement, then hands the accumulated state to the matching assembler in
:mod:`chainql.compile.clause_builders`.

Error accumulation
------------------
A builder is either :class:`~chainql.schema.statement.Open` or
:class:`~chainql.schema.statement.Failed`.  The first failing call captures
its error and moves the builder to ``Failed``; every later mutator returns
the builder untouched, and :meth:`QueryBuilder.build` raises the captured
error.  Chains therefore never need intermediate checks::

    compiled = (
        build_select("postgres", "users u", "u.id", "u.name")
        .left_join("posts p", "p.user_id = u.id")
        .where("u.age > ?", 18)
        .or_where("u.role = ?", "admin")
        .order_by("u.created_at", "DESC")
        .limit(10)
        .build()
    )
    cursor.execute(*compiled.as_tuple())
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Collection, Iterable, Mapping
from typing import Concatenate, ParamSpec, cast

import structlog

from chainql.compile.base import CompiledQuery, Dialect
from chainql.compile.clause_builders import ASSEMBLERS
from chainql.compile.placeholders import (
    allocate_placeholders,
    count_markers,
    escape_identifier,
    rewrite_condition,
    validate_direction,
)
from chainql.compile.registry import resolve_dialect
from chainql.errors import (
    EmptyConditionError,
    EmptyIdentifierError,
    InternalPlaceholderError,
    NoDataProvidedError,
    StatementError,
    UnsupportedOperationError,
    WrongOperationError,
)
from chainql.schema.statement import (
    BindValue,
    Failed,
    Open,
    Operation,
    StatementState,
    StatementStatus,
)

logger = structlog.get_logger(__name__)

#: Column ORDER BY falls back to when the requested one is not allow-listed.
ORDER_BY_FALLBACK_COLUMN = "id"

ColumnData = Mapping[str, BindValue] | Iterable[tuple[str, BindValue]]

_P = ParamSpec("_P")


def _chainable(
    method: Callable[Concatenate[QueryBuilder, _P], None],
) -> Callable[Concatenate[QueryBuilder, _P], QueryBuilder]:
    """Wrap a mutator so it is skipped once failed, captures its own error,
    and returns the builder for chaining."""

    @functools.wraps(method)
    def wrapper(self: QueryBuilder, *args: _P.args, **kwargs: _P.kwargs) -> QueryBuilder:
        if isinstance(self._status, Failed):
            return self
        try:
            method(self, *args, **kwargs)
        except StatementError as exc:
            self._fail(exc)
        return self

    return wrapper


class QueryBuilder:
    """Accumulates one SQL statement for one dialect.

    Prefer the module-level factories (:func:`build_select`,
    :func:`build_insert`, …) over calling the constructor directly.

    Args:
        dialect: A registered dialect tag (``"postgres"``, ``"mysql"``,
            ``"mariadb"``, ``"sqlite"``) or a :class:`Dialect` instance.
        table: Target table, optionally followed by an alias
            (``"users u"``).
        operation: Statement kind, as :class:`Operation` or its name.
        *columns: Initial SELECT columns; ``*`` when none are given.
    """

    def __init__(
        self,
        dialect: str | Dialect,
        table: str,
        operation: Operation | str,
        *columns: str,
    ) -> None:
        self._status: StatementStatus
        try:
            resolved = resolve_dialect(dialect)
            op = _coerce_operation(operation)
            safe_table = escape_identifier(resolved, table, role="table name")
            safe_columns = (
                [escape_identifier(resolved, c, role="column") for c in columns]
                if columns
                else ["*"]
            )
        except StatementError as exc:
            self._status = Failed(exc)
            self._log_failure(str(operation), exc)
            return
        self._status = Open(
            StatementState(
                operation=op,
                dialect=resolved,
                table=safe_table,
                columns=safe_columns,
            )
        )

    def __repr__(self) -> str:
        if isinstance(self._status, Failed):
            return f"QueryBuilder(failed={self._status.error.code})"
        state = self._status.state
        return (
            f"QueryBuilder({state.operation.value} {state.table!r}, "
            f"dialect={state.dialect.dialect_name!r})"
        )

    # ------------------------------------------------------------------
    # Error state
    # ------------------------------------------------------------------

    @property
    def error(self) -> StatementError | None:
        """The first captured error, or ``None`` while the builder is open."""
        return self._status.error if isinstance(self._status, Failed) else None

    @property
    def failed(self) -> bool:
        return isinstance(self._status, Failed)

    @property
    def _state(self) -> StatementState:
        # Only reached through @_chainable, which has already checked the tag.
        return cast(Open, self._status).state

    def _fail(self, error: StatementError) -> None:
        operation = self._state.operation.value
        self._status = Failed(error)
        self._log_failure(operation, error)

    @staticmethod
    def _log_failure(operation: str, error: StatementError) -> None:
        logger.debug("statement_failed", operation=operation, code=error.code, error=str(error))

    def _require(self, method: str, operation: Operation) -> None:
        if self._state.operation is not operation:
            raise WrongOperationError(method, self._state.operation.value, operation.value)

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    @_chainable
    def select(self, *columns: str) -> None:
        """Append columns to the SELECT list."""
        self._require("select", Operation.SELECT)
        dialect = self._state.dialect
        safe = [escape_identifier(dialect, c, role="column") for c in columns]
        self._state.columns.extend(safe)

    @_chainable
    def aggregate(self, function: str, column: str) -> None:
        """Append ``FUNCTION(column)`` to the SELECT list (``COUNT``, ``SUM``, …)."""
        self._require("aggregate", Operation.SELECT)
        if not function or not function.strip():
            raise EmptyIdentifierError("aggregate function name")
        safe_col = escape_identifier(self._state.dialect, column, role="aggregate column")
        self._state.columns.append(f"{function}({safe_col})")

    @_chainable
    def distinct(self) -> None:
        """Render ``SELECT DISTINCT``."""
        self._require("distinct", Operation.SELECT)
        self._state.distinct = True

    # ------------------------------------------------------------------
    # Joins
    # ------------------------------------------------------------------

    def _join(self, kind: str, table: str, on_condition: str) -> None:
        if table.lstrip().startswith("("):
            # Derived table from subquery(); already rendered.
            safe_table = table
        else:
            safe_table = escape_identifier(self._state.dialect, table, role="join table")
        self._state.joins.append(f"{kind} JOIN {safe_table} ON {on_condition}")

    @_chainable
    def left_join(self, table: str, on_condition: str) -> None:
        """Append ``LEFT JOIN table ON on_condition``; the condition is not parameterized."""
        self._join("LEFT", table, on_condition)

    @_chainable
    def inner_join(self, table: str, on_condition: str) -> None:
        """Append ``INNER JOIN table ON on_condition``."""
        self._join("INNER", table, on_condition)

    @_chainable
    def right_join(self, table: str, on_condition: str) -> None:
        """Append ``RIGHT JOIN table ON on_condition``."""
        self._join("RIGHT", table, on_condition)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def _rewrite(
        self,
        clause: str,
        template: str,
        args: tuple[BindValue, ...],
        bound: list[BindValue],
    ) -> str:
        if not template:
            raise EmptyConditionError(clause)
        markers = count_markers(template)
        if markers != len(args):
            logger.warning(
                "placeholder_count_mismatch",
                clause=clause,
                markers=markers,
                arg_count=len(args),
            )
        return rewrite_condition(self._state.dialect, template, len(bound) + 1)

    @_chainable
    def where(self, condition: str, *args: BindValue) -> None:
        """AND a condition onto the WHERE clause.

        Use ``?`` for every bound value regardless of dialect::

            qb.where("age > ? AND status = ?", 18, "active")
        """
        rendered = self._rewrite("WHERE", condition, args, self._state.args)
        self._state.conditions.append(rendered)
        self._state.args.extend(args)

    @_chainable
    def or_where(self, condition: str, *args: BindValue) -> None:
        """OR a condition onto the most recent WHERE condition.

        ``where("a = ?").or_where("b = ?")`` renders ``(a = $1 OR b = $2)``.
        Without a previous condition this behaves like :meth:`where`.
        """
        rendered = self._rewrite("WHERE", condition, args, self._state.args)
        conditions = self._state.conditions
        if conditions:
            conditions[-1] = f"({conditions[-1]} OR {rendered})"
        else:
            conditions.append(rendered)
        self._state.args.extend(args)

    def where_if_present(self, condition: str, value: BindValue) -> QueryBuilder:
        """Call :meth:`where` unless ``value`` is ``None`` or an empty string."""
        if value is None or value == "":
            return self
        return self.where(condition, value)

    @_chainable
    def where_in(self, column: str, values: Iterable[BindValue]) -> None:
        """AND ``column IN (…)`` with one placeholder per value."""
        safe_col = escape_identifier(self._state.dialect, column, role="column")
        items = list(values)
        tokens = allocate_placeholders(
            self._state.dialect, len(self._state.args) + 1, len(items)
        )
        self._state.conditions.append(f"{safe_col} IN ({', '.join(tokens)})")
        self._state.args.extend(items)

    @_chainable
    def where_between(self, column: str, start: BindValue, end: BindValue) -> None:
        """AND ``column BETWEEN start AND end``."""
        safe_col = escape_identifier(self._state.dialect, column, role="column")
        tokens = allocate_placeholders(self._state.dialect, len(self._state.args) + 1, 2)
        if len(tokens) != 2:
            raise InternalPlaceholderError("BETWEEN", expected=2, got=len(tokens))
        low, high = tokens
        self._state.conditions.append(f"{safe_col} BETWEEN {low} AND {high}")
        self._state.args.extend((start, end))

    @_chainable
    def having(self, condition: str, *args: BindValue) -> None:
        """AND a condition onto the HAVING clause (``?`` markers, like :meth:`where`).

        HAVING arguments are kept apart from WHERE arguments, so the call
        order of :meth:`where` and :meth:`having` does not matter.
        """
        rendered = self._rewrite("HAVING", condition, args, self._state.having_args)
        self._state.having.append(rendered)
        self._state.having_args.extend(args)

    # ------------------------------------------------------------------
    # Grouping, ordering, paging
    # ------------------------------------------------------------------

    @_chainable
    def group_by(self, *columns: str) -> None:
        dialect = self._state.dialect
        safe = [escape_identifier(dialect, c, role="column") for c in columns]
        self._state.group_by.extend(safe)

    @_chainable
    def order_by(
        self,
        column: str,
        direction: str = "ASC",
        allowed_columns: Collection[str] | None = None,
    ) -> None:
        """Set the ORDER BY clause, replacing any previous one.

        Args:
            column: Column to sort by.  Often comes straight from a request.
            direction: ``"ASC"`` or ``"DESC"``; anything else sorts ascending.
            allowed_columns: When given, a ``column`` outside this collection
                is replaced by ``"id"`` instead of failing.
        """
        if allowed_columns is not None and column not in allowed_columns:
            logger.debug("order_by_column_replaced", requested=column, used=ORDER_BY_FALLBACK_COLUMN)
            column = ORDER_BY_FALLBACK_COLUMN
        safe_col = escape_identifier(self._state.dialect, column, role="column")
        self._state.order_by = f"{safe_col} {validate_direction(direction)}"

    @_chainable
    def limit(self, limit: int) -> None:
        """Set LIMIT; a non-positive value omits the clause."""
        self._state.limit = limit

    @_chainable
    def offset(self, offset: int) -> None:
        """Set OFFSET; a non-positive value omits the clause."""
        self._state.offset = offset

    # ------------------------------------------------------------------
    # INSERT / UPDATE data
    # ------------------------------------------------------------------

    def _store_data(self, method: str, operation: Operation, data: ColumnData) -> None:
        self._require(method, operation)
        # A repeated column keeps its first position and its last value.
        merged = dict(data.items() if isinstance(data, Mapping) else data)
        pairs = tuple(merged.items())
        if not pairs:
            raise NoDataProvidedError(operation.value)
        self._state.data = pairs

    @_chainable
    def values(self, data: ColumnData) -> None:
        """Set the column-value pairs of an INSERT, in insertion order.

        Pairs naming the same column collapse like dict keys: last value wins.
        """
        self._store_data("values", Operation.INSERT, data)

    @_chainable
    def set(self, data: ColumnData) -> None:
        """Set the column-value assignments of an UPDATE, in insertion order."""
        self._store_data("set", Operation.UPDATE, data)

    @_chainable
    def returning(self, clause: str) -> None:
        """Add ``RETURNING clause`` to an INSERT (rendered on PostgreSQL only)."""
        self._require("returning", Operation.INSERT)
        self._state.returning = clause

    # ------------------------------------------------------------------
    # Subqueries
    # ------------------------------------------------------------------

    def subquery(self, inner: QueryBuilder, alias: str) -> str:
        """Build ``inner`` and return ``"(inner SQL) AS alias"``.

        The inner arguments are appended to this builder's arguments as-is;
        placeholders are not renumbered, so embed the returned string at the
        position matching the current argument count.  If ``inner`` fails,
        this builder fails with the same error and ``""`` is returned.
        """
        if isinstance(self._status, Failed):
            return ""
        try:
            compiled = inner.build()
        except StatementError as exc:
            self._fail(exc)
            return ""
        self._state.args.extend(compiled.args)
        return f"({compiled.sql}) AS {alias}"

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def build(self) -> CompiledQuery:
        """Render the statement.

        Returns:
            :class:`~chainql.compile.base.CompiledQuery` with the SQL text and
            arguments in placeholder order.

        Raises:
            StatementError: The first error captured by any earlier call, or
                raised while assembling (e.g. :class:`NoDataProvidedError`).
        """
        if isinstance(self._status, Failed):
            raise self._status.error
        state = self._status.state
        try:
            sql, args = ASSEMBLERS[state.operation].build(state)
        except StatementError as exc:
            self._fail(exc)
            raise
        logger.debug(
            "statement_built",
            operation=state.operation.value,
            dialect=state.dialect.dialect_name,
            arg_count=len(args),
        )
        return CompiledQuery(sql=sql, args=args, dialect=state.dialect.dialect_name)


def _coerce_operation(operation: Operation | str) -> Operation:
    if isinstance(operation, Operation):
        return operation
    try:
        return Operation(str(operation).upper())
    except ValueError:
        raise UnsupportedOperationError(str(operation)) from None


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def build_select(dialect: str | Dialect, table: str, *columns: str) -> QueryBuilder:
    """Start a SELECT; with no ``columns`` the statement selects ``*``."""
    return QueryBuilder(dialect, table, Operation.SELECT, *columns)


def build_insert(dialect: str | Dialect, table: str) -> QueryBuilder:
    """Start an INSERT; supply data with :meth:`QueryBuilder.values`."""
    return QueryBuilder(dialect, table, Operation.INSERT)


def build_update(dialect: str | Dialect, table: str) -> QueryBuilder:
    """Start an UPDATE; supply data with :meth:`QueryBuilder.set`."""
    return QueryBuilder(dialect, table, Operation.UPDATE)


def build_delete(dialect: str | Dialect, table: str) -> QueryBuilder:
    return QueryBuilder(dialect, table, Operation.DELETE)


def build_count_select(
    dialect: str | Dialect, table: str, count_column: str = "*"
) -> QueryBuilder:
    """Start ``SELECT COUNT(count_column) FROM table``.

    An empty ``count_column`` counts ``*``.
    """
    qb = QueryBuilder(dialect, table, Operation.SELECT)
    if qb.failed:
        return qb
    qb._state.columns.clear()
    return qb.aggregate("COUNT", count_column or "*")
