"""Statement-level SQL assemblers.

Each class renders exactly one statement kind from an accumulated
:class:`~chainql.schema.statement.StatementState`, returning the final SQL
text and the final argument order.  Dialect-specific behaviour is looked up
on ``state.dialect`` through :mod:`chainql.compile.placeholders`.

Classes
-------
SelectAssembler: ``SELECT … FROM … [JOIN] [WHERE] [GROUP BY] [HAVING] [ORDER BY] [LIMIT] [OFFSET]``
InsertAssembler: ``INSERT INTO … (…) VALUES (…) [RETURNING …]``
UpdateAssembler: ``UPDATE … SET … [WHERE …]``
DeleteAssembler: ``DELETE FROM … [WHERE …]``
"""
from __future__ import annotations

from chainql.compile.placeholders import (
    allocate_placeholders,
    escape_identifier,
    shift_placeholders,
)
from chainql.errors import NoDataProvidedError
from chainql.schema.statement import BindValue, Operation, StatementState

#: ``(escaped column, placeholder token, value)``
DataTriple = tuple[str, str, BindValue]


def _data_triples(state: StatementState, start_index: int = 1) -> list[DataTriple]:
    """Walk ``state.data`` once, keeping columns, tokens and values in lock-step."""
    if not state.data:
        raise NoDataProvidedError(state.operation.value)
    triples: list[DataTriple] = []
    for position, (column, value) in enumerate(state.data):
        safe_col = escape_identifier(state.dialect, column, role="column")
        (token,) = allocate_placeholders(state.dialect, start_index + position, 1)
        triples.append((safe_col, token, value))
    return triples


def _where_sql(conditions: list[str]) -> str:
    return f" WHERE {' AND '.join(conditions)}" if conditions else ""


class SelectAssembler:
    """Builds a ``SELECT`` statement.

    HAVING fragments are numbered relative to their own arguments, so on
    numbered dialects their tokens are shifted past the WHERE arguments.
    LIMIT and OFFSET are bound, not inlined: each positive value gets its own
    placeholder numbered after every argument collected so far.
    Arguments follow text order: WHERE, HAVING, LIMIT, OFFSET.
    """

    def build(self, state: StatementState) -> tuple[str, list[BindValue]]:
        args = list(state.args)
        parts: list[str] = ["SELECT DISTINCT" if state.distinct else "SELECT"]
        parts.append(", ".join(state.columns))
        parts.append(f"FROM {state.table}")

        if state.joins:
            parts.append(" ".join(state.joins))

        if state.conditions:
            parts.append(f"WHERE {' AND '.join(state.conditions)}")

        if state.group_by:
            parts.append(f"GROUP BY {', '.join(state.group_by)}")

        if state.having:
            having = [
                shift_placeholders(state.dialect, cond, len(state.args)) for cond in state.having
            ]
            parts.append(f"HAVING {' AND '.join(having)}")
            args.extend(state.having_args)

        if state.order_by:
            parts.append(f"ORDER BY {state.order_by}")

        for keyword, value in (("LIMIT", state.limit), ("OFFSET", state.offset)):
            if value > 0:
                (token,) = allocate_placeholders(state.dialect, len(args) + 1, 1)
                parts.append(f"{keyword} {token}")
                args.append(value)

        return " ".join(parts), args


class InsertAssembler:
    """Builds an ``INSERT`` statement from the ordered column-value pairs."""

    def build(self, state: StatementState) -> tuple[str, list[BindValue]]:
        triples = _data_triples(state)
        cols = ", ".join(col for col, _, _ in triples)
        tokens = ", ".join(token for _, token, _ in triples)
        sql = f"INSERT INTO {state.table} ({cols}) VALUES ({tokens})"
        if state.returning and state.dialect.supports_returning:
            sql += f" RETURNING {state.returning}"
        return sql, [value for _, _, value in triples]


class UpdateAssembler:
    """Builds an ``UPDATE`` statement.

    SET assignments are numbered from 1.  WHERE fragments were rendered when
    ``where()`` was called, relative to the condition arguments only, so on
    numbered dialects their tokens are shifted past the SET placeholders.
    Arguments follow the same order: SET values, then WHERE values.
    """

    def build(self, state: StatementState) -> tuple[str, list[BindValue]]:
        triples = _data_triples(state)
        assignments = ", ".join(f"{col} = {token}" for col, token, _ in triples)
        args: list[BindValue] = [value for _, _, value in triples]

        conditions = [
            shift_placeholders(state.dialect, cond, len(triples)) for cond in state.conditions
        ]
        sql = f"UPDATE {state.table} SET {assignments}{_where_sql(conditions)}"
        if conditions:
            args.extend(state.args)
        return sql, args


class DeleteAssembler:
    """Builds a ``DELETE`` statement."""

    def build(self, state: StatementState) -> tuple[str, list[BindValue]]:
        sql = f"DELETE FROM {state.table}{_where_sql(state.conditions)}"
        return sql, list(state.args)


#: Assembler per statement kind, consulted by ``QueryBuilder.build()``.
ASSEMBLERS: dict[Operation, SelectAssembler | InsertAssembler | UpdateAssembler | DeleteAssembler] = {
    Operation.SELECT: SelectAssembler(),
    Operation.INSERT: InsertAssembler(),
    Operation.UPDATE: UpdateAssembler(),
    Operation.DELETE: DeleteAssembler(),
}
