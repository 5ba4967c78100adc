"""Statement state held by a builder between calls.

``StatementState`` is the mutable accumulator a single
:class:`~chainql.compile.builder.QueryBuilder` owns.  The builder wraps it in
an explicit two-state tagged value: :class:`Open` while mutation is allowed,
:class:`Failed` once the first error has been captured.  ``Failed`` is
terminal; every mutator checks the tag first.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from chainql.compile.base import Dialect
    from chainql.errors import StatementError

#: Values the execution layer accepts as bound arguments.
BindValue = Union[str, int, float, bool, bytes, datetime, date, Decimal, None]


class Operation(str, Enum):
    """Statement kind, fixed when a builder is created."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class StatementState:
    """Accumulated fragments and arguments for one statement.

    Attributes:
        operation: Statement kind.
        dialect: Placeholder and escaping rules.
        table: Escaped target table.
        columns: Rendered SELECT column expressions.
        joins: Fully rendered ``<KIND> JOIN ... ON ...`` fragments.
        conditions: WHERE fragments, placeholders already resolved.
        having: HAVING fragments, placeholders already resolved.
        group_by: Escaped GROUP BY columns.
        order_by: Rendered ``column DIRECTION`` or ``None``.
        limit: Row limit; ``<= 0`` means unset.
        offset: Row offset; ``<= 0`` means unset.
        args: Bound values aligned with the placeholders in ``conditions``.
        having_args: Bound values for ``having``.  HAVING fragments are
            numbered from 1 and shifted past ``args`` when assembled.
        data: Ordered ``(column, value)`` pairs for INSERT / UPDATE.
        returning: Raw RETURNING clause (INSERT only).
        distinct: Render ``SELECT DISTINCT``.
    """

    operation: Operation
    dialect: Dialect
    table: str
    columns: list[str] = field(default_factory=list)
    joins: list[str] = field(default_factory=list)
    conditions: list[str] = field(default_factory=list)
    having: list[str] = field(default_factory=list)
    group_by: list[str] = field(default_factory=list)
    order_by: str | None = None
    limit: int = 0
    offset: int = 0
    args: list[BindValue] = field(default_factory=list)
    having_args: list[BindValue] = field(default_factory=list)
    data: tuple[tuple[str, BindValue], ...] = ()
    returning: str | None = None
    distinct: bool = False


@dataclass(frozen=True)
class Open:
    """Builder accepts mutations."""

    state: StatementState


@dataclass(frozen=True)
class Failed:
    """Builder captured ``error``; all further mutations are no-ops."""

    error: StatementError


StatementStatus = Union[Open, Failed]
