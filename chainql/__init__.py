"""chainql – Fluent, dialect-aware SQL statement builder.

Chain calls. Get SQL and arguments. Execute anywhere.

Public API
----------
``build_select`` / ``build_insert`` / ``build_update`` / ``build_delete`` /
``build_count_select``
    Start a :class:`QueryBuilder` for one dialect and statement kind.

``QueryBuilder.build``
    Render the accumulated statement to a :class:`CompiledQuery`, or raise the
    first error captured along the chain.

Example::

    import chainql

    compiled = (
        chainql.build_select("postgres", "users", "id", "name")
        .where("age > ?", 18)
        .order_by("name")
        .limit(10)
        .build()
    )
    compiled.sql   # 'SELECT id, name FROM users WHERE age > $1 ORDER BY name ASC LIMIT $2'
    compiled.args  # [18, 10]

Extensibility
-------------
New dialects can be registered via::

    from chainql.compile.registry import DialectFactory

    @DialectFactory.register("cockroach")
    class CockroachDialect(PostgresDialect):
        ...

After registration every factory accepts ``"cockroach"`` as a dialect tag.
"""

from __future__ import annotations

from chainql.compile.base import CompiledQuery, Dialect, IdentifierPolicy
from chainql.compile.builder import (
    QueryBuilder,
    build_count_select,
    build_delete,
    build_insert,
    build_select,
    build_update,
)
from chainql.compile.mysql import MariaDBDialect, MySQLDialect
from chainql.compile.placeholders import (
    allocate_placeholders,
    escape_identifier,
    rewrite_condition,
    validate_direction,
)
from chainql.compile.postgres import PostgresDialect
from chainql.compile.registry import DialectFactory, resolve_dialect
from chainql.compile.sqlite import SQLiteDialect
from chainql.config import DatabaseConfig, with_defaults
from chainql.errors import (
    ChainQLError,
    EmptyConditionError,
    EmptyIdentifierError,
    InternalPlaceholderError,
    InvalidDialectError,
    NoDataProvidedError,
    StatementError,
    UnsupportedOperationError,
    WrongOperationError,
)
from chainql.schema.statement import BindValue, Operation

# ---------------------------------------------------------------------------
# Register built-in dialects with DialectFactory
# ---------------------------------------------------------------------------

DialectFactory.register_class("postgres", PostgresDialect)
DialectFactory.register_class("mysql", MySQLDialect)
DialectFactory.register_class("mariadb", MariaDBDialect)
DialectFactory.register_class("sqlite", SQLiteDialect)
DialectFactory.register_class("sqlite3", SQLiteDialect)

__all__ = [
    # Factories
    "build_select",
    "build_insert",
    "build_update",
    "build_delete",
    "build_count_select",
    "QueryBuilder",
    "CompiledQuery",
    "Operation",
    "BindValue",
    # Dialects
    "Dialect",
    "DialectFactory",
    "IdentifierPolicy",
    "PostgresDialect",
    "MySQLDialect",
    "MariaDBDialect",
    "SQLiteDialect",
    "resolve_dialect",
    # Placeholder helpers
    "allocate_placeholders",
    "rewrite_condition",
    "escape_identifier",
    "validate_direction",
    # Configuration
    "DatabaseConfig",
    "with_defaults",
    # Errors
    "ChainQLError",
    "StatementError",
    "InvalidDialectError",
    "EmptyIdentifierError",
    "EmptyConditionError",
    "WrongOperationError",
    "NoDataProvidedError",
    "InternalPlaceholderError",
    "UnsupportedOperationError",
]
