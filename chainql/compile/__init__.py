"""chainql compilation layer: fluent calls → parameterized SQL."""
from chainql.compile.base import CompiledQuery, Dialect, IdentifierPolicy
from chainql.compile.builder import QueryBuilder
from chainql.compile.mysql import MariaDBDialect, MySQLDialect
from chainql.compile.postgres import PostgresDialect
from chainql.compile.sqlite import SQLiteDialect

__all__ = [
    "CompiledQuery",
    "Dialect",
    "IdentifierPolicy",
    "QueryBuilder",
    "MariaDBDialect",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
]
