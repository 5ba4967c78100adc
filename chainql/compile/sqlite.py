"""SQLite dialect."""
from __future__ import annotations

from chainql.compile.base import ANONYMOUS_MARKER, Dialect


class SQLiteDialect(Dialect):
    """SQLite-flavoured placeholders and quoting.

    Parameter style: ``?`` – compatible with Python's built-in ``sqlite3``
    qmark execution (``cursor.execute(sql, args)``).
    """

    @property
    def dialect_name(self) -> str:
        return "sqlite"

    @property
    def quote_char(self) -> str:
        return '"'

    @property
    def sqlalchemy_driver(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:
        return ANONYMOUS_MARKER
