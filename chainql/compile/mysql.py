"""MySQL and MariaDB dialects."""

from __future__ import annotations

from chainql.compile.base import ANONYMOUS_MARKER, Dialect


class MySQLDialect(Dialect):
    """MySQL-flavoured placeholders and quoting.

    Parameter style: ``?`` – the anonymous positional marker consumed in
    order by the execution layer.

    Identifiers are quoted with backticks (`` ` ``) rather than double-quotes.
    ``RETURNING`` is not rendered.
    """

    @property
    def dialect_name(self) -> str:
        return "mysql"

    @property
    def quote_char(self) -> str:
        return "`"

    @property
    def sqlalchemy_driver(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:
        return ANONYMOUS_MARKER


class MariaDBDialect(MySQLDialect):
    """MariaDB shares MySQL's placeholder and quoting rules."""

    @property
    def dialect_name(self) -> str:
        return "mariadb"

    @property
    def sqlalchemy_driver(self) -> str:
        return "mariadb"
