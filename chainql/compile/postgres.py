"""PostgreSQL dialect."""

from __future__ import annotations

import re

from chainql.compile.base import Dialect


class PostgresDialect(Dialect):
    """PostgreSQL-flavoured placeholders and quoting.

    Parameter style: ``$1, $2, …`` – the positional-numbered form understood
    by ``asyncpg`` and by PostgreSQL server-side prepared statements.
    ``INSERT ... RETURNING`` is supported.
    """

    token_pattern = re.compile(r"\$(\d+)")

    @property
    def dialect_name(self) -> str:
        return "postgres"

    @property
    def quote_char(self) -> str:
        return '"'

    @property
    def sqlalchemy_driver(self) -> str:
        return "postgresql"

    @property
    def supports_returning(self) -> bool:
        return True

    def placeholder(self, index: int) -> str:
        return f"${index}"
