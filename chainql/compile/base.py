"""Dialect abstractions: CompiledQuery and the Dialect ABC.

The Strategy pattern is used:
- ``Dialect`` declares the dialect-specific steps (placeholder token form,
  identifier quote character, RETURNING support).
- ``PostgresDialect``, ``MySQLDialect``, ``MariaDBDialect`` and
  ``SQLiteDialect`` provide them.  The placeholder and escaping algorithms
  themselves live in :mod:`chainql.compile.placeholders` and only consult the
  dialect for these steps.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from chainql.schema.statement import BindValue

#: The dialect-neutral placeholder marker used in every condition template.
ANONYMOUS_MARKER = "?"


@dataclass
class CompiledQuery:
    """The output of a successful ``build()``.

    Attributes:
        sql: The rendered SQL string with dialect-specific placeholders.
        args: Bound values in placeholder order.
        dialect: The canonical dialect name the SQL was rendered for.
    """

    sql: str
    args: list[BindValue]
    dialect: str

    def as_tuple(self) -> tuple[str, list[BindValue]]:
        """Return ``(sql, args)`` ready for ``cursor.execute(*compiled.as_tuple())``."""
        return self.sql, list(self.args)


class IdentifierPolicy(str, Enum):
    """How :func:`~chainql.compile.placeholders.escape_identifier` treats names.

    ``PASS_THROUGH`` returns validated identifiers unchanged, so callers may
    pass expressions such as ``"users u"`` or ``"COUNT(p.id)"``.  ``QUOTE``
    quotes every dotted segment with the dialect's quote character.
    """

    PASS_THROUGH = "pass_through"
    QUOTE = "quote"


class Dialect(ABC):
    """Abstract base for SQL dialect profiles.

    Args:
        identifier_policy: Escaping policy applied to every table and column
            name handled by builders bound to this dialect.
    """

    #: Matches a rendered numbered placeholder; ``None`` for marker dialects.
    token_pattern: ClassVar[re.Pattern[str] | None] = None

    def __init__(
        self, identifier_policy: IdentifierPolicy = IdentifierPolicy.PASS_THROUGH
    ) -> None:
        self.identifier_policy = IdentifierPolicy(identifier_policy)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier_policy={self.identifier_policy.value!r})"

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name (e.g. ``'postgres'``)."""

    @property
    @abstractmethod
    def quote_char(self) -> str:
        """Return the identifier quote character."""

    @property
    @abstractmethod
    def sqlalchemy_driver(self) -> str:
        """Return the SQLAlchemy drivername used when rendering connection URLs."""

    @property
    def numbered(self) -> bool:
        """Whether placeholders carry a positional number (``$1``) rather than ``?``."""
        return self.token_pattern is not None

    @property
    def supports_returning(self) -> bool:
        """Whether ``INSERT ... RETURNING`` is rendered for this dialect."""
        return False

    @abstractmethod
    def placeholder(self, index: int) -> str:
        """Return the bind token for the 1-based argument ``index``.

        Marker dialects ignore ``index``.
        """

    def quote_identifier(self, name: str) -> str:
        """Return a single identifier segment quoted for this dialect.

        Args:
            name: Unquoted identifier segment (no dots).

        Returns:
            Quoted identifier with embedded quote characters doubled.
        """
        q = self.quote_char
        escaped = name.replace(q, q + q)
        return f"{q}{escaped}{q}"
