"""Dialect registry (Open/Closed Principle).

``DialectFactory``
    Central registry for :class:`~chainql.compile.base.Dialect`
    implementations.  Register a new dialect once; the builder factories look
    it up automatically by tag.

Usage::

    from chainql.compile.registry import DialectFactory

    @DialectFactory.register("cockroach")
    class CockroachDialect(PostgresDialect):
        ...
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from chainql.compile.base import Dialect, IdentifierPolicy
from chainql.errors import InvalidDialectError


class DialectFactory:
    """Registry mapping dialect tags to :class:`Dialect` classes.

    Example::

        @DialectFactory.register("cockroach")
        class CockroachDialect(PostgresDialect):
            ...

        dialect = DialectFactory.create("cockroach")
    """

    _dialects: ClassVar[dict[str, type[Dialect]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[Dialect]], type[Dialect]]:
        """Decorator that registers a dialect class under ``name``.

        Args:
            name: The dialect tag (e.g. ``"postgres"``).

        Returns:
            A decorator that registers and returns the dialect class.
        """

        def decorator(dialect_cls: type[Dialect]) -> type[Dialect]:
            cls._dialects[name] = dialect_cls
            return dialect_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, dialect_cls: type[Dialect]) -> None:
        """Register a dialect class without using the decorator form."""
        cls._dialects[name] = dialect_cls

    @classmethod
    def create(
        cls,
        name: str,
        identifier_policy: IdentifierPolicy = IdentifierPolicy.PASS_THROUGH,
    ) -> Dialect:
        """Instantiate the dialect registered for ``name``.

        Args:
            name: The dialect tag.
            identifier_policy: Escaping policy for the new instance.

        Returns:
            A fresh :class:`Dialect` instance.

        Raises:
            InvalidDialectError: If no dialect is registered for ``name``.
        """
        dialect_cls = cls._dialects.get(name)
        if dialect_cls is None:
            raise InvalidDialectError(name, cls.registered_dialects())
        return dialect_cls(identifier_policy)

    @classmethod
    def registered_dialects(cls) -> list[str]:
        """Return the sorted list of registered dialect tags."""
        return sorted(cls._dialects)


def resolve_dialect(dialect: str | Dialect) -> Dialect:
    """Return ``dialect`` itself, or the registered dialect for a tag.

    Raises:
        InvalidDialectError: If ``dialect`` is an unknown tag.
    """
    if isinstance(dialect, Dialect):
        return dialect
    return DialectFactory.create(str(dialect))
