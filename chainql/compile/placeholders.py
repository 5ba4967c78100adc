"""Placeholder and identifier helpers shared by every builder.

These are pure functions over a :class:`~chainql.compile.base.Dialect`:
they never touch builder state.  Condition templates always use the
anonymous ``?`` marker; the helpers translate it into the target dialect's
bind syntax.
"""
from __future__ import annotations

import itertools
import re

from chainql.compile.base import ANONYMOUS_MARKER, Dialect, IdentifierPolicy
from chainql.errors import EmptyIdentifierError

# Single-quoted SQL string literal, with '' as an escaped quote.
_LITERAL = r"'(?:[^']|'')*'"

_MARKER_RE = re.compile(f"({_LITERAL})|{re.escape(ANONYMOUS_MARKER)}")

_DIRECTIONS = frozenset({"ASC", "DESC"})


# ---------------------------------------------------------------------------
# Placeholders
# ---------------------------------------------------------------------------


def allocate_placeholders(dialect: Dialect, start_index: int, count: int) -> list[str]:
    """Return ``count`` bind tokens starting at the 1-based ``start_index``.

    ``$start .. $start+count-1`` for numbered dialects, ``count`` copies of
    ``?`` otherwise.  A non-positive ``count`` yields an empty list.
    """
    return [dialect.placeholder(start_index + i) for i in range(max(count, 0))]


def count_markers(text: str) -> int:
    """Return the number of anonymous markers in a condition template.

    Markers inside single-quoted string literals are not counted.
    """
    return sum(1 for m in _MARKER_RE.finditer(text) if m.group(1) is None)


def rewrite_condition(dialect: Dialect, text: str, start_index: int) -> str:
    """Replace each ``?`` in ``text``, left to right, with successive tokens.

    Identity for marker dialects.  A ``?`` inside a single-quoted string
    literal is left alone.

    Example::

        rewrite_condition(PostgresDialect(), "a = ? AND b = ?", 3)
        # -> "a = $3 AND b = $4"
    """
    if not dialect.numbered:
        return text
    counter = itertools.count(start_index)

    def _token(m: re.Match[str]) -> str:
        if m.group(1) is not None:
            return m.group(0)
        return dialect.placeholder(next(counter))

    return _MARKER_RE.sub(_token, text)


def shift_placeholders(dialect: Dialect, text: str, offset: int) -> str:
    """Renumber every numbered token in ``text`` by ``offset``.

    Tokens inside single-quoted string literals are left alone.  Identity
    for marker dialects or a zero offset.
    """
    pattern = dialect.token_pattern
    if pattern is None or offset == 0:
        return text
    combined = re.compile(f"({_LITERAL})|{pattern.pattern}")

    def _shift(m: re.Match[str]) -> str:
        if m.group(1) is not None:
            return m.group(0)
        return dialect.placeholder(int(m.group(2)) + offset)

    return combined.sub(_shift, text)


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


def escape_identifier(dialect: Dialect, name: str, role: str = "identifier") -> str:
    """Validate and escape a table or column name for ``dialect``.

    ``"*"`` is always returned unescaped.  Under
    :attr:`IdentifierPolicy.PASS_THROUGH` the name is returned unchanged;
    under :attr:`IdentifierPolicy.QUOTE` every dotted segment is quoted and a
    trailing alias (``"users u"`` or ``"users AS u"``) is quoted separately.

    Args:
        dialect: Target dialect.
        name: Identifier, optionally qualified and/or aliased.
        role: What the identifier names, used in the error message.

    Returns:
        The escaped identifier.

    Raises:
        EmptyIdentifierError: If ``name`` is empty or whitespace only.
    """
    if name == "*":
        return name
    if not name or not name.strip():
        raise EmptyIdentifierError(role)
    if dialect.identifier_policy is IdentifierPolicy.PASS_THROUGH:
        return name
    return _quote_qualified(dialect, name.strip())


def _quote_qualified(dialect: Dialect, name: str) -> str:
    ident, _, alias = name.partition(" ")
    segments = [
        seg if seg == "*" else dialect.quote_identifier(seg) for seg in ident.split(".")
    ]
    quoted = ".".join(segments)

    alias = alias.strip()
    if not alias:
        return quoted
    keyword = ""
    head, _, rest = alias.partition(" ")
    if head.upper() == "AS" and rest.strip():
        keyword = "AS "
        alias = rest.strip()
    return f"{quoted} {keyword}{dialect.quote_identifier(alias)}"


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def validate_direction(direction: str) -> str:
    """Return ``"ASC"`` or ``"DESC"``; anything else falls back to ``"ASC"``."""
    normalized = (direction or "").strip().upper()
    return normalized if normalized in _DIRECTIONS else "ASC"
