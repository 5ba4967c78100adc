"""Test fixtures: dialect lists and sample DDL."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

_FIXTURES_DIR = Path(__file__).parent

ALL_DIALECTS = ["postgres", "mysql", "mariadb", "sqlite"]
MARKER_DIALECTS = ["mysql", "mariadb", "sqlite"]


def load_ddl(target: Literal["sqlite"] = "sqlite") -> str:
    """Return the sample DDL SQL string for the given backend.

    Args:
        target: ``'sqlite'`` (the only backend exercised in-process).

    Returns:
        DDL string ready to execute against the target backend.
    """
    filename = f"ddl_{target}.sql"
    return (_FIXTURES_DIR / filename).read_text()
