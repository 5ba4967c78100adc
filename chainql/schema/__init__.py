"""chainql statement state models."""
from chainql.schema.statement import (
    BindValue,
    Failed,
    Open,
    Operation,
    StatementState,
    StatementStatus,
)

__all__ = [
    "BindValue",
    "Failed",
    "Open",
    "Operation",
    "StatementState",
    "StatementStatus",
]
