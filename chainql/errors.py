"""Custom exception hierarchy for chainql.

All public errors inherit from ChainQLError so callers can catch the base
class for any chainql-specific failure.  Every statement-building failure is a
:class:`StatementError` carrying a machine-readable ``code``.
"""
from __future__ import annotations

from typing import Any


class ChainQLError(Exception):
    """Base exception for all chainql errors."""


class StatementError(ChainQLError):
    """Raised when a statement cannot be built.

    Args:
        message: Human-readable description.
        code: Machine-readable error code (e.g. EMPTY_IDENTIFIER).
        details: Extra context describing the failing call.
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for API layers."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details,
        }


class InvalidDialectError(StatementError):
    """Raised when a dialect tag is not registered."""

    def __init__(self, dialect: str, registered: list[str]) -> None:
        super().__init__(
            f"Invalid dialect: '{dialect}'. Registered dialects: {registered}.",
            code="INVALID_DIALECT",
            details={"dialect": dialect, "registered": registered},
        )


class EmptyIdentifierError(StatementError):
    """Raised when a table, column, or function name is empty."""

    def __init__(self, role: str = "identifier") -> None:
        super().__init__(
            f"Empty {role} not allowed.",
            code="EMPTY_IDENTIFIER",
            details={"role": role},
        )


class EmptyConditionError(StatementError):
    """Raised when a WHERE / HAVING template is empty."""

    def __init__(self, clause: str) -> None:
        super().__init__(
            f"{clause} condition cannot be empty.",
            code="EMPTY_CONDITION",
            details={"clause": clause},
        )


class WrongOperationError(StatementError):
    """Raised when a mutator is called on a builder of the wrong statement kind."""

    def __init__(self, method: str, operation: str, required: str) -> None:
        super().__init__(
            f"{method}() can only be used with {required} statements, not {operation}.",
            code="WRONG_OPERATION",
            details={"method": method, "operation": operation, "required": required},
        )


class NoDataProvidedError(StatementError):
    """Raised when INSERT / UPDATE has no column-value pairs."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"No data provided for {operation}; at least one column-value pair is required.",
            code="NO_DATA_PROVIDED",
            details={"operation": operation},
        )


class InternalPlaceholderError(StatementError):
    """Raised when placeholder allocation yields an unexpected token count."""

    def __init__(self, clause: str, expected: int, got: int) -> None:
        super().__init__(
            f"Failed to generate placeholders for {clause}: expected {expected}, got {got}.",
            code="INTERNAL_PLACEHOLDER",
            details={"clause": clause, "expected": expected, "got": got},
        )


class UnsupportedOperationError(StatementError):
    """Raised when a builder is created for an unknown statement kind."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Unsupported operation: '{operation}'.",
            code="UNSUPPORTED_OPERATION",
            details={"operation": operation},
        )
