"""Error taxonomy.

Separate types let callers react correctly:
ConfigurationError is fatal before any remote call is made.
QueryError is a single failed remote call and is retried by RetryPolicy.
OperationFailedError means a retried operation exhausted its attempt budget.
CriticalSectionError aborts an inventory run because a load-bearing section failed.
"""

from __future__ import annotations

__all__ = [
    "InventoryError",
    "ConfigurationError",
    "ConnectionResolutionError",
    "QueryError",
    "OperationFailedError",
    "CriticalSectionError",
]


class InventoryError(Exception):
    """Base class for all orginventory exceptions."""


class ConfigurationError(InventoryError):
    """Raised when the configuration cannot be loaded or validated."""


class ConnectionResolutionError(InventoryError):
    """Raised when no usable connection to the target org can be established."""


class QueryError(InventoryError):
    """Raised when a single SOQL query fails at transport or platform level."""

    def __init__(self, message: str, *, soql: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.soql = soql
        self.status_code = status_code


class OperationFailedError(InventoryError):
    """Raised when an operation failed on every attempt of its retry budget.

    The exception of the final attempt is available as ``cause`` and is also
    chained as ``__cause__``.
    """

    def __init__(self, operation_name: str, attempts: int, cause: BaseException) -> None:
        super().__init__(f"{operation_name} failed after {attempts} attempt(s): {cause}")
        self.operation_name = operation_name
        self.attempts = attempts
        self.cause = cause


class CriticalSectionError(InventoryError):
    """Raised when a section the report cannot exist without fails."""

    def __init__(self, section: str, cause: BaseException) -> None:
        super().__init__(f"Critical section '{section}' failed: {cause}")
        self.section = section
        self.cause = cause
