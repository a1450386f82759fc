"""Core primitives shared by every orginventory component."""

from .errors import (
    ConfigurationError,
    ConnectionResolutionError,
    CriticalSectionError,
    InventoryError,
    OperationFailedError,
    QueryError,
)
from .log_events import LogEvents
from .logger import LogConfig, LogFormat, UnifiedLogger, configure_logging
from .retry import RetryPolicy

__all__ = [
    "ConfigurationError",
    "ConnectionResolutionError",
    "CriticalSectionError",
    "InventoryError",
    "LogConfig",
    "LogEvents",
    "LogFormat",
    "OperationFailedError",
    "QueryError",
    "RetryPolicy",
    "UnifiedLogger",
    "configure_logging",
]
