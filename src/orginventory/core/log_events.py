"""Registry of structured logging event identifiers."""

from __future__ import annotations

from enum import Enum, auto

__all__ = ["LogEvents"]


class LogEvents(str, Enum):
    """Strongly typed registry of UnifiedLogger events.

    Members declared with :func:`auto` receive a dotted identifier derived
    from their name: ``RETRY_ATTEMPT_FAILED`` becomes ``retry.attempt.failed``.
    """

    @staticmethod
    def _generate_next_value_(name: str, start: int, count: int, _last_values: list[str]) -> str:
        parts = name.lower().split("_")
        namespace = parts[0] if parts else "event"
        suffix = parts[-1] if len(parts) > 1 else "event"
        action_parts = parts[1:-1] if len(parts) > 2 else ["event"]
        return ".".join((namespace, ".".join(action_parts), suffix))

    CLI_RUN_START = auto()
    CLI_RUN_FINISH = auto()
    CLI_RUN_ERROR = auto()
    CLI_OUTPUT_WRITTEN = auto()
    CONFIG_LOAD_FINISH = auto()
    CONFIG_LOAD_ERROR = auto()
    CONNECTION_RESOLVE_START = auto()
    CONNECTION_RESOLVE_ERROR = auto()
    RETRY_ATTEMPT_FAILED = auto()
    RETRY_ATTEMPTS_EXHAUSTED = auto()
    PROBE_PACKAGES_SKIPPED = auto()
    PROBE_PACKAGE_MATCHED = auto()
    PROBE_OBJECT_PRESENT = auto()
    PROBE_OBJECT_ABSENT = auto()
    PROBE_OBJECT_FAILED = auto()
    PROBE_DETECTION_FINISH = auto()
    INVENTORY_SECTION_FAILED = auto()
    INVENTORY_BUILD_START = auto()
    INVENTORY_BUILD_FINISH = auto()
    HTTP_RATE_LIMITER_WAIT = auto()
    HTTP_QUERY_PAGE = auto()
    HTTP_QUERY_FAILED = auto()
