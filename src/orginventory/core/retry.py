"""Bounded retry execution for remote operations."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from structlog.stdlib import BoundLogger

from .errors import OperationFailedError
from .log_events import LogEvents
from .logger import UnifiedLogger

if TYPE_CHECKING:
    from orginventory.config.models import RetrySettings

__all__ = ["RetryPolicy"]

T = TypeVar("T")


class RetryPolicy:
    """Execute an operation up to ``max_attempts`` times with linear backoff.

    After a failed attempt ``k`` (``k < max_attempts``) the policy waits
    ``base_delay * k`` seconds before the next attempt.  The final failure is
    not followed by a wait; it is raised as :class:`OperationFailedError`
    carrying the operation name and the last observed exception.
    """

    def __init__(
        self,
        max_attempts: int,
        base_delay: float,
        *,
        sleep: Callable[[float], None] = time.sleep,
        logger: BoundLogger | None = None,
    ) -> None:
        if max_attempts < 1:
            msg = "max_attempts must be >= 1"
            raise ValueError(msg)
        if base_delay < 0:
            msg = "base_delay must be >= 0"
            raise ValueError(msg)
        self.max_attempts = int(max_attempts)
        self.base_delay = float(base_delay)
        self._sleep = sleep
        self._log = logger or UnifiedLogger.get(__name__).bind(component="core.retry")

    @classmethod
    def from_settings(
        cls,
        settings: RetrySettings,
        *,
        sleep: Callable[[float], None] = time.sleep,
        logger: BoundLogger | None = None,
    ) -> RetryPolicy:
        """Build a policy from the ``performance`` configuration section."""

        return cls(settings.attempts, settings.delay_ms / 1000.0, sleep=sleep, logger=logger)

    def delay_for(self, attempt: int) -> float:
        """Return the wait inserted after failed ``attempt`` (1-based)."""

        return self.base_delay * attempt

    def backoff_schedule(self) -> tuple[float, ...]:
        """Return every wait an always-failing operation would incur."""

        return tuple(self.delay_for(attempt) for attempt in range(1, self.max_attempts))

    def with_retry(self, operation: Callable[[], T], operation_name: str) -> T:
        """Run ``operation`` until it succeeds or the attempt budget is spent."""

        attempt = 1
        while True:
            try:
                return operation()
            except Exception as exc:  # noqa: BLE001 - every failure counts as an attempt
                self._log.warning(
                    LogEvents.RETRY_ATTEMPT_FAILED,
                    operation=operation_name,
                    attempt=attempt,
                    total_attempts=self.max_attempts,
                    error=str(exc),
                    error_type=exc.__class__.__name__,
                )
                if attempt >= self.max_attempts:
                    self._log.error(
                        LogEvents.RETRY_ATTEMPTS_EXHAUSTED,
                        operation=operation_name,
                        total_attempts=self.max_attempts,
                        error=str(exc),
                        error_type=exc.__class__.__name__,
                    )
                    raise OperationFailedError(operation_name, self.max_attempts, exc) from exc
                self._sleep(self.delay_for(attempt))
            attempt += 1
