"""Client-side rate limiting."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable

__all__ = ["TokenBucketLimiter"]


class TokenBucketLimiter:
    """Sliding window limiter allowing ``max_calls`` per ``period`` seconds."""

    def __init__(
        self,
        max_calls: int,
        period: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_calls <= 0:
            msg = "max_calls must be > 0"
            raise ValueError(msg)
        if period <= 0:
            msg = "period must be > 0"
            raise ValueError(msg)
        self.max_calls = max_calls
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Block until a call is allowed and return the seconds waited."""

        waited = 0.0
        while True:
            with self._lock:
                now = self._clock()
                while self._timestamps and now - self._timestamps[0] >= self.period:
                    self._timestamps.popleft()
                if len(self._timestamps) < self.max_calls:
                    self._timestamps.append(now)
                    return waited
                sleep_for = self.period - (now - self._timestamps[0])
            self._sleep(sleep_for)
            waited += sleep_for
