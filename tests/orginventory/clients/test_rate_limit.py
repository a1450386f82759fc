"""Tests for TokenBucketLimiter."""

from __future__ import annotations

import pytest

from orginventory.clients.rate_limit import TokenBucketLimiter


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.mark.unit
class TestTokenBucketLimiter:
    def test_init_invalid_max_calls(self) -> None:
        with pytest.raises(ValueError, match="max_calls must be > 0"):
            TokenBucketLimiter(max_calls=0, period=1.0)

    def test_init_invalid_period(self) -> None:
        with pytest.raises(ValueError, match="period must be > 0"):
            TokenBucketLimiter(max_calls=10, period=0.0)

    def test_acquire_within_budget_does_not_wait(self) -> None:
        clock = _FakeClock()
        limiter = TokenBucketLimiter(3, 10.0, clock=clock, sleep=clock.sleep)

        assert [limiter.acquire() for _ in range(3)] == [0.0, 0.0, 0.0]
        assert clock.sleeps == []

    def test_acquire_waits_for_oldest_call_to_leave_window(self) -> None:
        clock = _FakeClock()
        limiter = TokenBucketLimiter(2, 10.0, clock=clock, sleep=clock.sleep)
        limiter.acquire()
        clock.now = 4.0
        limiter.acquire()

        waited = limiter.acquire()

        assert waited == pytest.approx(6.0)
        assert clock.now == pytest.approx(10.0)

    def test_window_slides(self) -> None:
        clock = _FakeClock()
        limiter = TokenBucketLimiter(1, 5.0, clock=clock, sleep=clock.sleep)
        limiter.acquire()
        clock.now = 5.0

        assert limiter.acquire() == 0.0
