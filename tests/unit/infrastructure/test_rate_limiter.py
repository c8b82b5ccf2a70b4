"""Tests for ClientRateLimiter."""

from __future__ import annotations

import pytest

from ptgen.infrastructure.common import ClientRateLimiter


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def limiter(clock: FakeClock) -> ClientRateLimiter:
    return ClientRateLimiter(max_requests=30, window_seconds=60.0, clock=clock)


class TestSlidingWindow:
    def test_thirty_requests_accepted(self, limiter: ClientRateLimiter) -> None:
        results = [limiter.check_and_record("1.2.3.4") for _ in range(30)]
        assert not any(results)

    def test_thirty_first_is_limited(self, limiter: ClientRateLimiter) -> None:
        for _ in range(30):
            limiter.check_and_record("1.2.3.4")
        assert limiter.check_and_record("1.2.3.4") is True

    def test_limited_requests_are_not_recorded(self, limiter, clock) -> None:
        for _ in range(30):
            limiter.check_and_record("1.2.3.4")
        for _ in range(5):
            limiter.check_and_record("1.2.3.4")

        clock.now += 61
        results = [limiter.check_and_record("1.2.3.4") for _ in range(30)]
        assert not any(results)

    def test_accepted_again_after_window(self, limiter, clock) -> None:
        for _ in range(30):
            limiter.check_and_record("1.2.3.4")

        clock.now += 60.5

        assert limiter.check_and_record("1.2.3.4") is False

    def test_window_slides_per_timestamp(self, limiter, clock) -> None:
        for _ in range(15):
            limiter.check_and_record("ip")
        clock.now += 30
        for _ in range(15):
            limiter.check_and_record("ip")

        clock.now += 31  # first 15 expired, second 15 still live
        results = [limiter.check_and_record("ip") for _ in range(15)]
        assert not any(results)
        assert limiter.check_and_record("ip") is True

    def test_identities_independent(self, limiter) -> None:
        for _ in range(30):
            limiter.check_and_record("a")
        assert limiter.check_and_record("a") is True
        assert limiter.check_and_record("b") is False

    def test_zero_disables(self, clock) -> None:
        limiter = ClientRateLimiter(max_requests=0, clock=clock)
        assert not any(limiter.check_and_record("x") for _ in range(100))


class TestSweep:
    def test_idle_identities_dropped(self, clock) -> None:
        limiter = ClientRateLimiter(max_requests=5, window_seconds=60.0, sweep_interval=10.0, clock=clock)
        for ip in ("a", "b", "c"):
            limiter.check_and_record(ip)
        assert limiter.tracked_identities == 3

        clock.now += 120
        limiter.check_and_record("d")

        assert limiter.tracked_identities == 1

    def test_sweep_does_not_change_outcome(self, clock) -> None:
        limiter = ClientRateLimiter(max_requests=2, window_seconds=60.0, sweep_interval=1.0, clock=clock)
        limiter.check_and_record("a")
        clock.now += 5
        limiter.check_and_record("a")
        clock.now += 5
        assert limiter.check_and_record("a") is True
