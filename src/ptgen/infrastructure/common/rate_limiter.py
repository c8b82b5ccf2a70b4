"""Per-client sliding-window rate limiter for inbound requests."""

from __future__ import annotations

import time
from typing import Callable

import structlog

log = structlog.get_logger(__name__)


class ClientRateLimiter:
    """Sliding-window request counter keyed by client identity.

    Each identity owns a list of accepted-request timestamps. A request is
    limited when the identity already has *max_requests* timestamps newer
    than ``now - window_seconds``; limited requests are not recorded.

    A sweep over all identities runs at most once per *sweep_interval*
    seconds and drops identities whose windows are empty, which bounds the
    size of the map. The sweep does not affect the outcome of a check.

    The state is plain dicts without a lock: it is only safe when all
    callers share one event loop.

    Args:
        max_requests: Accepted requests per window. 0 = unlimited.
        window_seconds: Window length.
        sweep_interval: Minimum seconds between global sweeps.
        clock: Time source in seconds (monotonic by default).
    """

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: float = 60.0,
        *,
        sweep_interval: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._windows: dict[str, list[float]] = {}
        self._last_sweep = clock()

    @property
    def tracked_identities(self) -> int:
        return len(self._windows)

    def check_and_record(self, identity: str, now: float | None = None) -> bool:
        """Return True if *identity* is limited; otherwise record the request."""
        if self.max_requests <= 0:
            return False

        if now is None:
            now = self._clock()
        window_start = now - self.window_seconds

        if now - self._last_sweep > self.sweep_interval:
            self._sweep(window_start)
            self._last_sweep = now

        recent = [ts for ts in self._windows.get(identity, ()) if ts > window_start]
        if len(recent) >= self.max_requests:
            self._windows[identity] = recent
            return True

        recent.append(now)
        self._windows[identity] = recent
        return False

    def _sweep(self, window_start: float) -> None:
        before = len(self._windows)
        for identity in list(self._windows):
            kept = [ts for ts in self._windows[identity] if ts > window_start]
            if kept:
                self._windows[identity] = kept
            else:
                del self._windows[identity]
        dropped = before - len(self._windows)
        if dropped:
            log.debug("rate_limit_sweep", dropped=dropped, tracked=len(self._windows))
