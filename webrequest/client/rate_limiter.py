"""Sliding-window rate limiter shared by all outbound requests."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable

from ..common.config import settings

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class RateLimiter:
    """Thread-safe sliding-window rate limiter.

    Admits at most ``rate`` operations in any trailing window of
    ``period_ms`` milliseconds. A rate of 0 denies every check.

    Args:
        rate: Maximum admissions per period.
        period_ms: Window length in milliseconds.
        clock: Time source returning milliseconds. Defaults to a monotonic clock.
    """

    def __init__(
        self,
        rate: int,
        period_ms: int,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if rate < 0:
            raise ValueError("rate must be >= 0")
        if period_ms <= 0:
            raise ValueError("period_ms must be > 0")
        self.rate = rate
        self.period_ms = period_ms
        self._clock = clock or _monotonic_ms
        self._admitted: deque[float] = deque()
        self._lock = threading.Lock()

    def admit(self) -> bool:
        """Record and grant one admission if the window has room."""
        with self._lock:
            now = self._clock()
            cutoff = now - self.period_ms
            while self._admitted and self._admitted[0] <= cutoff:
                self._admitted.popleft()
            if len(self._admitted) < self.rate:
                self._admitted.append(now)
                return True
            return False

    @property
    def in_window(self) -> int:
        """Admissions recorded in the current window."""
        with self._lock:
            cutoff = self._clock() - self.period_ms
            return sum(1 for ts in self._admitted if ts > cutoff)

    def __repr__(self) -> str:
        return f"RateLimiter(rate={self.rate}, period_ms={self.period_ms})"


class RateLimiterHandle:
    """Owned reference to the active limiter.

    Swapping the limiter publishes a fully built instance under the handle
    lock. Callers already holding the old instance finish against it.
    """

    def __init__(self, limiter: RateLimiter) -> None:
        self._limiter = limiter
        self._lock = threading.Lock()

    @property
    def limiter(self) -> RateLimiter:
        with self._lock:
            return self._limiter

    def admit(self) -> bool:
        return self.limiter.admit()

    @property
    def in_window(self) -> int:
        return self.limiter.in_window

    def replace(self, limiter: RateLimiter) -> RateLimiter:
        """Swap in ``limiter`` and return the previous instance."""
        with self._lock:
            previous, self._limiter = self._limiter, limiter
        logger.info("Rate limiter replaced: %r -> %r", previous, limiter)
        return previous

    def set_rate(self, rate: int, period_ms: int) -> RateLimiter:
        return self.replace(RateLimiter(rate, period_ms))


def wait_for_admission(
    handle: RateLimiterHandle | RateLimiter,
    poll_interval_ms: int = 100,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Block until ``handle`` grants an admission, re-checking after a fixed sleep."""
    if handle.admit():
        return
    logger.debug("Rate limit reached (%s admitted in window), waiting", handle.in_window)
    sleep(poll_interval_ms / 1000.0)
    while not handle.admit():
        sleep(poll_interval_ms / 1000.0)


_default_handle = RateLimiterHandle(
    RateLimiter(settings.rate_limit.rate, settings.rate_limit.period_ms)
)


def get_rate_limiter() -> RateLimiterHandle:
    """Return the process-wide limiter handle."""
    return _default_handle


def set_rate(rate: int, period_ms: int) -> None:
    """Replace the process-wide limiter with a new ``(rate, period_ms)``."""
    _default_handle.set_rate(rate, period_ms)
