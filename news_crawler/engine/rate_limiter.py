"""Token bucket shared by all lanes of a process."""

from __future__ import annotations

import time
from threading import Lock
from typing import Callable


class RateLimiter:
    """Lazily refilled token bucket; ``acquire`` blocks until tokens are available.

    Refill and debit happen together under one lock so concurrent callers can
    never spend tokens they did not observe. Waiting happens outside the lock.
    """

    def __init__(
        self,
        capacity: float = 1.0,
        refill_per_ms: float = 0.001,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if capacity <= 0 or refill_per_ms <= 0:
            raise ValueError("capacity and refill_per_ms must be positive")
        self.capacity = float(capacity)
        self.refill_per_ms = float(refill_per_ms)
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._last_refill = clock()
        self._lock = Lock()

    @property
    def tokens(self) -> float:
        with self._lock:
            self._refill()
            return self._tokens

    def acquire(self, n: float = 1) -> None:
        if n > self.capacity:
            raise ValueError(f"Cannot acquire {n} tokens from a bucket of {self.capacity}")
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= n:
                    self._tokens -= n
                    return
                wait_ms = (n - self._tokens) / self.refill_per_ms
            self._sleep(wait_ms / 1000.0)

    def _refill(self) -> None:
        now = self._clock()
        elapsed_ms = max(0.0, (now - self._last_refill) * 1000.0)
        self._tokens = min(self.capacity, self._tokens + elapsed_ms * self.refill_per_ms)
        self._last_refill = now


__all__ = ["RateLimiter"]
