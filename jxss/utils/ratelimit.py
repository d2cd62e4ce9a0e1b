"""
Shared request rate limiting for jXSS.

A single token bucket is shared by every worker so the aggregate request
rate stays bounded no matter how many workers are running.
"""

import asyncio
import threading
import time

from jxss.errors import RateLimitError


class RateGate:
    """Token bucket limiter.

    ``rate`` tokens are added per second, up to ``burst`` tokens (defaults to
    ``rate``, never less than one). Every HTTP request takes one token.
    """

    def __init__(self, rate: float, burst: int | None = None):
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        self.rate = float(rate)
        self.burst = max(1, int(burst if burst is not None else rate))
        self._tokens = float(self.burst)
        self._updated = time.monotonic()
        self._lock = threading.Lock()

    def _reserve(self) -> float:
        """Take a token and return how long the caller has to wait for it."""
        with self._lock:
            now = time.monotonic()
            self._tokens = min(
                float(self.burst),
                self._tokens + (now - self._updated) * self.rate,
            )
            self._updated = now
            self._tokens -= 1.0
            if self._tokens >= 0:
                return 0.0
            return -self._tokens / self.rate

    def _release(self):
        """Give back a reservation that was never used."""
        with self._lock:
            self._tokens = min(float(self.burst), self._tokens + 1.0)

    @property
    def available(self) -> float:
        """Tokens currently in the bucket (negative while callers are queued)."""
        with self._lock:
            elapsed = time.monotonic() - self._updated
            return min(float(self.burst), self._tokens + elapsed * self.rate)

    async def acquire(self, cancel: asyncio.Event | None = None):
        """
        Wait until a token is available.

        Args:
            cancel: Run-wide cancellation event. If it is set before or while
                waiting, the token is returned and RateLimitError is raised.
        """
        if cancel is not None and cancel.is_set():
            raise RateLimitError("rate limiter wait cancelled")

        delay = self._reserve()
        if delay <= 0:
            return

        if cancel is None:
            await asyncio.sleep(delay)
            return

        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return

        self._release()
        raise RateLimitError("rate limiter wait cancelled")
