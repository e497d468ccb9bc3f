"""
Token bucket rate limiter for outbound calls to shared third-party services.

The clock and sleep functions are injectable so spacing can be asserted
against a fake clock without real waiting.
"""

import asyncio
import time
import logging
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

class RateLimiter:
    """Token bucket rate limiter with an async acquire"""

    def __init__(
        self,
        requests_per_second: float,
        burst_limit: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize the rate limiter.

        Args:
            requests_per_second: Maximum sustained request rate
            burst_limit: Maximum burst size (defaults to 1)
            clock: Monotonic clock returning seconds
            sleep: Coroutine function used to wait for a token
        """
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")

        self.requests_per_second = requests_per_second
        self.burst_limit = burst_limit or 1
        self._clock = clock
        self._sleep = sleep

        self.tokens = float(self.burst_limit)
        self.last_update = self._clock()
        self._lock = asyncio.Lock()

        self.stats = {
            'total_requests': 0,
            'delayed_requests': 0,
            'total_delay': 0.0,
        }

    @classmethod
    def from_min_interval(cls, min_interval_seconds: float, **kwargs) -> "RateLimiter":
        """Build a limiter allowing one request per min_interval_seconds."""
        return cls(requests_per_second=1.0 / min_interval_seconds, **kwargs)

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self.last_update)
        self.tokens = min(self.tokens + elapsed * self.requests_per_second, float(self.burst_limit))
        self.last_update = now

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        async with self._lock:
            self._refill()

            if self.tokens < 1:
                required_wait = (1 - self.tokens) / self.requests_per_second
                self.stats['delayed_requests'] += 1
                self.stats['total_delay'] += required_wait
                logger.debug(f"Waiting {required_wait:.2f}s for next token")
                await self._sleep(required_wait)
                self._refill()
                # Clock may not have advanced by the full wait
                self.tokens = max(self.tokens, 1.0)

            self.tokens -= 1
            self.stats['total_requests'] += 1

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

    def get_stats(self) -> Dict[str, float]:
        """Get current rate limiter statistics"""
        delayed = self.stats['delayed_requests']
        return {
            'total_requests': self.stats['total_requests'],
            'delayed_requests': delayed,
            'average_delay': self.stats['total_delay'] / delayed if delayed else 0.0,
            'current_tokens': self.tokens,
        }
