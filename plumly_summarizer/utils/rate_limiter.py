import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger()


@dataclass
class RateLimitState:
    """Timing bookkeeping for outbound calls (monotonic seconds)"""

    last_request_time: Optional[float] = None
    request_count: int = 0


class RateLimiter:
    """Minimum-interval rate limiter for outbound provider calls.

    Guarantees that two calls permitted by the same instance are at least
    ``min_interval_ms`` apart. The check-then-update sequence runs under an
    asyncio.Lock so the guarantee also holds for concurrent callers.
    """

    def __init__(
        self,
        min_interval_ms: float = 100.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval = min_interval_ms / 1000.0
        self.state = RateLimitState()
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    @property
    def request_count(self) -> int:
        return self.state.request_count

    async def acquire(self) -> None:
        """Wait until the next call is permitted, then record it"""
        async with self._lock:
            last = self.state.last_request_time
            if last is not None:
                elapsed = self._clock() - last
                if elapsed < self.min_interval:
                    wait_time = self.min_interval - elapsed
                    logger.debug("rate_limit_wait", wait_ms=wait_time * 1000)
                    await self._sleep(wait_time)

            self.state.last_request_time = self._clock()
            self.state.request_count += 1

    @asynccontextmanager
    async def enforce(self) -> AsyncIterator[RateLimitState]:
        """Scoped acquisition: ``async with limiter.enforce(): await call()``"""
        await self.acquire()
        yield self.state
