"""Retry Handler Utility

Bounded attempt loop with exponential backoff for provider calls.

Features:
- Classifier-driven retry decisions (retryable ErrorKinds only)
- Exponential backoff capped at max delay, no jitter
- Rate limiter enforced before every attempt, including retries
- The original exception is re-raised unchanged on exhaustion
- Built-in structured logging for observability
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from plumly_summarizer.models.llm import RetryConfig
from plumly_summarizer.models.summary import ErrorInfo
from plumly_summarizer.utils.rate_limiter import RateLimiter

logger = structlog.get_logger(__name__)


T = TypeVar("T")


class RetryContext:
    """Tracks retry state for a single execution."""

    def __init__(self) -> None:
        self.total_attempts: int = 0
        self.total_retries: int = 0
        self.total_delay_ms: float = 0.0
        self.last_error: Optional[BaseException] = None

    def record_attempt(self) -> None:
        self.total_attempts += 1

    def record_retry(self, delay_ms: float, error: BaseException) -> None:
        self.total_retries += 1
        self.total_delay_ms += delay_ms
        self.last_error = error

    def reset(self) -> None:
        self.total_attempts = 0
        self.total_retries = 0
        self.total_delay_ms = 0.0
        self.last_error = None


class RetryHandler:
    """Async retry handler with exponential backoff.

    Attempt n (1-indexed) that fails with a retryable classification is
    followed by a sleep of ``config.delay_for_attempt(n)`` milliseconds and
    attempt n+1, until ``config.max_retries`` attempts have been made.
    """

    def __init__(
        self,
        config: RetryConfig,
        classify: Callable[[BaseException], ErrorInfo],
        rate_limiter: Optional[RateLimiter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize retry handler.

        Args:
            config: Retry configuration
            classify: Maps a failure to ErrorInfo
            rate_limiter: Enforced before every attempt (optional)
            sleep: Coroutine function taking seconds
        """
        self.config = config
        self.classify = classify
        self.rate_limiter = rate_limiter
        self._sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """Delay in milliseconds before the attempt following ``attempt``."""
        return self.config.delay_for_attempt(attempt)

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
        context: Optional[RetryContext] = None,
    ) -> T:
        """Execute function with retry logic.

        Args:
            func: Async function to execute
            on_retry: Optional callback called before each retry with
                     (attempt_number, exception, delay_ms)
            context: Optional RetryContext to record attempts into

        Returns:
            Result of successful function execution

        Raises:
            Exception: The failing attempt's exception, unchanged, when it is
                not retryable or attempts are exhausted
        """
        attempt = 1
        while True:
            if context is not None:
                context.record_attempt()

            try:
                if self.rate_limiter is not None:
                    async with self.rate_limiter.enforce():
                        return await func()
                return await func()
            except Exception as e:
                info = self.classify(e)

                if not info.retryable or attempt >= self.config.max_retries:
                    raise

                delay_ms = self.calculate_delay(attempt)

                logger.warning(
                    "retry_attempt",
                    attempt=attempt,
                    max_attempts=self.config.max_retries,
                    error_kind=info.kind.value,
                    error_message=info.message,
                    delay_ms=delay_ms,
                )

                if context is not None:
                    context.record_retry(delay_ms, e)
                if on_retry is not None:
                    on_retry(attempt, e, delay_ms)

                await self._sleep(delay_ms / 1000.0)
                attempt += 1
