"""Correlation ids for summary requests.

Each summarize() call runs under one correlation id held in a ContextVar,
so it follows the call across awaits (rate-limit waits, backoff sleeps,
provider calls) without being passed around. Concurrent summaries running
as separate tasks each see their own id.

Usage:
    with correlation_id_context("req-42"):
        await client.summarize(request)   # logs carry correlation_id=req-42
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar(
    "summary_correlation_id", default=None
)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the current context, if any."""
    return _correlation_id.get()


@contextmanager
def correlation_id_context(corr_id: Optional[str] = None) -> Iterator[str]:
    """Run a block under ``corr_id`` (a fresh UUID when omitted).

    The previous id is restored on exit.
    """
    token = _correlation_id.set(corr_id or str(uuid.uuid4()))
    try:
        yield _correlation_id.get()  # type: ignore[misc]
    finally:
        _correlation_id.reset(token)


@contextmanager
def correlation_scope() -> Iterator[str]:
    """Reuse the caller's correlation id, or open a new one for this block."""
    current = _correlation_id.get()
    if current is not None:
        yield current
        return
    with correlation_id_context() as corr_id:
        yield corr_id
