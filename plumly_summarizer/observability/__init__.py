"""Observability: correlation ids, structured logging and Prometheus metrics.

Usage:
    from plumly_summarizer.observability import (
        correlation_id_context,
        get_logger,
        SUMMARY_REQUESTS_TOTAL,
    )
"""

from plumly_summarizer.observability.context import (
    get_correlation_id,
    correlation_id_context,
    correlation_scope,
)
from plumly_summarizer.observability.logging import (
    get_logger,
    configure_logging,
    add_correlation_id_processor,
    request_log_context,
)
from plumly_summarizer.observability.metrics import (
    LLM_REQUESTS_TOTAL,
    LLM_RETRIES_TOTAL,
    SUMMARY_REQUESTS_TOTAL,
    SUMMARY_FALLBACKS_TOTAL,
    LLM_REQUEST_DURATION,
    SUMMARY_DURATION,
    get_metrics_text,
    get_metrics_content_type,
)

__all__ = [
    # Context
    "get_correlation_id",
    "correlation_id_context",
    "correlation_scope",
    # Logging
    "get_logger",
    "configure_logging",
    "add_correlation_id_processor",
    "request_log_context",
    # Metrics
    "LLM_REQUESTS_TOTAL",
    "LLM_RETRIES_TOTAL",
    "SUMMARY_REQUESTS_TOTAL",
    "SUMMARY_FALLBACKS_TOTAL",
    "LLM_REQUEST_DURATION",
    "SUMMARY_DURATION",
    "get_metrics_text",
    "get_metrics_content_type",
]
