"""Prometheus metrics for the summary client.

Defines counters and histograms for monitoring:
- Provider call outcomes, retries and latency
- Summary outcomes per persona
- Fallback synthesis frequency

Usage:
    from plumly_summarizer.observability.metrics import SUMMARY_REQUESTS_TOTAL

    SUMMARY_REQUESTS_TOTAL.labels(persona="patient", status="success").inc()
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Custom registry to avoid conflicts with the default registry
REGISTRY = CollectorRegistry(auto_describe=True)

# =============================================================================
# COUNTERS
# =============================================================================

LLM_REQUESTS_TOTAL = Counter(
    name="plumly_llm_requests_total",
    documentation="Total outbound provider calls",
    labelnames=["status"],  # success, failed
    registry=REGISTRY,
)

LLM_RETRIES_TOTAL = Counter(
    name="plumly_llm_retries_total",
    documentation="Retries scheduled after a retryable failure",
    labelnames=["kind"],  # ErrorKind value
    registry=REGISTRY,
)

SUMMARY_REQUESTS_TOTAL = Counter(
    name="plumly_summary_requests_total",
    documentation="Total summarize() calls",
    labelnames=["persona", "status"],  # status: success or ErrorKind value
    registry=REGISTRY,
)

SUMMARY_FALLBACKS_TOTAL = Counter(
    name="plumly_summary_fallbacks_total",
    documentation="Responses synthesized from unstructured model text",
    registry=REGISTRY,
)

# =============================================================================
# HISTOGRAMS
# =============================================================================

LLM_REQUEST_DURATION = Histogram(
    name="plumly_llm_request_duration_seconds",
    documentation="Provider call latency",
    buckets=(0.5, 1, 2, 5, 10, 30, 60, float("inf")),
    registry=REGISTRY,
)

SUMMARY_DURATION = Histogram(
    name="plumly_summary_duration_seconds",
    documentation="End-to-end summarize() latency including retries",
    labelnames=["persona"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, float("inf")),
    registry=REGISTRY,
)


def get_metrics_text() -> bytes:
    """Generate Prometheus metrics in text exposition format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Content-Type header value for a metrics response."""
    return CONTENT_TYPE_LATEST
