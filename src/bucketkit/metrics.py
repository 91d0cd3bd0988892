"""Prometheus metrics definitions for bucketkit.

All bucketkit metrics use the ``bucketkit_`` prefix for namespace isolation.
Collectors are only registered once ``init_metrics()`` has been called; until
then the module-level references stay ``None`` and the ``record_*`` helpers
do nothing, so applications that do not scrape metrics pay nothing.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Request counter and latency  (labels: operation, status)
# ---------------------------------------------------------------------------
requests_total: Counter | None = None
request_duration_seconds: Histogram | None = None

# ---------------------------------------------------------------------------
# Byte counters
# ---------------------------------------------------------------------------
bytes_sent_total: Counter | None = None
bytes_received_total: Counter | None = None

# ---------------------------------------------------------------------------
# Open bucket gauge
# ---------------------------------------------------------------------------
open_buckets: Gauge | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics.

    Safe to call more than once; collectors are registered in the global
    prometheus_client registry on the first call only.
    """
    global _initialized
    global requests_total, request_duration_seconds
    global bytes_sent_total, bytes_received_total, open_buckets

    if _initialized:
        return

    requests_total = Counter(
        "bucketkit_requests_total",
        "Total S3 requests by operation and outcome",
        ["operation", "status"],
    )

    request_duration_seconds = Histogram(
        "bucketkit_request_duration_seconds",
        "S3 request latency including signing",
        ["operation"],
    )

    bytes_sent_total = Counter(
        "bucketkit_bytes_sent_total",
        "Total bytes sent in request bodies",
    )

    bytes_received_total = Counter(
        "bucketkit_bytes_received_total",
        "Total bytes received in response bodies",
    )

    open_buckets = Gauge(
        "bucketkit_open_buckets",
        "Number of currently open buckets",
    )

    _initialized = True


def record_request(
    operation: str, status: str, duration: float, sent: int, received: int
) -> None:
    """Record one completed request. No-op until init_metrics() runs."""
    if not _initialized:
        return
    requests_total.labels(operation=operation, status=status).inc()
    request_duration_seconds.labels(operation=operation).observe(duration)
    if sent:
        bytes_sent_total.inc(sent)
    if received:
        bytes_received_total.inc(received)


def set_open_buckets(count: int) -> None:
    if not _initialized:
        return
    open_buckets.set(count)
