"""Prometheus metrics for virtual-drive.

Usage::

    from virtual_drive.observability.metrics import FILE_OPERATIONS_TOTAL

    FILE_OPERATIONS_TOTAL.labels(operation="create_folder", outcome="ok").inc()
"""

from __future__ import annotations

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# ---------------------------------------------------------------------------
# Engine metrics
# ---------------------------------------------------------------------------

FILE_OPERATIONS_TOTAL = Counter(
    "virtual_drive_operations_total",
    "File operations by operation name and outcome (ok or an error code).",
    labelnames=["operation", "outcome"],
    registry=REGISTRY,
)

FILE_OPERATION_DURATION_SECONDS = Histogram(
    "virtual_drive_operation_duration_seconds",
    "File operation latency in seconds, storage round trips included.",
    labelnames=["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)

# ---------------------------------------------------------------------------
# HTTP metrics
# ---------------------------------------------------------------------------

HTTP_REQUESTS_TOTAL = Counter(
    "virtual_drive_http_requests_total",
    "HTTP requests by method, route template and status code.",
    labelnames=["method", "route", "status"],
    registry=REGISTRY,
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "virtual_drive_http_request_duration_seconds",
    "HTTP request latency in seconds by method and route template.",
    labelnames=["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)


def metrics_text() -> tuple[bytes, str]:
    """Generate Prometheus exposition text and content-type header."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
