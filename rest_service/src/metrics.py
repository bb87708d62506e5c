"""Prometheus metrics for rest_service."""

import re
import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Checkpoint store metrics
checkpoint_operations_total = Counter(
    "checkpoint_operations_total",
    "Total checkpoint store operations",
    ["operation", "status"],
)

checkpoint_operation_duration_seconds = Histogram(
    "checkpoint_operation_duration_seconds",
    "Checkpoint store operation duration",
    ["operation"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

pending_writes_staged_total = Counter(
    "pending_writes_staged_total",
    "Total pending writes staged against checkpoints",
)

# Patterns to normalize endpoints
UUID_PATTERN = re.compile(r"/[0-9a-f-]{36}")
CHECKPOINT_ID_PATTERN = re.compile(r"/checkpoint_\d+_[0-9a-z]+")


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware for collecting HTTP request metrics."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        # Normalize endpoint
        endpoint = request.url.path
        endpoint = UUID_PATTERN.sub("/{id}", endpoint)
        endpoint = CHECKPOINT_ID_PATTERN.sub("/{checkpoint_id}", endpoint)

        if endpoint not in ("/metrics", "/health"):
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status=response.status_code,
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(duration)

        return response


@contextmanager
def track_operation(operation: str) -> Iterator[None]:
    """Count and time one checkpoint store operation."""
    start_time = time.perf_counter()
    status = "error"
    try:
        yield
        status = "success"
    finally:
        checkpoint_operations_total.labels(operation=operation, status=status).inc()
        checkpoint_operation_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )


def get_metrics() -> bytes:
    """Return metrics in Prometheus format."""
    return generate_latest()


def get_content_type() -> str:
    """Return Prometheus content type."""
    return CONTENT_TYPE_LATEST
