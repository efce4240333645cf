"""
Prometheus metrics for the hydration runtime.

Exposes dispatcher activity via an HTTP /metrics endpoint for Prometheus
scraping.

Environment Variables:
    HYDRATION_METRICS_ENABLED: Enable metrics server (true/false) - default: false
    HYDRATION_METRICS_PORT: HTTP port for /metrics endpoint - default: 9108

Usage:
    from shell_runtime.metrics import start_metrics_server, track_dispatch

    start_metrics_server(enabled=True, port=9108)

    with track_dispatch("UrlChanged"):
        model, effects = update(model, msg)
"""

import logging
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Metrics registry (module-level, thread-safe)
REGISTRY: Optional[CollectorRegistry] = None
MESSAGES_TOTAL: Optional[Counter] = None
FETCHES_TOTAL: Optional[Counter] = None
STALE_DISCARDS_TOTAL: Optional[Counter] = None
API_ERRORS_TOTAL: Optional[Counter] = None
DISPATCH_DURATION: Optional[Histogram] = None

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics(registry: Optional[CollectorRegistry] = None) -> None:
    """
    Initialize Prometheus metrics (call once at startup).

    Args:
        registry: Registry to register into (None = a fresh private one)
    """
    global REGISTRY, MESSAGES_TOTAL, FETCHES_TOTAL, STALE_DISCARDS_TOTAL
    global API_ERRORS_TOTAL, DISPATCH_DURATION, _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        REGISTRY = registry or CollectorRegistry()

        # Messages dispatched (labels: msg_type)
        MESSAGES_TOTAL = Counter(
            "hydration_messages_total",
            "Total number of messages applied by the dispatcher",
            labelnames=["msg_type"],
            registry=REGISTRY,
        )

        # API requests issued (labels: request)
        FETCHES_TOTAL = Counter(
            "hydration_fetches_total",
            "Total number of API requests issued",
            labelnames=["request"],
            registry=REGISTRY,
        )

        # Responses dropped by the staleness guard (labels: stream)
        STALE_DISCARDS_TOTAL = Counter(
            "hydration_stale_discards_total",
            "Total number of responses discarded as stale",
            labelnames=["stream"],
            registry=REGISTRY,
        )

        # API failures (labels: kind)
        API_ERRORS_TOTAL = Counter(
            "hydration_api_errors_total",
            "Total number of failed API requests by error kind",
            labelnames=["kind"],
            registry=REGISTRY,
        )

        DISPATCH_DURATION = Histogram(
            "hydration_dispatch_duration_seconds",
            "Duration of one dispatch step (update plus planning) in seconds",
            labelnames=["msg_type"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
            registry=REGISTRY,
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in background thread.

    Args:
        enabled: Whether to start metrics server (HYDRATION_METRICS_ENABLED)
        port: HTTP port for /metrics endpoint (HYDRATION_METRICS_PORT)
    """
    if not enabled:
        logger.info("Metrics server disabled (HYDRATION_METRICS_ENABLED=false)")
        return

    init_metrics()

    try:
        # start_http_server is non-blocking (starts daemon thread)
        start_http_server(port, addr="0.0.0.0", registry=REGISTRY)
        logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")


@contextmanager
def track_dispatch(msg_type: str) -> Generator[None, None, None]:
    """
    Count one dispatched message and time it.

    Usage:
        with track_dispatch("UrlChanged"):
            model, effects = update(model, msg)
    """
    if MESSAGES_TOTAL is None or DISPATCH_DURATION is None:
        yield
        return

    MESSAGES_TOTAL.labels(msg_type=msg_type).inc()
    with DISPATCH_DURATION.labels(msg_type=msg_type).time():
        yield


def track_fetch(request: str) -> None:
    if FETCHES_TOTAL is not None:
        FETCHES_TOTAL.labels(request=request).inc()


def track_stale(stream: str) -> None:
    if STALE_DISCARDS_TOTAL is not None:
        STALE_DISCARDS_TOTAL.labels(stream=stream).inc()


def track_api_error(kind: str) -> None:
    if API_ERRORS_TOTAL is not None:
        API_ERRORS_TOTAL.labels(kind=kind).inc()
