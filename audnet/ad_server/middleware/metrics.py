"""
Prometheus metrics middleware for monitoring.

Provides:
- Request latency histograms
- Request counters by endpoint
- Active request gauge
- Adapter metrics (outbound calls, bids, errors by kind)
"""

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Gauge, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse

from audnet import __version__
from audnet.common.logger import get_logger

logger = get_logger(__name__)

# =============================================================================
# Prometheus Metrics Definitions
# =============================================================================

APP_INFO = Info("audnet_app", "audnet application information")
APP_INFO.info({
    "version": __version__,
    "name": "audnet",
    "description": "Audience Network bidder adapter",
})

# HTTP request metrics
HTTP_REQUEST_TOTAL = Counter(
    "audnet_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "audnet_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "audnet_http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method", "endpoint"],
)

# Adapter metrics
OUTBOUND_REQUESTS_TOTAL = Counter(
    "audnet_outbound_requests_total",
    "Placement-bid requests sent downstream",
    ["status"],
)

OUTBOUND_LATENCY = Histogram(
    "audnet_outbound_latency_seconds",
    "Placement-bid request latency",
    buckets=(0.01, 0.025, 0.05, 0.1, 0.2, 0.3, 0.5, 1.0, 2.5),
)

ADAPTER_ERRORS_TOTAL = Counter(
    "audnet_adapter_errors_total",
    "Errors reported by the adapter or transport",
    ["kind"],
)

BIDS_TOTAL = Counter(
    "audnet_bids_total",
    "Bids returned by Audience Network",
)


# =============================================================================
# Metrics Middleware
# =============================================================================

class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware that collects Prometheus metrics for all HTTP requests.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and record metrics."""
        method = request.method
        endpoint = request.url.path

        HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            logger.error("Request error", error=str(e))
            raise
        finally:
            duration = time.perf_counter() - start_time

            HTTP_REQUEST_TOTAL.labels(
                method=method,
                endpoint=endpoint,
                status=str(status_code),
            ).inc()

            HTTP_REQUEST_DURATION.labels(
                method=method,
                endpoint=endpoint,
            ).observe(duration)

            HTTP_REQUESTS_IN_PROGRESS.labels(
                method=method,
                endpoint=endpoint,
            ).dec()


# =============================================================================
# Metrics Endpoint
# =============================================================================

async def metrics_endpoint() -> StarletteResponse:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    return StarletteResponse(
        content=generate_latest(),
        media_type="text/plain; charset=utf-8",
    )


# =============================================================================
# Helper Functions for Recording Adapter Metrics
# =============================================================================

def record_outbound_request(status: str, duration: float) -> None:
    """Record a placement-bid call; ``status`` is the HTTP code or "error"."""
    OUTBOUND_REQUESTS_TOTAL.labels(status=status).inc()
    OUTBOUND_LATENCY.observe(duration)


def record_adapter_error(kind: str) -> None:
    """Record an adapter or transport error."""
    ADAPTER_ERRORS_TOTAL.labels(kind=kind).inc()


def record_bids(count: int) -> None:
    """Record returned bids."""
    BIDS_TOTAL.inc(count)
