"""
Middleware for the adapter server.
"""

from audnet.ad_server.middleware.metrics import (
    MetricsMiddleware,
    metrics_endpoint,
    record_adapter_error,
    record_bids,
    record_outbound_request,
)

__all__ = [
    "MetricsMiddleware",
    "metrics_endpoint",
    "record_adapter_error",
    "record_bids",
    "record_outbound_request",
]
