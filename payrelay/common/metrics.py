"""Prometheus metric definitions for the relay."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
relay_requests_total = Counter(
    "relay_requests_total",
    "Relay operations by outcome",
    ["service", "operation", "outcome"],
)
token_exchanges_total = Counter(
    "token_exchanges_total",
    "Client-credential token exchanges by outcome",
    ["service", "outcome"],
)
upstream_latency_seconds = Histogram(
    "upstream_latency_seconds",
    "Latency of calls to the payment processor",
    ["service", "endpoint"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
