"""
Prometheus Metrics

Collectors shared by the HTTP middleware, the query executor and the
report fallback policy.
"""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests",
    ["method", "route", "status_code"],
    buckets=[0.05, 0.1, 0.2, 0.3, 0.4, 0.5, 0.75, 1.0, 2.0],
)

DB_QUERY_DURATION = Histogram(
    "db_query_duration_seconds",
    "Duration of analytical store queries",
    ["query_name"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.2, 0.3, 0.5, 1.0],
)

FALLBACK_DATA_USAGE = Counter(
    "fallback_data_usage_total",
    "Number of reports served from fallback data",
    ["report"],
)


def render_metrics() -> tuple:
    """Exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
