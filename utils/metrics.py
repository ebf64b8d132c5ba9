"""
Prometheus metrics for the weather widget and its proxy.
"""
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    Info,
    generate_latest,
)

# Application info metric
app_info = Info(
    "widget_app",
    "Application information for the weather widget",
)

# Proxy request metrics
proxy_request_counter = Counter(
    "widget_proxy_requests_total",
    "Total number of requests handled by the proxy",
    ["route", "status_code"],
)

proxy_request_duration = Histogram(
    "widget_proxy_request_duration_seconds",
    "Proxy request duration in seconds",
    ["route"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Upstream API metrics
upstream_calls = Counter(
    "widget_upstream_calls_total",
    "Total number of calls to the upstream weather and geocoding APIs",
    ["operation", "status"],
)

# Cache metrics
cache_lookups = Counter(
    "widget_cache_lookups_total",
    "Cache lookups by key namespace and result",
    ["namespace", "result"],
)

forecast_fallbacks = Counter(
    "widget_forecast_fallbacks_total",
    "Forecast strategy failures that fell through to the next strategy",
    ["from_strategy"],
)


def set_app_info(version: str, environment: str = "production"):
    """Set application information."""
    app_info.info(
        {"version": version, "environment": environment, "application": "weather-widget"}
    )


def get_metrics() -> bytes:
    """Get all metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
