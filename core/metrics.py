"""
Prometheus metrics for the quotation service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Gauge, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Catalog metrics
catalog_changes_total = Counter(
    "catalog_changes_total",
    "Total catalog entry changes",
    ["change"],
)

# Request lifecycle metrics
request_transitions_total = Counter(
    "request_transitions_total",
    "Total calculation request status transitions",
    ["transition"],
)

recalculations_total = Counter(
    "recalculations_total",
    "Total request total recalculations",
)

# Pricing metrics
pricing_tasks_dispatched_total = Counter(
    "pricing_tasks_dispatched_total",
    "Total pricing tasks handed to the queue",
    ["outcome"],
)

pricing_submissions_total = Counter(
    "pricing_submissions_total",
    "Total pricing task submissions by queue workers",
    ["backend", "outcome"],
)

pricing_callbacks_total = Counter(
    "pricing_callbacks_total",
    "Total pricing callbacks received",
    ["outcome"],
)

pricing_submission_duration_seconds = Histogram(
    "pricing_submission_duration_seconds",
    "Pricing backend submission duration in seconds",
    ["backend"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Current state metrics
requests_awaiting_pricing = Gauge(
    "requests_awaiting_pricing",
    "Number of request lines awaiting pricing found by the last retry sweep",
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
