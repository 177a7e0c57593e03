"""
Prometheus metrics for the entitlement service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

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

# Seat metrics
seat_mutations_total = Counter(
    "seat_mutations_total",
    "Seat mutations by action and outcome",
    ["action", "outcome"],
)

# Remote sync metrics
remote_sync_requests_total = Counter(
    "remote_sync_requests_total",
    "Requests sent to the billing backend",
    ["operation", "outcome"],
)

remote_sync_duration_seconds = Histogram(
    "remote_sync_duration_seconds",
    "Billing backend request duration in seconds",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Activation polling metrics
polling_sessions_total = Counter(
    "polling_sessions_total",
    "Activation polling sessions by terminal state",
    ["state"],
)

polling_attempts_total = Counter(
    "polling_attempts_total",
    "Activation polling attempts by outcome",
    ["outcome"],
)

# Access metrics
access_decisions_total = Counter(
    "access_decisions_total",
    "Access gate decisions",
    ["allowed", "reason"],
)

# Cache metrics
cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["cache_key"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["cache_key"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
