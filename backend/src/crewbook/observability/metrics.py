"""Prometheus metrics for Crewbook.

Defines operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "crewbook_http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status_code"],
)

http_request_duration_seconds = Histogram(
    "crewbook_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# Authentication metrics
auth_attempts_total = Counter(
    "crewbook_auth_attempts_total",
    "Sign-in and sign-up attempts",
    ["action", "result"],  # action: sign_in|sign_up, result: success|failure|rate_limited
)

# Document lifecycle metrics
document_transitions_total = Counter(
    "crewbook_document_transitions_total",
    "Document status transitions",
    ["to_status"],
)

document_upload_bytes = Histogram(
    "crewbook_document_upload_bytes",
    "Size of verified document uploads in bytes",
    buckets=[10_000, 100_000, 500_000, 1_000_000, 5_000_000, 10_000_000, 25_000_000, 50_000_000],
)

storage_errors_total = Counter(
    "crewbook_storage_errors_total",
    "Object storage operations that failed",
    ["operation"],  # operation: presign_upload|presign_download|head|delete
)
