"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Issuance metrics
issuance_attempts = Counter(
    'ticket_issuance_attempts_total',
    'Ticket issuance attempts',
    ['result']  # issued, capacity, unauthorized, payment, conflict, invalid, not_found
)

tickets_issued = Counter(
    'tickets_issued_total',
    'Tickets created',
    ['kind']  # free, paid
)

issuance_latency = Histogram(
    'ticket_issuance_latency_seconds',
    'Ticket issuance latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Admission metrics
checkin_attempts = Counter(
    'ticket_checkin_attempts_total',
    'Door scans',
    ['result']  # admitted, already_checked_in, not_found, unauthorized, invalid
)

# Notification metrics
notifications = Counter(
    'ticket_notifications_total',
    'Ticket email deliveries',
    ['result']  # sent, failed, skipped
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )

# Convenience functions for instrumentation
def record_issuance(result: str, kind: str = "free", count: int = 0):
    """Record an issuance decision; count is the number of tickets created."""
    issuance_attempts.labels(result=result).inc()
    if count:
        tickets_issued.labels(kind=kind).inc(count)

def record_checkin(result: str):
    checkin_attempts.labels(result=result).inc()

def record_notification(result: str):
    notifications.labels(result=result).inc()

def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
