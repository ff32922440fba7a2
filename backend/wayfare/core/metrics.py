"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['booking_type', 'result']  # result: success or an error code
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking workflow latency',
    ['booking_type'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

cancellations = Counter(
    'booking_cancellations_total',
    'Booking cancellations',
    ['booking_type', 'result']
)

compensations = Counter(
    'booking_compensations_total',
    'Compensating deletes of bookings whose capacity reservation failed',
    ['result']  # deleted, failed
)

capacity_restore_failures = Counter(
    'capacity_restore_failures_total',
    'Cancelled bookings whose capacity could not be restored',
    ['booking_type']
)

# HTTP metrics
http_requests = Counter(
    'http_requests_total',
    'HTTP requests',
    ['method', 'route', 'status_code']
)

http_request_latency = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency',
    ['method', 'route'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Saved items
saved_item_operations = Counter(
    'saved_item_operations_total',
    'Saved item operations',
    ['operation', 'result']  # save/remove, success or error code
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(booking_type: str, result: str):
    """Record booking attempt. Result: success or the failing error code."""
    booking_attempts.labels(booking_type=booking_type, result=result).inc()


def record_cancellation(booking_type: str, result: str):
    cancellations.labels(booking_type=booking_type, result=result).inc()


def record_compensation(deleted: bool):
    compensations.labels(result="deleted" if deleted else "failed").inc()


def record_capacity_restore_failure(booking_type: str):
    capacity_restore_failures.labels(booking_type=booking_type).inc()


def record_http_request(method: str, route: str, status_code: int, duration_seconds: float):
    http_requests.labels(method=method, route=route, status_code=str(status_code)).inc()
    http_request_latency.labels(method=method, route=route).observe(duration_seconds)


def record_saved_item_operation(operation: str, result: str):
    saved_item_operations.labels(operation=operation, result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
