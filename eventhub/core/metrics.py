"""
Prometheus metrics for the booking workflow
"""

from prometheus_client import Counter, Histogram, REGISTRY


def _counter(name: str, documentation: str, labelnames=()):
    # Re-importing the module (test reloads) must not register twice
    existing = REGISTRY._names_to_collectors.get(name)
    if existing is not None:
        return existing
    return Counter(name, documentation, labelnames)


def _histogram(name: str, documentation: str, labelnames=()):
    existing = REGISTRY._names_to_collectors.get(name)
    if existing is not None:
        return existing
    return Histogram(name, documentation, labelnames)


REQUEST_COUNT = _counter(
    "eventhub_requests_total",
    "Total requests",
    ["method", "endpoint", "status"]
)
REQUEST_DURATION = _histogram(
    "eventhub_request_duration_seconds",
    "Request duration",
    ["method", "endpoint"]
)

BOOKINGS_CREATED = _counter("eventhub_bookings_created_total", "Bookings created")
BOOKINGS_REJECTED = _counter(
    "eventhub_bookings_rejected_total",
    "Booking attempts rejected",
    ["reason"]
)
BOOKINGS_CANCELLED = _counter("eventhub_bookings_cancelled_total", "Bookings cancelled")
PAYMENTS_COMPLETED = _counter("eventhub_payments_completed_total", "Payments completed")
PAYMENTS_FAILED = _counter("eventhub_payments_failed_total", "Payments rejected", ["reason"])
TICKETS_ISSUED = _counter("eventhub_tickets_issued_total", "Tickets issued")
TICKETS_CHECKED_IN = _counter("eventhub_tickets_checked_in_total", "Tickets scanned at the door")
