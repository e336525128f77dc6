# backend/lessonbook/monitoring/prometheus_metrics.py
"""
Prometheus metrics for the booking API.

A dedicated registry keeps test runs and multiple app instances from
colliding on the default global registry.
"""

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)

REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "lessonbook_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "lessonbook_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "lessonbook_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_transitions_total = Counter(
    "lessonbook_booking_transitions_total",
    "Booking status transitions by outcome",
    ["transition"],  # requested | approved | rejected | cascade_rejected | deleted
    registry=REGISTRY,
)

booking_conflicts_total = Counter(
    "lessonbook_booking_conflicts_total",
    "Booking requests/approvals refused by slot conflict checks",
    ["reason"],  # slot_taken | duplicate_request | race_lost | contact_required
    registry=REGISTRY,
)

slot_lock_total = Counter(
    "lessonbook_slot_lock_total",
    "Slot lock operations",
    ["action", "outcome"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers record metrics without touching collectors."""

    def record_service_operation(
        self,
        service: str,
        operation: str,
        duration: float,
        status: str,
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    def record_booking_transition(self, transition: str, count: int = 1) -> None:
        if count > 0:
            booking_transitions_total.labels(transition=transition).inc(count)

    def record_booking_conflict(self, reason: str) -> None:
        booking_conflicts_total.labels(reason=reason).inc()

    def record_slot_lock(self, action: str, outcome: str) -> None:
        slot_lock_total.labels(action=action, outcome=outcome).inc()

    def export(self) -> bytes:
        return generate_latest(REGISTRY)


prometheus_metrics = PrometheusMetrics()
