"""
Prometheus metrics for reservation lifecycle operations and the availability calendar.

This module defines all Prometheus metrics used throughout the application for
observability and monitoring. Metrics are exposed via the /metrics endpoint for
scraping by Prometheus.

Example:
    >>> from rental_reservations.metrics import operation_duration, operations_total
    >>> with operation_duration.labels(operation="create").time():
    ...     view = lifecycle.create(payload, actor)
    ...     operations_total.labels(operation="create", outcome="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Lifecycle Metrics
# =============================================================================

operations_total = Counter(
    "reservation_operations_total",
    "Total number of reservation lifecycle operations by outcome",
    ["operation", "outcome"],
)
"""
Counter for lifecycle operations.

Labels:
    operation: create, update, delete, update_status, confirm, cancel,
        check_in, check_out, mark_no_show
    outcome: success, not_found, conflict, invalid_transition, validation,
        unauthorized, error
"""

operation_duration = Histogram(
    "reservation_operation_duration_seconds",
    "Duration of reservation lifecycle operations in seconds",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, float("inf")),
)
"""
Histogram for lifecycle operation latency, including the database transaction.

Labels:
    operation: Lifecycle operation name
"""

conflicts_detected = Counter(
    "reservation_conflicts_total",
    "Total number of booking attempts rejected for overlapping an active reservation",
    ["operation"],
)

# =============================================================================
# Calendar Metrics
# =============================================================================

calendar_days_marked = Counter(
    "reservation_calendar_days_marked_total",
    "Total number of calendar days booked or released",
    ["status"],
)
"""
Counter for calendar day updates.

Labels:
    status: BOOKED or AVAILABLE
"""

# =============================================================================
# Audit Metrics
# =============================================================================

audit_write_failures = Counter(
    "reservation_audit_write_failures_total",
    "Total number of audit records that could not be written",
    ["action"],
)
"""Counter for best-effort audit writes that failed after the primary write committed."""
