"""
Prometheus metrics for admissions, payments, check-ins and the derived ledger.

This module defines all Prometheus metrics used by the booking core. Metrics
are exposed via the /metrics endpoint for scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., admissions)
    - Histogram: Observations bucketed by value (e.g., admission latency)

Example:
    >>> from retreat_booking.metrics import admission_duration, admissions_total
    >>> with admission_duration.labels(operation="create").time():
    ...     decision = admit(capacity, candidate, stays)
    ...     admissions_total.labels(operation="create", outcome="admitted").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Admission Metrics
# =============================================================================

admissions_total = Counter(
    "retreat_admissions_total",
    "Total capacity admission decisions",
    ["operation", "outcome"],
)
"""
Counter for capacity admission decisions.

Labels:
    operation: create, update or promote
    outcome: admitted or capacity_exceeded
"""

admission_duration = Histogram(
    "retreat_admission_duration_seconds",
    "Time spent inside the per-retreat admission critical section",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, float("inf")),
)
"""
Histogram for admission latency, lock wait included.

Labels:
    operation: create, update or promote

Buckets: 5ms, 10ms, 25ms, 50ms, 100ms, 250ms, 500ms, 1s, 2.5s, +Inf
"""

# =============================================================================
# Payment and Ledger Metrics
# =============================================================================

payment_updates_total = Counter(
    "retreat_payment_updates_total",
    "Total reservation payment updates",
    ["payment_status"],
)
"""
Counter for payment updates.

Labels:
    payment_status: Resulting status (PENDING, PARTIAL, PAID)
"""

ledger_write_failures_total = Counter(
    "retreat_ledger_write_failures_total",
    "Ledger mirror writes that failed after the payment was committed",
)
"""Counter for best-effort ledger writes that failed (drift candidates)."""

ledger_drift_repaired_total = Counter(
    "retreat_ledger_drift_repaired_total",
    "Booking-income ledger entries re-mirrored by the drift repair",
)
"""Counter for ledger entries repaired by repair_ledger_drift."""

# =============================================================================
# Stay Lifecycle Metrics
# =============================================================================

check_ins_total = Counter(
    "retreat_check_ins_total",
    "Total check-in attempts",
    ["outcome"],
)
"""
Counter for check-in attempts.

Labels:
    outcome: checked_in, already_checked_in or invalid_state
"""

check_outs_total = Counter(
    "retreat_check_outs_total",
    "Total check-out attempts",
    ["outcome"],
)
"""
Counter for check-out attempts.

Labels:
    outcome: checked_out, not_checked_in or already_checked_out
"""

loyalty_points_awarded_total = Counter(
    "retreat_loyalty_points_awarded_total",
    "Loyalty points awarded",
    ["reason"],
)
"""
Counter for loyalty points awarded.

Labels:
    reason: stay or review
"""

# =============================================================================
# Scheduling Metrics
# =============================================================================

conflicts_detected_total = Counter(
    "retreat_conflicts_detected_total",
    "Resource conflicts reported by the conflict detector",
    ["resource_kind"],
)
"""
Counter for reported conflicts.

Labels:
    resource_kind: INSTRUCTOR or LOCATION
"""

waitlist_promotions_total = Counter(
    "retreat_waitlist_promotions_total",
    "Waitlist promotion attempts",
    ["outcome"],
)
"""
Counter for waitlist promotions.

Labels:
    outcome: promoted or capacity_exceeded
"""
