"""
Prometheus metrics for reservations, transitions, locking and the expiry sweeper.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from booking_engine.metrics import reservations_total
    >>> reservations_total.labels(kind="shortlet", outcome="reserved").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Reservation Metrics
# =============================================================================

reservations_total = Counter(
    "booking_reservations_total",
    "Total reserve attempts by outcome",
    ["kind", "outcome"],
)
"""
Counter for reserve attempts.

Labels:
    kind: shortlet, rental or sale_inspection
    outcome: reserved, conflict, invalid or busy
"""

transitions_total = Counter(
    "booking_transitions_total",
    "Total booking status transitions applied",
    ["event", "to_status"],
)

holds_released_total = Counter(
    "booking_holds_released_total",
    "Total active holds released, by the status that released them",
    ["to_status"],
)

# =============================================================================
# Locking Metrics
# =============================================================================

lock_wait_seconds = Histogram(
    "booking_property_lock_wait_seconds",
    "Time spent waiting for a per-property lock",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, float("inf")),
)

lock_timeouts_total = Counter(
    "booking_property_lock_timeouts_total",
    "Total per-property lock acquisitions that timed out",
)

# =============================================================================
# Expiry Sweeper Metrics
# =============================================================================

expiry_sweeps_total = Counter(
    "booking_expiry_sweeps_total",
    "Total expiry sweeps (success and failure)",
    ["status"],
)

bookings_expired_total = Counter(
    "booking_bookings_expired_total",
    "Total pending bookings expired by the sweeper",
)
