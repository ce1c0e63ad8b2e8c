"""
Purpose: Live tracking view of a dispatched batch.
What it does:

- summarize_progress: delivered / failed / remaining counts
- order_stops: assignments ordered by route sequence (unsequenced last, stable)
- build_stop_views: per-stop rows (order number, delivery status style, ETA band)
- last_seen: "42s ago" / "5m ago" / "2h ago" for the driver snapshot

Rule: `now` is passed in explicitly; nothing reads the wall clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from batches.models import Assignment, AssignmentStatus, Batch, DriverSnapshot, Order
from dispatch.policy import DispatchPolicy, default_policy
from .eta import EtaBand, classify_eta


# delivery status -> (icon name, color)
DELIVERY_STATUS_STYLE: Dict[AssignmentStatus, Tuple[str, str]] = {
    AssignmentStatus.ASSIGNED: ("radio-button-unchecked", "#9ca3af"),
    AssignmentStatus.EN_ROUTE: ("directions-car", "#eab308"),
    AssignmentStatus.ARRIVED: ("place", "#eab308"),
    AssignmentStatus.DELIVERED: ("check-circle", "#16a34a"),
    AssignmentStatus.FAILED: ("cancel", "#dc2626"),
}


@dataclass(frozen=True)
class TrackingProgress:
    total_orders: int
    delivered: int
    failed: int

    @property
    def remaining(self) -> int:
        return max(self.total_orders - self.delivered - self.failed, 0)


@dataclass(frozen=True)
class StopView:
    """
    One row of the "Delivery Stops" list.
    """
    position: int
    order_id: str
    order_number: str
    status: AssignmentStatus
    icon: str
    color: str
    eta_band: EtaBand
    eta_minutes: Optional[int] = None
    distance_remaining_km: Optional[float] = None


def summarize_progress(batch: Batch, assignments: Sequence[Assignment] = ()) -> TrackingProgress:
    """
    Counts come from settled assignments when there are any, otherwise
    from the batch's own counters.
    """
    if assignments:
        delivered = sum(1 for a in assignments if a.delivered_at is not None)
        failed = sum(1 for a in assignments if a.failed_at is not None)
        total = max(batch.order_count, len(assignments))
    else:
        delivered, failed, total = batch.total_delivered, batch.total_failed, batch.order_count
    return TrackingProgress(total_orders=total, delivered=delivered, failed=failed)


def order_stops(
    assignments: Sequence[Assignment],
    policy: Optional[DispatchPolicy] = None,
) -> List[Assignment]:
    policy = policy or default_policy()

    def rank(assignment: Assignment) -> int:
        if assignment.sequence_number is None:
            return policy.unsequenced_stop_rank
        return assignment.sequence_number

    return sorted(assignments, key=rank)


def build_stop_views(
    orders: Sequence[Order],
    assignments: Sequence[Assignment],
    policy: Optional[DispatchPolicy] = None,
) -> List[StopView]:
    by_id = {order.id: order for order in orders}
    views: List[StopView] = []

    for index, assignment in enumerate(order_stops(assignments, policy)):
        status = assignment.status or AssignmentStatus.ASSIGNED
        icon, color = DELIVERY_STATUS_STYLE[status]
        order = by_id.get(assignment.order_id)
        eta = assignment.eta

        eta_minutes = None
        distance_km = None
        if eta is not None and eta.eta_seconds is not None:
            eta_minutes = int(eta.eta_seconds / 60 + 0.5)
        if eta is not None and eta.distance_remaining_meters is not None:
            distance_km = round(eta.distance_remaining_meters / 1000, 1)

        views.append(
            StopView(
                position=assignment.sequence_number or index + 1,
                order_id=assignment.order_id,
                order_number=order.display_number if order else assignment.order_id[-6:],
                status=status,
                icon=icon,
                color=color,
                eta_band=classify_eta(eta.eta_status if eta else None),
                eta_minutes=eta_minutes,
                distance_remaining_km=distance_km,
            )
        )

    return views


def last_seen(
    driver: Optional[DriverSnapshot],
    now: datetime,
    policy: Optional[DispatchPolicy] = None,
) -> str:
    policy = policy or default_policy()

    if driver is None or driver.updated_at is None:
        return policy.time_placeholder

    try:
        seconds = int((now - driver.updated_at).total_seconds())
    except TypeError:
        # naive `now` against an aware snapshot
        return policy.time_placeholder

    seconds = max(seconds, 0)
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    return f"{seconds // 3600}h ago"
