"""
Purpose: Rebuild what happened to a batch, in order.
What it does:

Merges three kinds of facts into one chronologically ordered list:
- batch lifecycle milestones (created, route optimized, dispatched,
  driver assigned, picked up, completed)
- per-order outcomes (delivered / failed) from assignments
- orders still pending (undated)

Ordering is a single stable sort: dated events ascending, an absent time
compares as later than any present time. Pending orders therefore trail
every dated event and keep their input order; equal timestamps keep
insertion order.

Rule: Pure function over one snapshot. No I/O, no mutation of inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Assignment, Batch, Order
from .timefields import TIME_PLACEHOLDER, format_clock


class EventCategory(str, Enum):
    CREATED = "CREATED"
    ROUTE_OPTIMIZED = "ROUTE_OPTIMIZED"
    DISPATCHED = "DISPATCHED"
    DRIVER_ASSIGNED = "DRIVER_ASSIGNED"
    PICKED_UP = "PICKED_UP"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    COMPLETED = "COMPLETED"
    PENDING = "PENDING"

    @property
    def icon(self) -> str:
        return _CATEGORY_STYLE[self][0]

    @property
    def color(self) -> str:
        return _CATEGORY_STYLE[self][1]


# category -> (icon name, color)
_CATEGORY_STYLE: Dict[EventCategory, Tuple[str, str]] = {
    EventCategory.CREATED: ("add-circle", "#3b82f6"),
    EventCategory.ROUTE_OPTIMIZED: ("route", "#8b5cf6"),
    EventCategory.DISPATCHED: ("local-shipping", "#0d9488"),
    EventCategory.DRIVER_ASSIGNED: ("person", "#F56B4C"),
    EventCategory.PICKED_UP: ("inventory", "#16a34a"),
    EventCategory.DELIVERED: ("check-circle", "#16a34a"),
    EventCategory.FAILED: ("cancel", "#dc2626"),
    EventCategory.COMPLETED: ("flag", "#16a34a"),
    EventCategory.PENDING: ("radio-button-unchecked", "#9ca3af"),
}


@dataclass(frozen=True)
class TimelineEvent:
    time: Optional[datetime]
    category: EventCategory
    title: str
    subtitle: Optional[str] = None

    def display_time(self, tz: Optional[tzinfo] = None, placeholder: str = TIME_PLACEHOLDER) -> str:
        return format_clock(self.time, tz=tz, placeholder=placeholder)


def _sort_key(event: TimelineEvent) -> Tuple[bool, float]:
    # Absent time sorts after every present time.
    if event.time is None:
        return (True, 0.0)
    return (False, event.time.timestamp())


def _format_number(value: float) -> str:
    """87.0 -> '87', 87.5 -> '87.5'."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _milestone_events(batch: Batch) -> List[TimelineEvent]:
    events: List[TimelineEvent] = [
        TimelineEvent(
            time=batch.created_at,
            category=EventCategory.CREATED,
            title="Batch created",
            subtitle=f"{batch.order_count} orders",
        )
    ]

    route = batch.route
    if route is not None and route.optimized_at is not None:
        title = f"Route optimized - {route.algorithm}" if route.algorithm else "Route optimized"
        subtitle = None
        if route.total_distance_meters is not None:
            subtitle = f"{route.total_distance_meters / 1000:.1f} km total"
        events.append(TimelineEvent(route.optimized_at, EventCategory.ROUTE_OPTIMIZED, title, subtitle))

    if batch.dispatched_at is not None:
        mode = batch.assignment.mode if batch.assignment else None
        events.append(
            TimelineEvent(
                time=batch.dispatched_at,
                category=EventCategory.DISPATCHED,
                title="Dispatched",
                subtitle=f"Assignment: {mode.replace('_', ' ')}" if mode else None,
            )
        )

    if batch.driver_assigned_at is not None and batch.driver is not None:
        score = batch.assignment.assigned_score if batch.assignment else None
        driver_name = batch.driver.name or "Driver"
        events.append(
            TimelineEvent(
                time=batch.driver_assigned_at,
                category=EventCategory.DRIVER_ASSIGNED,
                title=f"{driver_name} assigned",
                subtitle=f"Score: {_format_number(score)}" if score is not None else None,
            )
        )

    if batch.picked_up_at is not None:
        kitchen_name = (batch.kitchen.name if batch.kitchen else None) or "kitchen"
        events.append(
            TimelineEvent(batch.picked_up_at, EventCategory.PICKED_UP, f"Picked up from {kitchen_name}")
        )

    return events


def _outcome_events(orders: Sequence[Order], assignments: Sequence[Assignment]) -> List[TimelineEvent]:
    by_id: Dict[str, Order] = {order.id: order for order in orders}
    events: List[TimelineEvent] = []

    for assignment in assignments:
        order = by_id.get(assignment.order_id)
        order_number = order.display_number if order else assignment.order_id[-6:]

        if assignment.delivered_at is not None:
            events.append(
                TimelineEvent(
                    time=assignment.delivered_at,
                    category=EventCategory.DELIVERED,
                    title=f"Order #{order_number} - DELIVERED",
                    subtitle=order.contact_name if order else None,
                )
            )
        elif assignment.failed_at is not None:
            events.append(
                TimelineEvent(
                    time=assignment.failed_at,
                    category=EventCategory.FAILED,
                    title=f"Order #{order_number} - FAILED",
                    subtitle=assignment.failure_reason,
                )
            )

    return events


def _pending_events(orders: Sequence[Order], assignments: Sequence[Assignment]) -> List[TimelineEvent]:
    settled = {a.order_id for a in assignments if a.is_settled}
    return [
        TimelineEvent(
            time=None,
            category=EventCategory.PENDING,
            title=f"Order #{order.display_number} - Pending",
            subtitle=order.contact_name,
        )
        for order in orders
        if order.id not in settled
    ]


def build_timeline(
    batch: Batch,
    orders: Sequence[Order] = (),
    assignments: Sequence[Assignment] = (),
) -> List[TimelineEvent]:
    """
    Main timeline entry point.

    Parameters
    ----------
    batch:
        The batch snapshot (milestones, counters, driver, route metadata).
    orders:
        Orders belonging to the batch, in display order.
    assignments:
        One assignment per order; only settled ones (delivered / failed)
        produce outcome events.

    Returns
    -------
    List[TimelineEvent] sorted by time, undated events last.
    """
    events: List[TimelineEvent] = _milestone_events(batch)
    events.extend(_outcome_events(orders, assignments))

    if batch.completed_at is not None:
        events.append(
            TimelineEvent(
                time=batch.completed_at,
                category=EventCategory.COMPLETED,
                title="Batch completed",
                subtitle=f"{batch.total_delivered} delivered, {batch.total_failed} failed",
            )
        )

    events.extend(_pending_events(orders, assignments))

    # sorted() is stable, so equal keys keep insertion order.
    return sorted(events, key=_sort_key)
