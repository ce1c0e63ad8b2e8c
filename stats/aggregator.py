"""
Purpose: Dashboard counts for one kitchen / meal window.
What it does:

Reduces a day's batches and the kitchen's orders into:
- available_for_batching: orders in the window, batchable status, no batch yet
- ready_to_dispatch: COLLECTING batches in the window
- status_counts: one bucket per BatchStatus (zero-filled) + total
- performance (authority roles only): totals, success rate, avg deliveries per batch

Status counts come from a single pass frequency map. Every batch in the
window with a recognised status lands in exactly one bucket, so
sum(status_counts) == total always holds.

Rule: Pure computation over snapshots. Division by zero degrades to 0.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from batches.models import Batch, BatchStatus, MealWindow, Order
from dispatch.policy import DispatchPolicy, default_policy


def round_half_up(value: float, digits: int = 0) -> float:
    """Half-up rounding (2.5 -> 3), unlike Python's round-half-even."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def success_rate(total: int, success: int) -> int:
    """
    Whole-number success percentage. A zero (or negative) total gives 0.
    """
    if not total or total <= 0:
        return 0
    return int(round_half_up(success / total * 100))


@dataclass(frozen=True)
class DeliveryPerformance:
    total_orders: int
    successful_deliveries: int
    failed_deliveries: int
    success_rate: int
    avg_deliveries_per_batch: float


@dataclass(frozen=True)
class BatchStats:
    meal_window: MealWindow
    available_for_batching: int
    ready_to_dispatch: int
    status_counts: Dict[BatchStatus, int] = field(default_factory=dict)
    total: int = 0
    performance: Optional[DeliveryPerformance] = None

    def count(self, status: BatchStatus) -> int:
        return self.status_counts.get(status, 0)

    def status_shares(self) -> Dict[BatchStatus, int]:
        """
        Whole percent of the window's total per status (0 when there are no batches).
        """
        return {status: success_rate(self.total, count) for status, count in self.status_counts.items()}

    def as_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {status.value: count for status, count in self.status_counts.items()}
        out["total"] = self.total
        out["availableForBatching"] = self.available_for_batching
        out["readyToDispatch"] = self.ready_to_dispatch
        if self.performance is not None:
            out["performance"] = {
                "totalOrders": self.performance.total_orders,
                "successfulDeliveries": self.performance.successful_deliveries,
                "failedDeliveries": self.performance.failed_deliveries,
                "successRate": self.performance.success_rate,
                "avgDeliveriesPerBatch": self.performance.avg_deliveries_per_batch,
            }
        return out


# --- Date bounding ---

def day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """
    [midnight, next midnight) of the day containing `now`, in now's own timezone.
    """
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def _aware(instant: datetime) -> datetime:
    return instant if instant.tzinfo is not None else instant.replace(tzinfo=timezone.utc)


def batches_in_range(batches: Iterable[Batch], start: datetime, end: datetime) -> List[Batch]:
    """
    Batches created in [start, end). Batches with no creation time are left out.
    """
    start, end = _aware(start), _aware(end)
    return [b for b in batches if b.created_at is not None and start <= b.created_at < end]


# --- Counting ---

def count_by_meal_window(batches: Iterable[Batch]) -> Dict[MealWindow, int]:
    counts = Counter(b.meal_window for b in batches if b.meal_window is not None)
    return {window: counts.get(window, 0) for window in MealWindow}


def count_available_for_batching(
    orders: Iterable[Order],
    meal_window: MealWindow,
    policy: Optional[DispatchPolicy] = None,
) -> int:
    policy = policy or default_policy()
    return sum(
        1
        for o in orders
        if o.meal_window == meal_window
        and o.status in policy.batchable_order_statuses
        and not o.batch_id
    )


def delivery_performance(batches: Sequence[Batch]) -> DeliveryPerformance:
    total_orders = sum(b.order_count for b in batches)
    delivered = sum(b.total_delivered for b in batches)
    failed = sum(b.total_failed for b in batches)
    avg = round_half_up(delivered / len(batches), 1) if batches else 0.0
    return DeliveryPerformance(
        total_orders=total_orders,
        successful_deliveries=delivered,
        failed_deliveries=failed,
        success_rate=success_rate(total_orders, delivered),
        avg_deliveries_per_batch=avg,
    )


def aggregate_batch_stats(
    batches: Iterable[Batch],
    orders: Iterable[Order],
    meal_window: Union[MealWindow, str],
    *,
    role: Optional[str] = None,
    policy: Optional[DispatchPolicy] = None,
) -> BatchStats:
    """
    Main stats entry point.

    Parameters
    ----------
    batches:
        The (already date-bounded) batches of one kitchen.
    orders:
        The kitchen's orders, used for the "available for batching" count.
    meal_window:
        LUNCH or DINNER; everything is filtered to it.
    role:
        Caller's role. The performance block is only computed for authority roles.
    """
    policy = policy or default_policy()
    window = MealWindow.parse(meal_window)
    if window is None:
        raise ValueError(f"Unknown meal window: {meal_window!r}")

    in_window = [b for b in batches if b.meal_window == window and b.status is not None]

    frequency = Counter(b.status for b in in_window)
    status_counts = {status: frequency.get(status, 0) for status in BatchStatus}

    performance = None
    if role is not None and role.upper() in policy.authority_roles:
        performance = delivery_performance(in_window)

    return BatchStats(
        meal_window=window,
        available_for_batching=count_available_for_batching(orders, window, policy),
        ready_to_dispatch=status_counts[BatchStatus.COLLECTING],
        status_counts=status_counts,
        total=len(in_window),
        performance=performance,
    )
