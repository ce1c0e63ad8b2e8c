"""
Stats subpackage.

Public API:
- aggregate_batch_stats
- BatchStats, DeliveryPerformance
- success_rate
- day_bounds, batches_in_range, count_by_meal_window
"""

from .aggregator import (
    BatchStats,
    DeliveryPerformance,
    aggregate_batch_stats,
    batches_in_range,
    count_by_meal_window,
    day_bounds,
    success_rate,
)

__all__ = [
    "BatchStats",
    "DeliveryPerformance",
    "aggregate_batch_stats",
    "batches_in_range",
    "count_by_meal_window",
    "day_bounds",
    "success_rate",
]
