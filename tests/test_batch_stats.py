import pytest
import random
from datetime import datetime, timedelta, timezone

from batches.models import Batch, BatchStatus, MealWindow, Order
from stats.aggregator import (
    aggregate_batch_stats,
    batches_in_range,
    count_by_meal_window,
    day_bounds,
    success_rate,
)


def make_batch(index, status, window="LUNCH", orders=3, delivered=0, failed=0, created_at="2024-01-01T10:00:00Z"):
    return Batch.from_record({
        "_id": f"b{index}",
        "status": status,
        "mealWindow": window,
        "orderIds": [f"b{index}-o{i}" for i in range(orders)],
        "totalDelivered": delivered,
        "totalFailed": failed,
        "createdAt": created_at,
    })


@pytest.fixture
def scenario_c():
    statuses = ["COMPLETED"] * 3 + ["CANCELLED"] * 2 + ["COLLECTING"] * 5
    return [make_batch(i, s) for i, s in enumerate(statuses)]


def test_scenario_status_counts(scenario_c):
    stats = aggregate_batch_stats(scenario_c, [], "LUNCH")

    assert stats.count(BatchStatus.COLLECTING) == 5
    assert stats.count(BatchStatus.COMPLETED) == 3
    assert stats.count(BatchStatus.CANCELLED) == 2
    for status in (BatchStatus.READY_FOR_DISPATCH, BatchStatus.DISPATCHED, BatchStatus.IN_PROGRESS, BatchStatus.PARTIAL_COMPLETE):
        assert stats.count(status) == 0
    assert stats.total == 10
    assert stats.ready_to_dispatch == 5
    assert stats.performance is None


def test_status_counts_always_sum_to_total():
    """
    Random mixes of statuses and windows, including unknown statuses and
    batches with no meal window: the seven buckets always add up.
    """
    rng = random.Random(42)
    statuses = [s.value for s in BatchStatus] + ["ARCHIVED", None]
    windows = ["LUNCH", "DINNER", None]

    for _ in range(50):
        batches = [make_batch(i, rng.choice(statuses), rng.choice(windows)) for i in range(rng.randint(0, 40))]
        for window in MealWindow:
            stats = aggregate_batch_stats(batches, [], window)
            assert sum(stats.status_counts.values()) == stats.total
            assert set(stats.status_counts) == set(BatchStatus)


def test_counts_are_filtered_to_the_meal_window():
    batches = [make_batch(1, "COLLECTING", "LUNCH"), make_batch(2, "COLLECTING", "DINNER"), make_batch(3, "DISPATCHED", "DINNER")]

    lunch = aggregate_batch_stats(batches, [], MealWindow.LUNCH)
    dinner = aggregate_batch_stats(batches, [], MealWindow.DINNER)

    assert (lunch.total, lunch.ready_to_dispatch) == (1, 1)
    assert (dinner.total, dinner.ready_to_dispatch) == (2, 1)


def test_available_for_batching():
    orders = [
        Order.from_record({"_id": "o1", "status": "PLACED", "mealWindow": "LUNCH"}),
        Order.from_record({"_id": "o2", "status": "READY", "mealWindow": "LUNCH"}),
        Order.from_record({"_id": "o3", "status": "READY", "mealWindow": "LUNCH", "batchId": "b1"}),
        Order.from_record({"_id": "o4", "status": "DELIVERED", "mealWindow": "LUNCH"}),
        Order.from_record({"_id": "o5", "status": "PREPARING", "mealWindow": "DINNER"}),
    ]

    stats = aggregate_batch_stats([], orders, "LUNCH")

    assert stats.available_for_batching == 2


def test_performance_block_only_for_authority_roles():
    batches = [
        make_batch(1, "COMPLETED", orders=4, delivered=4),
        make_batch(2, "PARTIAL_COMPLETE", orders=4, delivered=3, failed=1),
        make_batch(3, "IN_PROGRESS", orders=2, delivered=0),
    ]

    kitchen_staff = aggregate_batch_stats(batches, [], "LUNCH", role="KITCHEN_STAFF")
    admin = aggregate_batch_stats(batches, [], "LUNCH", role="admin")

    assert kitchen_staff.performance is None
    p = admin.performance
    assert p.total_orders == 10
    assert p.successful_deliveries == 7
    assert p.failed_deliveries == 1
    assert p.success_rate == 70
    assert p.avg_deliveries_per_batch == 2.3


def test_performance_with_no_batches_does_not_divide_by_zero():
    stats = aggregate_batch_stats([], [], "DINNER", role="ADMIN")

    assert stats.total == 0
    assert stats.performance.success_rate == 0
    assert stats.performance.avg_deliveries_per_batch == 0.0
    assert all(share == 0 for share in stats.status_shares().values())


def test_success_rate():
    assert success_rate(0, 0) == 0
    assert success_rate(10, 10) == 100
    assert success_rate(3, 1) == 33
    assert success_rate(8, 5) == 63  # 62.5 rounds half up


def test_status_shares_and_as_dict(scenario_c):
    stats = aggregate_batch_stats(scenario_c, [], "LUNCH")

    assert stats.status_shares()[BatchStatus.COLLECTING] == 50
    assert stats.as_dict()["COLLECTING"] == 5
    assert stats.as_dict()["total"] == 10


def test_unknown_meal_window_is_rejected():
    with pytest.raises(ValueError):
        aggregate_batch_stats([], [], "BREAKFAST")


def test_day_bounds_and_range_filter():
    now = datetime(2024, 1, 1, 15, 30, tzinfo=timezone.utc)
    start, end = day_bounds(now)

    assert start == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert end - start == timedelta(days=1)

    batches = [
        make_batch(1, "COLLECTING", created_at="2023-12-31T23:59:00Z"),
        make_batch(2, "COLLECTING", created_at="2024-01-01T00:00:00Z"),
        make_batch(3, "COLLECTING", created_at="2024-01-01T23:59:59Z"),
        make_batch(4, "COLLECTING", created_at="2024-01-02T00:00:00Z"),
        make_batch(5, "COLLECTING", created_at=None),
    ]
    assert [b.id for b in batches_in_range(batches, start, end)] == ["b2", "b3"]


def test_count_by_meal_window():
    batches = [make_batch(1, "COLLECTING", "LUNCH"), make_batch(2, "COMPLETED", "LUNCH"), make_batch(3, "COMPLETED", None)]

    assert count_by_meal_window(batches) == {MealWindow.LUNCH: 2, MealWindow.DINNER: 0}


def test_success_rate_never_exceeds_100_with_orderless_batches():
    batches = [
        make_batch(1, "COMPLETED", orders=1, delivered=1),
        make_batch(2, "COMPLETED", orders=0, delivered=3, failed=2),
    ]

    p = aggregate_batch_stats(batches, [], "LUNCH", role="ADMIN").performance

    assert (p.total_orders, p.successful_deliveries, p.failed_deliveries) == (1, 1, 0)
    assert p.success_rate == 100
    assert p.avg_deliveries_per_batch == 0.5
