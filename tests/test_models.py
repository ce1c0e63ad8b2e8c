import pytest
from datetime import datetime, timezone

from batches.models import (
    Assignment,
    AssignmentStatus,
    Batch,
    BatchStatus,
    DriverSnapshot,
    MealWindow,
    OperatingHours,
    Order,
)


def test_batch_from_populated_record():
    batch = Batch.from_record({
        "_id": "65a1b2c3d4e5f6a7b8c9d0e1",
        "batchNumber": "BATCH-20240101-001",
        "status": "IN_PROGRESS",
        "mealWindow": "LUNCH",
        "kitchenId": {"_id": "k1", "name": "Central Kitchen"},
        "zoneId": {"_id": "z1", "name": "Avondale"},
        "orderIds": ["o1", "o2", "o3"],
        "driverId": {"_id": "d1", "name": "Tendai", "phone": "+263771234567"},
        "createdAt": "2024-01-01T10:00:00Z",
        "dispatchedAt": "2024-01-01T12:00:00Z",
        "routeOptimization": {"algorithm": "two_opt", "optimizedAt": "2024-01-01T11:00:00Z", "totalDistanceMeters": 8400},
        "assignmentStrategy": {"mode": "AUTO_ASSIGN", "assignedScore": 87.5},
        "totalDelivered": 1,
        "totalFailed": 1,
    })

    assert batch.status == BatchStatus.IN_PROGRESS
    assert batch.meal_window == MealWindow.LUNCH
    assert batch.kitchen.name == "Central Kitchen"
    assert batch.driver.phone == "+263771234567"
    assert batch.order_count == 3
    assert batch.pending_count == 1
    assert batch.created_at == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)
    assert batch.route.total_distance_meters == 8400.0
    assert batch.assignment.assigned_score == 87.5


def test_batch_accepts_bare_id_references():
    batch = Batch.from_record({"_id": "b1", "kitchenId": "k1", "driverId": "d1", "status": "COLLECTING"})

    assert batch.kitchen.id == "k1"
    assert batch.kitchen.name is None
    assert batch.driver.id == "d1"


def test_batch_counters_are_clamped_to_order_count():
    batch = Batch.from_record({"_id": "b1", "orderIds": ["o1", "o2"], "totalDelivered": 2, "totalFailed": 5})

    assert batch.total_delivered == 2
    assert batch.total_failed == 0
    assert batch.total_delivered + batch.total_failed <= batch.order_count


def test_batch_with_unknown_status_or_bad_dates_degrades():
    batch = Batch.from_record({"_id": "b1", "status": "ARCHIVED", "createdAt": "yesterday", "totalDelivered": "x"})

    assert batch.status is None
    assert batch.created_at is None
    assert batch.total_delivered == 0


def test_batch_status_terminal_flag():
    assert BatchStatus.COMPLETED.is_terminal
    assert BatchStatus.PARTIAL_COMPLETE.is_terminal
    assert BatchStatus.CANCELLED.is_terminal
    assert not BatchStatus.IN_PROGRESS.is_terminal


def test_order_display_number_falls_back_to_id_suffix():
    with_number = Order.from_record({"_id": "65a1b2c3d4e5f6a7b8c9d0e1", "orderNumber": "ORD-1001"})
    without_number = Order.from_record({"_id": "65a1b2c3d4e5f6a7b8c9d0e1"})

    assert with_number.display_number == "ORD-1001"
    assert without_number.display_number == "c9d0e1"


def test_order_reads_contact_and_batch_link():
    order = Order.from_record({
        "_id": "o1",
        "status": "ready",
        "mealWindow": "DINNER",
        "batchId": {"_id": "b1"},
        "deliveryAddress": {"contactName": "Rudo", "contactPhone": "+263"},
    })

    assert order.status == "READY"
    assert order.meal_window == MealWindow.DINNER
    assert order.batch_id == "b1"
    assert order.contact_name == "Rudo"


def test_assignment_keeps_only_the_timestamp_matching_its_status():
    delivered = Assignment.from_record({
        "orderId": "o1",
        "status": "DELIVERED",
        "deliveredAt": "2024-01-01T12:30:00Z",
        "failedAt": "2024-01-01T12:31:00Z",
    })
    en_route = Assignment.from_record({"orderId": "o2", "status": "EN_ROUTE", "deliveredAt": "2024-01-01T12:30:00Z"})

    assert delivered.delivered_at is not None
    assert delivered.failed_at is None
    assert en_route.delivered_at is None
    assert not en_route.is_settled


def test_assignment_without_status_prefers_delivered():
    assignment = Assignment.from_record({
        "orderId": "o1",
        "deliveredAt": "2024-01-01T12:30:00Z",
        "failedAt": "2024-01-01T12:31:00Z",
    })

    assert assignment.status is None
    assert assignment.delivered_at is not None
    assert assignment.failed_at is None


def test_assignment_sequence_and_eta():
    assignment = Assignment.from_record({
        "orderId": {"_id": "o1"},
        "status": "EN_ROUTE",
        "sequence": {"sequenceNumber": 2},
        "etaTracking": {"currentEtaSeconds": 540, "distanceRemainingMeters": 1200, "etaStatus": "LATE"},
    })

    assert assignment.order_id == "o1"
    assert assignment.status == AssignmentStatus.EN_ROUTE
    assert assignment.sequence_number == 2
    assert assignment.eta.eta_seconds == 540.0
    assert assignment.eta.eta_status == "LATE"


def test_driver_snapshot_and_operating_hours():
    driver = DriverSnapshot.from_record({"driverId": "d1", "name": "Tendai", "updatedAt": "2024-01-01T12:00:00Z"})
    hours = OperatingHours.from_record({"lunch": {"endTime": "14:00"}})

    assert driver.driver_id == "d1"
    assert driver.updated_at is not None
    assert hours.end_time(MealWindow.LUNCH) == "14:00"
    assert hours.end_time(MealWindow.DINNER) is None
    assert OperatingHours.from_record(None) is None


def test_counters_are_clamped_when_batch_has_no_orders():
    for record in ({"_id": "b1", "orderIds": [], "totalDelivered": 3, "totalFailed": 2}, {"_id": "b2", "totalDelivered": 1}):
        batch = Batch.from_record(record)

        assert (batch.total_delivered, batch.total_failed) == (0, 0)
        assert batch.pending_count == 0


@pytest.mark.parametrize("raw", ["NaN", "inf", "-Infinity", float("nan"), 10 ** 400])
def test_non_finite_numbers_are_treated_as_missing(raw):
    batch = Batch.from_record({
        "_id": "b1",
        "orderIds": ["o1", "o2"],
        "totalDelivered": raw,
        "totalFailed": raw,
        "routeOptimization": {"totalDurationSeconds": raw, "totalDistanceMeters": raw},
    })
    assignment = Assignment.from_record({
        "orderId": "o1",
        "sequence": {"sequenceNumber": raw},
        "etaTracking": {"etaSeconds": raw, "distanceRemainingMeters": raw},
    })

    assert (batch.total_delivered, batch.total_failed) == (0, 0)
    assert batch.route.total_duration_seconds is None
    assert batch.route.total_distance_meters is None
    assert assignment.sequence_number is None
    assert assignment.eta.eta_seconds is None
    assert assignment.eta.distance_remaining_meters is None
