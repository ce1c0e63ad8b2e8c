import json
import uuid
from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd

STATUSES = [
    "COLLECTING",
    "READY_FOR_DISPATCH",
    "DISPATCHED",
    "IN_PROGRESS",
    "COMPLETED",
    "PARTIAL_COMPLETE",
    "CANCELLED",
]
STATUS_WEIGHTS = [0.25, 0.1, 0.1, 0.15, 0.25, 0.05, 0.1]

MILESTONES_BY_STATUS = {
    "COLLECTING": 0,
    "READY_FOR_DISPATCH": 1,
    "DISPATCHED": 2,
    "IN_PROGRESS": 4,
    "COMPLETED": 5,
    "PARTIAL_COMPLETE": 5,
    "CANCELLED": 0,
}

CONTACTS = ["Tariro", "Farai", "Nyasha", "Tendai", "Rudo", "Kuda", "Chipo", "Tafadzwa"]


def _iso(instant):
    return instant.isoformat().replace("+00:00", "Z")


def generate_mock_batches(num_batches=40, output_file="mock_batches.json", seed=None):
    """
    Generates one day of batches for a single kitchen, with their orders and
    assignments, in the same shape the dispatch backend returns.
    Milestones are filled progressively according to each batch's status so
    the timeline and stats have something realistic to chew on.
    """
    rng = np.random.default_rng(seed)
    day_start = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    kitchen = {"_id": f"k_{str(uuid.uuid4())[:8]}", "name": "Central Kitchen"}
    zones = [{"_id": f"z_{i}", "name": f"Zone {i + 1}"} for i in range(4)]

    batches, orders, assignments = [], [], []

    for batch_index in range(num_batches):
        status = str(rng.choice(STATUSES, p=STATUS_WEIGHTS))
        meal_window = str(rng.choice(["LUNCH", "DINNER"]))
        base_hour = 10 if meal_window == "LUNCH" else 17
        created_at = day_start + timedelta(hours=base_hour, minutes=int(rng.integers(0, 120)))
        batch_id = f"b_{str(batch_index + 1).zfill(4)}"

        order_count = int(rng.integers(2, 7))
        order_ids = []
        for _ in range(order_count):
            order_id = f"o_{uuid.uuid4().hex[:12]}"
            order_ids.append(order_id)
            orders.append({
                "_id": order_id,
                "orderNumber": f"ORD-{int(rng.integers(10000, 99999))}",
                "status": "OUT_FOR_DELIVERY" if status != "COLLECTING" else "READY",
                "mealWindow": meal_window,
                "batchId": batch_id,
                "deliveryAddress": {"contactName": str(rng.choice(CONTACTS))},
            })

        batch = {
            "_id": batch_id,
            "batchNumber": f"BATCH-{day_start:%Y%m%d}-{batch_index + 1:03d}",
            "status": status,
            "mealWindow": meal_window,
            "kitchenId": kitchen,
            "zoneId": zones[int(rng.integers(0, len(zones)))],
            "orderIds": order_ids,
            "createdAt": _iso(created_at),
            "totalDelivered": 0,
            "totalFailed": 0,
        }

        stage = MILESTONES_BY_STATUS[status]
        cursor = created_at
        if stage >= 1:
            cursor += timedelta(minutes=int(rng.integers(5, 30)))
            batch["routeOptimization"] = {
                "algorithm": "nearest_neighbor",
                "optimizedAt": _iso(cursor),
                "totalDistanceMeters": float(np.round(rng.uniform(3000, 18000), 0)),
                "totalDurationSeconds": float(np.round(rng.uniform(900, 3600), 0)),
                "improvementPercent": float(np.round(rng.uniform(5, 30), 1)),
            }
        if stage >= 2:
            cursor += timedelta(minutes=int(rng.integers(5, 20)))
            batch["dispatchedAt"] = _iso(cursor)
            batch["assignmentStrategy"] = {
                "mode": str(rng.choice(["AUTO_ASSIGN", "BROADCAST", "MANUAL"])),
                "assignedScore": float(np.round(rng.uniform(50, 100), 1)),
            }
            batch["driverId"] = {"_id": f"d_{int(rng.integers(1, 30))}", "name": "Driver", "phone": "+263770000000"}
            cursor += timedelta(minutes=int(rng.integers(1, 10)))
            batch["driverAssignedAt"] = _iso(cursor)
        if stage >= 4:
            cursor += timedelta(minutes=int(rng.integers(5, 20)))
            batch["pickedUpAt"] = _iso(cursor)

            for sequence, order_id in enumerate(order_ids, start=1):
                cursor += timedelta(minutes=int(rng.integers(3, 15)))
                assignment = {
                    "orderId": order_id,
                    "status": "EN_ROUTE",
                    "sequence": {"sequenceNumber": sequence},
                    "etaTracking": {"etaStatus": str(rng.choice(["EARLY", "ON_TIME", "LATE", "CRITICAL"]))},
                }
                settled = status in ("COMPLETED", "PARTIAL_COMPLETE") or rng.random() < 0.5
                if settled:
                    failed = status == "PARTIAL_COMPLETE" and rng.random() < 0.4
                    if failed:
                        assignment.update(status="FAILED", failedAt=_iso(cursor), failureReason="Customer unreachable")
                        batch["totalFailed"] += 1
                    else:
                        assignment.update(status="DELIVERED", deliveredAt=_iso(cursor))
                        batch["totalDelivered"] += 1
                assignments.append(assignment)

        if stage >= 5:
            batch["completedAt"] = _iso(cursor + timedelta(minutes=2))

        batches.append(batch)

    # A handful of unbatched orders waiting for the next auto-batch run
    for _ in range(int(rng.integers(3, 12))):
        orders.append({
            "_id": f"o_{uuid.uuid4().hex[:12]}",
            "orderNumber": f"ORD-{int(rng.integers(10000, 99999))}",
            "status": str(rng.choice(["PLACED", "ACCEPTED", "PREPARING", "READY"])),
            "mealWindow": str(rng.choice(["LUNCH", "DINNER"])),
            "deliveryAddress": {"contactName": str(rng.choice(CONTACTS))},
        })

    payload = {
        "kitchen": {**kitchen, "operatingHours": {"lunch": {"endTime": "13:00"}, "dinner": {"endTime": "20:00"}}},
        "batches": batches,
        "orders": orders,
        "assignments": assignments,
    }
    with open(output_file, "w") as f:
        json.dump(payload, f, indent=2)

    print(f"✅ Generated {num_batches} batches and {len(orders)} orders and saved to '{output_file}'")

    # Print a quick preview of the status mix
    df = pd.DataFrame(batches)
    print("\nBatches by meal window / status:")
    counts = df.groupby(["mealWindow", "status"]).size()
    for (window, status), count in counts.items():
        print(f"  {window:<6} {status:<18} {count}")


if __name__ == "__main__":
    generate_mock_batches(num_batches=40)
