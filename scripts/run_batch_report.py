import argparse
import json
import os
from collections import defaultdict
from datetime import datetime
from typing import Dict, List

import pandas as pd

from batches.display import describe_route, status_badge
from batches.models import Assignment, Batch, MealWindow, OperatingHours, Order
from batches.timeline import build_timeline
from dispatch.policy import default_policy
from dispatch.window import evaluate_window
from stats.aggregator import aggregate_batch_stats, batches_in_range, day_bounds
from tracking.progress import summarize_progress


def load_snapshot(filepath="mock_batches.json"):
    # Resolve the correct path depending on where the user runs the script from.
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    absolute_path = filepath if os.path.isabs(filepath) else os.path.join(base_dir, filepath)

    with open(absolute_path, "r") as file:
        payload = json.load(file)

    batches = [Batch.from_record(b) for b in payload.get("batches", [])]
    orders = [Order.from_record(o) for o in payload.get("orders", [])]
    assignments = [Assignment.from_record(a) for a in payload.get("assignments", [])]
    hours = OperatingHours.from_record((payload.get("kitchen") or {}).get("operatingHours"))
    return batches, orders, assignments, hours


def run_report(filepath="mock_batches.json", timelines=3, output="batch_report.csv", now=None):
    print("=== BATCH REPORT ===")

    batches, orders, assignments, hours = load_snapshot(filepath)
    # kitchen cutoffs are local wall-clock times
    now = now or datetime.now().astimezone()
    policy = default_policy()
    start, end = day_bounds(now)
    todays = batches_in_range(batches, start, end)
    print(f"Loaded {len(batches)} Batches ({len(todays)} today), {len(orders)} Orders, {len(assignments)} Assignments.\n")

    # 1. Dispatch windows
    for window in MealWindow:
        result = evaluate_window(window, hours, now, policy=policy)
        state = "ELIGIBLE" if result.eligible else f"in {result.time_remaining}"
        print(f"{window.value:<6} cutoff {result.formatted_cutoff:<9} -> dispatch {state}")

    # 2. Dashboard stats
    for window in MealWindow:
        stats = aggregate_batch_stats(todays, orders, window, role="ADMIN", policy=policy)
        print(f"\n--- {window.value} Statistics ---")
        print(f"  Available for batching: {stats.available_for_batching}")
        print(f"  Ready to dispatch:      {stats.ready_to_dispatch}")
        for status, count in stats.status_counts.items():
            print(f"  {status_badge(status).label:<12} {count}")
        print(f"  {'Total':<12} {stats.total}")
        if stats.performance:
            p = stats.performance
            print(f"  Success {p.success_rate}% ({p.successful_deliveries}/{p.total_orders}), "
                  f"avg {p.avg_deliveries_per_batch:.1f} per batch")

    # 3. A few timelines
    orders_by_batch: Dict[str, List[Order]] = defaultdict(list)
    for order in orders:
        if order.batch_id:
            orders_by_batch[order.batch_id].append(order)
    order_to_batch = {order.id: order.batch_id for order in orders}
    assignments_by_batch: Dict[str, List[Assignment]] = defaultdict(list)
    for assignment in assignments:
        assignments_by_batch[order_to_batch.get(assignment.order_id)].append(assignment)

    for batch in todays[:timelines]:
        print(f"\n--- Timeline {batch.batch_number} ({status_badge(batch.status).label}) ---")
        route = describe_route(batch.route)
        if route:
            print(f"  Route: {route}")
        for event in build_timeline(batch, orders_by_batch[batch.id], assignments_by_batch[batch.id]):
            subtitle = f"  ({event.subtitle})" if event.subtitle else ""
            print(f"  {event.display_time(tz=now.tzinfo, placeholder=policy.time_placeholder):>8}  {event.title}{subtitle}")

    # 4. Per-batch summary CSV
    rows = []
    for batch in todays:
        progress = summarize_progress(batch, assignments_by_batch[batch.id])
        rows.append({
            "batch_number": batch.batch_number,
            "meal_window": batch.meal_window.value if batch.meal_window else None,
            "status": batch.status.value if batch.status else None,
            "orders": progress.total_orders,
            "delivered": progress.delivered,
            "failed": progress.failed,
            "remaining": progress.remaining,
            "route": describe_route(batch.route),
        })
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    output_path = os.path.join(base_dir, output)
    pd.DataFrame(rows).to_csv(output_path, index=False)

    print("\n=== REPORT COMPLETE ===")
    print(f"Results written to '{output}'.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print dashboard stats and timelines for a batch snapshot file.")
    parser.add_argument("--input", default="mock_batches.json")
    parser.add_argument("--timelines", type=int, default=3)
    parser.add_argument("--output", default="batch_report.csv")
    args = parser.parse_args()
    run_report(args.input, args.timelines, args.output)
