"""
Purpose: Small display helpers shared by batch cards, detail and tracking views.
What it does:
- status_badge: label + colors for a batch status (neutral grey when unknown)
- describe_route: one-line route summary from upstream optimization metadata
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .models import BatchStatus, RouteOptimization


@dataclass(frozen=True)
class StatusBadge:
    label: str
    background: str
    foreground: str


STATUS_BADGES: Dict[BatchStatus, StatusBadge] = {
    BatchStatus.COLLECTING: StatusBadge("Collecting", "#dbeafe", "#1d4ed8"),
    BatchStatus.READY_FOR_DISPATCH: StatusBadge("Ready", "#fed7aa", "#c2410c"),
    BatchStatus.DISPATCHED: StatusBadge("Dispatched", "#ccfbf1", "#0d9488"),
    BatchStatus.IN_PROGRESS: StatusBadge("In Progress", "#e9d5ff", "#7c3aed"),
    BatchStatus.COMPLETED: StatusBadge("Completed", "#dcfce7", "#16a34a"),
    BatchStatus.PARTIAL_COMPLETE: StatusBadge("Partial", "#fef9c3", "#a16207"),
    BatchStatus.CANCELLED: StatusBadge("Cancelled", "#fee2e2", "#dc2626"),
}


def status_badge(status: Any) -> StatusBadge:
    parsed = BatchStatus.parse(status)
    if parsed is not None:
        return STATUS_BADGES[parsed]
    label = status if isinstance(status, str) and status else "Unknown"
    return StatusBadge(label, "#f3f4f6", "#6b7280")


def describe_route(route: Optional[RouteOptimization]) -> Optional[str]:
    """
    e.g. "nearest_neighbor · 12.4 km · ~38 min · 17% optimized".
    Parts the routing engine did not report are left out.
    """
    if route is None:
        return None

    parts: List[str] = [route.algorithm or "route"]
    if route.total_distance_meters is not None:
        parts.append(f"{route.total_distance_meters / 1000:.1f} km")
    if route.total_duration_seconds is not None:
        parts.append(f"~{int(route.total_duration_seconds / 60 + 0.5)} min")
    if route.improvement_percent is not None:
        improvement = route.improvement_percent
        shown = int(improvement) if float(improvement).is_integer() else improvement
        parts.append(f"{shown}% optimized")
    return " · ".join(parts)
