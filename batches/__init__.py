"""
Batches domain package.

Public API:
- Domain models: Batch, Order, Assignment, DriverSnapshot, OperatingHours,
  BatchStatus, AssignmentStatus, MealWindow
- Time fields: resolve_time, format_clock
- Timeline: build_timeline, TimelineEvent, EventCategory
"""
from .models import (
    Assignment,
    AssignmentStatus,
    Batch,
    BatchDetail,
    BatchStatus,
    DriverSnapshot,
    MealWindow,
    OperatingHours,
    Order,
)
from .timefields import format_clock, resolve_time
from .timeline import EventCategory, TimelineEvent, build_timeline

__all__ = [
    "Assignment",
    "AssignmentStatus",
    "Batch",
    "BatchDetail",
    "BatchStatus",
    "DriverSnapshot",
    "MealWindow",
    "OperatingHours",
    "Order",
    "format_clock",
    "resolve_time",
    "EventCategory",
    "TimelineEvent",
    "build_timeline",
]
