"""
Purpose: Domain models for the Batches capability.
What it does:
- Defines core data structures read from the upstream dispatch backend:
- Batch (identity, status, meal window, milestones, counters, route/assignment metadata)
- Order (id, order number, status, meal window, delivery contact)
- Assignment (order <-> driver run linkage, delivery outcome, ETA tracking)
- DriverSnapshot (latest known driver status, overwritten on every ping)
- OperatingHours (per-kitchen meal window end times)

Defines enums/constants:
- BatchStatus = COLLECTING | READY_FOR_DISPATCH | DISPATCHED | IN_PROGRESS | COMPLETED | PARTIAL_COMPLETE | CANCELLED
- AssignmentStatus = ASSIGNED | EN_ROUTE | ARRIVED | DELIVERED | FAILED
- MealWindow = LUNCH | DINNER

Every model is built from a loosely-typed dict record via from_record().
Raw untyped values stop here; timestamps go through timefields.resolve_time.

Rule: No derived state here (timeline, stats, eligibility). Models only.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .timefields import resolve_time

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]


class BatchStatus(str, Enum):
    COLLECTING = "COLLECTING"
    READY_FOR_DISPATCH = "READY_FOR_DISPATCH"
    DISPATCHED = "DISPATCHED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    PARTIAL_COMPLETE = "PARTIAL_COMPLETE"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, raw: Any) -> Optional[BatchStatus]:
        return _parse_enum(cls, raw)

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {BatchStatus.COMPLETED, BatchStatus.PARTIAL_COMPLETE, BatchStatus.CANCELLED}
)


class AssignmentStatus(str, Enum):
    ASSIGNED = "ASSIGNED"
    EN_ROUTE = "EN_ROUTE"
    ARRIVED = "ARRIVED"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"

    @classmethod
    def parse(cls, raw: Any) -> Optional[AssignmentStatus]:
        return _parse_enum(cls, raw)


class MealWindow(str, Enum):
    LUNCH = "LUNCH"
    DINNER = "DINNER"

    @classmethod
    def parse(cls, raw: Any) -> Optional[MealWindow]:
        return _parse_enum(cls, raw)


# ----------------
# Record helpers
# ----------------

def _parse_enum(enum_cls, raw: Any):
    if isinstance(raw, enum_cls):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return enum_cls(raw.strip().upper())
    except ValueError:
        logger.debug("Unknown %s value %r", enum_cls.__name__, raw)
        return None


def _get(record: Any, key: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        value = record.get(key, default)
        return default if value is None else value
    return default


def _record_id(record: Any) -> Optional[str]:
    """Upstream ids arrive as '_id' or 'id', or the record is a bare id string."""
    if isinstance(record, str):
        return record or None
    raw = _get(record, "_id", _get(record, "id"))
    return str(raw) if raw is not None else None


def _as_str(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def _as_float(raw: Any) -> Optional[float]:
    """Finite float or None ("NaN", "inf" and overflowing ints count as missing)."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def _as_int(raw: Any, default: int = 0) -> int:
    value = _as_float(raw)
    if value is None:
        return default
    return int(value)


# ----------------
# Value objects
# ----------------

@dataclass(frozen=True)
class NamedRef:
    """A populated reference (kitchen, zone): id plus display name."""
    id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_record(cls, record: Any) -> Optional[NamedRef]:
        if record is None:
            return None
        ref = cls(id=_record_id(record), name=_as_str(_get(record, "name")))
        if ref.id is None and ref.name is None:
            return None
        return ref


@dataclass(frozen=True)
class DriverRef:
    id: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_record(cls, record: Any) -> Optional[DriverRef]:
        if not record:
            return None
        return cls(
            id=_record_id(record),
            name=_as_str(_get(record, "name")),
            phone=_as_str(_get(record, "phone")),
        )


@dataclass(frozen=True)
class RouteOptimization:
    """
    Output of the upstream routing engine. Treated as an opaque fact;
    every field is optional until optimization has run.
    """
    algorithm: Optional[str] = None
    optimized_at: Optional[datetime] = None
    total_distance_meters: Optional[float] = None
    total_duration_seconds: Optional[float] = None
    improvement_percent: Optional[float] = None

    @classmethod
    def from_record(cls, record: Any) -> Optional[RouteOptimization]:
        if not isinstance(record, Mapping):
            return None
        return cls(
            algorithm=_as_str(record.get("algorithm")),
            optimized_at=resolve_time(record.get("optimizedAt")),
            total_distance_meters=_as_float(record.get("totalDistanceMeters")),
            total_duration_seconds=_as_float(record.get("totalDurationSeconds")),
            improvement_percent=_as_float(record.get("improvementPercent")),
        )


@dataclass(frozen=True)
class AssignmentStrategy:
    """Output of the upstream driver-assignment engine (higher score = better fit)."""
    mode: Optional[str] = None
    assigned_score: Optional[float] = None
    manual_reason: Optional[str] = None
    broadcast_driver_ids: Tuple[str, ...] = ()

    @classmethod
    def from_record(cls, record: Any) -> Optional[AssignmentStrategy]:
        if not isinstance(record, Mapping):
            return None
        broadcast = record.get("broadcastList") or record.get("broadcastTo") or []
        return cls(
            mode=_as_str(record.get("mode")),
            assigned_score=_as_float(record.get("assignedScore")),
            manual_reason=_as_str(record.get("manualReason") or record.get("reason")),
            broadcast_driver_ids=tuple(
                rid for rid in (_record_id(item) for item in broadcast) if rid
            ),
        )


@dataclass(frozen=True)
class EtaTracking:
    eta_seconds: Optional[float] = None
    distance_remaining_meters: Optional[float] = None
    eta_status: Optional[str] = None

    @classmethod
    def from_record(cls, record: Any) -> Optional[EtaTracking]:
        if not isinstance(record, Mapping):
            return None
        return cls(
            eta_seconds=_as_float(record.get("currentEtaSeconds", record.get("etaSeconds"))),
            distance_remaining_meters=_as_float(record.get("distanceRemainingMeters")),
            eta_status=_as_str(record.get("etaStatus")),
        )


# ----------------
# Entities
# ----------------

@dataclass(frozen=True)
class Batch:
    """
    A unit of dispatch work: orders from one kitchen, one driver run.

    Status transitions happen upstream; this engine only reads them.
    """
    id: str
    batch_number: Optional[str] = None
    status: Optional[BatchStatus] = None
    meal_window: Optional[MealWindow] = None

    kitchen: Optional[NamedRef] = None
    zone: Optional[NamedRef] = None
    order_ids: Tuple[str, ...] = ()
    driver: Optional[DriverRef] = None

    # Milestones, populated progressively
    created_at: Optional[datetime] = None
    dispatched_at: Optional[datetime] = None
    driver_assigned_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    route: Optional[RouteOptimization] = None
    assignment: Optional[AssignmentStrategy] = None

    # 0 <= total_delivered + total_failed <= len(order_ids)
    total_delivered: int = 0
    total_failed: int = 0

    @property
    def order_count(self) -> int:
        return len(self.order_ids)

    @property
    def pending_count(self) -> int:
        return self.order_count - self.total_delivered - self.total_failed

    @classmethod
    def from_record(cls, record: Record) -> Batch:
        order_ids = tuple(
            oid for oid in (_record_id(item) for item in (_get(record, "orderIds") or [])) if oid
        )
        delivered = max(_as_int(_get(record, "totalDelivered")), 0)
        failed = max(_as_int(_get(record, "totalFailed")), 0)
        delivered = min(delivered, len(order_ids))
        failed = min(failed, len(order_ids) - delivered)

        raw_status = _get(record, "status")
        status = BatchStatus.parse(raw_status)
        if raw_status is not None and status is None:
            logger.warning("Batch %s has unrecognised status %r", _record_id(record), raw_status)

        return cls(
            id=_record_id(record) or "",
            batch_number=_as_str(_get(record, "batchNumber")),
            status=status,
            meal_window=MealWindow.parse(_get(record, "mealWindow")),
            kitchen=NamedRef.from_record(_get(record, "kitchenId", _get(record, "kitchen"))),
            zone=NamedRef.from_record(_get(record, "zoneId", _get(record, "zone"))),
            order_ids=order_ids,
            driver=DriverRef.from_record(_get(record, "driverId", _get(record, "driver"))),
            created_at=resolve_time(_get(record, "createdAt")),
            dispatched_at=resolve_time(_get(record, "dispatchedAt")),
            driver_assigned_at=resolve_time(_get(record, "driverAssignedAt")),
            picked_up_at=resolve_time(_get(record, "pickedUpAt")),
            completed_at=resolve_time(_get(record, "completedAt")),
            route=RouteOptimization.from_record(_get(record, "routeOptimization")),
            assignment=AssignmentStrategy.from_record(_get(record, "assignmentStrategy")),
            total_delivered=delivered,
            total_failed=failed,
        )


@dataclass(frozen=True)
class Order:
    """A delivery target within a batch. Its status is independent of the batch status."""
    id: str
    order_number: Optional[str] = None
    status: Optional[str] = None
    meal_window: Optional[MealWindow] = None
    batch_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    items: Tuple[Dict[str, Any], ...] = ()

    @property
    def display_number(self) -> str:
        """Human order number, falling back to the last 6 characters of the id."""
        return self.order_number or self.id[-6:]

    @classmethod
    def from_record(cls, record: Record) -> Order:
        address = _get(record, "deliveryAddress") or {}
        status = _as_str(_get(record, "status"))
        return cls(
            id=_record_id(record) or "",
            order_number=_as_str(_get(record, "orderNumber")),
            status=status.upper() if status else None,
            meal_window=MealWindow.parse(_get(record, "mealWindow")),
            batch_id=_record_id(_get(record, "batchId")) if _get(record, "batchId") else None,
            contact_name=_as_str(_get(address, "contactName")),
            contact_phone=_as_str(_get(address, "contactPhone")),
            items=tuple(item for item in (_get(record, "items") or []) if isinstance(item, Mapping)),
        )


@dataclass(frozen=True)
class Assignment:
    """
    Links one order to its delivery outcome within a batch.

    At most one of delivered_at / failed_at is set, and only when the
    status is the matching terminal value.
    """
    order_id: str
    status: Optional[AssignmentStatus] = None
    delivered_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    sequence_number: Optional[int] = None
    eta: Optional[EtaTracking] = None

    @property
    def is_settled(self) -> bool:
        return self.delivered_at is not None or self.failed_at is not None

    @classmethod
    def from_record(cls, record: Record) -> Assignment:
        status = AssignmentStatus.parse(_get(record, "status", _get(record, "deliveryStatus")))
        delivered_at = resolve_time(_get(record, "deliveredAt"))
        failed_at = resolve_time(_get(record, "failedAt"))

        if status == AssignmentStatus.DELIVERED:
            failed_at = None
        elif status == AssignmentStatus.FAILED:
            delivered_at = None
        elif status is not None:
            delivered_at = failed_at = None
        elif delivered_at is not None:
            failed_at = None

        sequence = _get(record, "sequence")
        sequence_number = _get(sequence, "sequenceNumber") if isinstance(sequence, Mapping) else None

        return cls(
            order_id=_record_id(_get(record, "orderId")) or "",
            status=status,
            delivered_at=delivered_at,
            failed_at=failed_at,
            failure_reason=_as_str(_get(record, "failureReason")),
            sequence_number=_as_int(sequence_number) if _as_float(sequence_number) is not None else None,
            eta=EtaTracking.from_record(_get(record, "etaTracking")),
        )


@dataclass(frozen=True)
class DriverSnapshot:
    """Latest known position/status of a driver. Never historical."""
    driver_id: Optional[str] = None
    name: Optional[str] = None
    driver_status: Optional[str] = None
    updated_at: Optional[datetime] = None
    location: Optional[Tuple[float, float]] = None

    @classmethod
    def from_record(cls, record: Any) -> Optional[DriverSnapshot]:
        if not isinstance(record, Mapping):
            return None
        lat = _as_float(_get(record, "latitude"))
        lon = _as_float(_get(record, "longitude"))
        return cls(
            driver_id=_record_id(_get(record, "driverId", record)),
            name=_as_str(_get(record, "name")),
            driver_status=_as_str(_get(record, "driverStatus")),
            updated_at=resolve_time(_get(record, "updatedAt")),
            location=(lat, lon) if lat is not None and lon is not None else None,
        )


@dataclass(frozen=True)
class OperatingHours:
    """
    Per-kitchen meal window configuration: {lunch: {endTime}, dinner: {endTime}}.
    End times stay raw "HH:MM" strings; dispatch.window parses them.
    """
    lunch_end: Optional[str] = None
    dinner_end: Optional[str] = None

    def end_time(self, window: MealWindow) -> Optional[str]:
        return self.lunch_end if window == MealWindow.LUNCH else self.dinner_end

    @classmethod
    def from_record(cls, record: Any) -> Optional[OperatingHours]:
        if not isinstance(record, Mapping):
            return None
        return cls(
            lunch_end=_as_str(_get(_get(record, "lunch"), "endTime")),
            dinner_end=_as_str(_get(_get(record, "dinner"), "endTime")),
        )


@dataclass(frozen=True)
class BatchDetail:
    """One batch with its orders and assignments, as read in one snapshot."""
    batch: Batch
    orders: List[Order] = field(default_factory=list)
    assignments: List[Assignment] = field(default_factory=list)
    driver: Optional[DriverSnapshot] = None
