#Purpose: The dispatch backend "adapter/client" (read-only).
#Sole responsibility: fetch batch / order / assignment snapshots over HTTP
#and return them as batches.models objects.
#Encapsulates backend-specific details:
#URL construction (/api/delivery/batches/..., /api/orders/admin/all)
#the {"data": ...} response envelope (and the backend quirk of sometimes
#returning the payload under "error")
#timeouts and error handling
#It should not contain timeline, window or stats logic.

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests
from dotenv import load_dotenv

from batches.models import (
    Assignment,
    Batch,
    BatchDetail,
    DriverSnapshot,
    Order,
    RouteOptimization,
)

# Read the dispatch backend base URL from environment
# Example in .env:
# DISPATCH_API_URL=https://api.example.com
load_dotenv()
BASE_URL = os.getenv("DISPATCH_API_URL")

logger = logging.getLogger(__name__)


class DispatchFeedError(Exception):
    """Raised when the dispatch backend cannot be reached or answers with an error."""
    pass


@dataclass(frozen=True)
class BatchTracking:
    """
    Live tracking snapshot of one batch: latest driver position/status plus
    one assignment per stop.
    """
    driver: Optional[DriverSnapshot]
    deliveries: List[Assignment]
    order_numbers: Dict[str, str]
    total_orders: int
    delivered_count: int
    failed_count: int
    route: Optional[RouteOptimization] = None


class DispatchFeedClient:
    """
    Dispatch backend adapter.

    Sole responsibility:
    - Talk to the backend via HTTP (GET only)
    - Unwrap the response envelope
    - Return batches.models objects
    """
    def __init__(self, base_url: Optional[str] = None, timeout: int = 5, session: Optional[requests.Session] = None):
        self.base_url = (base_url or BASE_URL or "").rstrip("/")
        self.timeout = timeout #seconds to wait for the backend before giving up
        self.session = session

        if not self.base_url:
            raise ValueError("Dispatch API base URL not set. Please set DISPATCH_API_URL in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        params = {k: v for k, v in (params or {}).items() if v is not None}
        getter = self.session.get if self.session is not None else requests.get

        try:
            response = getter(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Dispatch backend request failed: {url}: {e}")
            raise DispatchFeedError(f"Request to {path} failed: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Dispatch backend returned {response.status_code} for {url}")
            raise DispatchFeedError(f"{path} returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise DispatchFeedError(f"{path} returned a non-JSON body") from e

        return self._unwrap(payload, path)

    @staticmethod
    def _unwrap(payload: Any, path: str = "") -> Any:
        """
        Backend envelope: {"success": bool, "message": str, "data": {...}}.
        Some endpoints put the actual data under "error" instead of "data".
        """
        if not isinstance(payload, dict):
            return payload

        if payload.get("success") is False and not isinstance(payload.get("error"), dict):
            raise DispatchFeedError(f"{path} failed: {payload.get('message', 'Unknown error')}")

        for key in ("data", "error"):
            if isinstance(payload.get(key), (dict, list)):
                return payload[key]
        return payload

    @staticmethod
    def _count(data: Dict[str, Any], key: str, default: int) -> int:
        raw = data.get(key)
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except (TypeError, ValueError, OverflowError) as e:
            raise DispatchFeedError(f"{key} is not a count: {raw!r}") from e

    #----------------
    # Public methods
    #----------------
    def get_batch_details(self, batch_id: str) -> BatchDetail:
        """
        GET /api/delivery/batches/{id}
        returns the batch with its orders and assignments.
        """
        data = self._get(f"/api/delivery/batches/{batch_id}")
        if not isinstance(data, dict) or not isinstance(data.get("batch"), dict):
            raise DispatchFeedError(f"Batch {batch_id} not found")

        return BatchDetail(
            batch=Batch.from_record(data["batch"]),
            orders=[Order.from_record(o) for o in data.get("orders") or [] if isinstance(o, dict)],
            assignments=[Assignment.from_record(a) for a in data.get("assignments") or [] if isinstance(a, dict)],
        )

    def get_batch_tracking(self, batch_id: str) -> BatchTracking:
        """
        GET /api/delivery/batches/{id}/tracking
        deliveries arrive flat (etaStatus, etaSeconds next to the stop);
        they are folded into the Assignment shape.
        """
        data = self._get(f"/api/delivery/batches/{batch_id}/tracking")
        if not isinstance(data, dict):
            raise DispatchFeedError(f"Tracking for batch {batch_id} not available")

        deliveries: List[Assignment] = []
        order_numbers: Dict[str, str] = {}
        for raw in data.get("deliveries") or []:
            if not isinstance(raw, dict):
                continue
            record = dict(raw)
            record.setdefault(
                "etaTracking",
                {
                    "etaSeconds": raw.get("etaSeconds"),
                    "distanceRemainingMeters": raw.get("distanceRemainingMeters"),
                    "etaStatus": raw.get("etaStatus"),
                },
            )
            assignment = Assignment.from_record(record)
            deliveries.append(assignment)
            if raw.get("orderNumber"):
                order_numbers[assignment.order_id] = str(raw["orderNumber"])

        return BatchTracking(
            driver=DriverSnapshot.from_record(data.get("driver")),
            deliveries=deliveries,
            order_numbers=order_numbers,
            total_orders=self._count(data, "totalOrders", len(deliveries)),
            delivered_count=self._count(data, "deliveredCount", 0),
            failed_count=self._count(data, "failedCount", 0),
            route=RouteOptimization.from_record(data.get("routeOptimization")),
        )

    def get_batches(
        self,
        kitchen_id: Optional[str] = None,
        date_range: Optional[Tuple[datetime, datetime]] = None,
        limit: int = 100,
    ) -> List[Batch]:
        """
        GET /api/delivery/admin/batches?kitchenId=&dateFrom=&dateTo=&limit=
        """
        params: Dict[str, Any] = {"kitchenId": kitchen_id, "limit": limit}
        if date_range is not None:
            params["dateFrom"] = date_range[0].isoformat()
            params["dateTo"] = date_range[1].isoformat()

        data = self._get("/api/delivery/admin/batches", params)
        records = data.get("batches") if isinstance(data, dict) else data
        return [Batch.from_record(b) for b in records or [] if isinstance(b, dict)]

    def get_orders(self, kitchen_id: Optional[str] = None, limit: int = 100) -> List[Order]:
        """
        GET /api/orders/admin/all?kitchenId=&limit=
        """
        data = self._get("/api/orders/admin/all", {"kitchenId": kitchen_id, "limit": limit})
        records = data.get("orders") if isinstance(data, dict) else data
        return [Order.from_record(o) for o in records or [] if isinstance(o, dict)]
