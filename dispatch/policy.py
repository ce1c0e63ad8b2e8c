"""
Purpose: Central configuration for dispatch-window, tracking and stats behavior.
What it does:

Stores all tunable values the derived-state computations read:

BATCHABLE_ORDER_STATUSES = PLACED, ACCEPTED, PREPARING, READY

AUTHORITY_ROLES = ADMIN

TRACKING_POLL_INTERVAL_SEC = 12

UNSEQUENCED_STOP_RANK = 999

Display fallbacks ("----", "N/A", "Now").

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet

from batches.timefields import TIME_PLACEHOLDER


@dataclass(frozen=True)
class DispatchPolicy:
    """
    Central configuration for the batch engine.

    Notes:
    - Meal window cutoffs are same-day minute-of-day comparisons. A cutoff
      after midnight (e.g. dinner ending 02:00) is not treated as overnight.
    - Display fallbacks are returned as-is by the engine instead of raising.
    """

    # --- Stats ---
    # Orders in these statuses with no batch yet count as "available for batching".
    batchable_order_statuses: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"PLACED", "ACCEPTED", "PREPARING", "READY"})
    )

    # Roles allowed to see the delivery performance block.
    authority_roles: FrozenSet[str] = field(default_factory=lambda: frozenset({"ADMIN"}))

    # --- Tracking ---
    # How often an active batch is re-fetched while someone watches it.
    tracking_poll_interval_seconds: int = 12

    # Stops without a sequence number sort after every sequenced stop.
    unsequenced_stop_rank: int = 999

    # --- Display fallbacks ---
    time_placeholder: str = TIME_PLACEHOLDER
    not_available_text: str = "N/A"
    dispatch_now_text: str = "Now"

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup if you want.
        """
        if not self.batchable_order_statuses:
            raise ValueError("batchable_order_statuses must not be empty")

        if self.tracking_poll_interval_seconds <= 0:
            raise ValueError("tracking_poll_interval_seconds must be > 0")

        if self.unsequenced_stop_rank < 0:
            raise ValueError("unsequenced_stop_rank must be >= 0")

        if not self.time_placeholder or not self.not_available_text or not self.dispatch_now_text:
            raise ValueError("display fallbacks must be non-empty strings")


def default_policy() -> DispatchPolicy:
    """
    Convenience factory for the default policy.
    """
    p = DispatchPolicy()
    p.validate()
    return p
