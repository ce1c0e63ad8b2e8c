"""
Purpose: Dispatch-window rules (is a meal window allowed to go to drivers now?).
What it does:

- Reads the kitchen's meal window end time ("HH:MM", 24-hour).
- can_dispatch: now's minute-of-day >= cutoff minute-of-day.
- time_until_dispatch: "Now" / "N/A" / "1h 5m" / "5m".
- formatted_end_time: "2:00 PM" / "N/A".
- evaluate_window: all of the above plus the caller's force flag, kept separate.

Rule: `now` is always passed in. Nothing here reads the wall clock.
Missing or malformed configuration fails closed (not eligible).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Mapping, Optional, Tuple, Union

from batches.models import MealWindow, OperatingHours
from batches.timefields import clock_12h
from .policy import DispatchPolicy, default_policy

logger = logging.getLogger(__name__)

Clock = Union[datetime, time]
HoursLike = Union[OperatingHours, Mapping[str, Any], None]

_END_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{1,2})(?::\d{1,2})?\s*$")


@dataclass(frozen=True)
class DispatchWindowResult:
    """
    Eligibility and force are independent. Callers compose
    `allowed = eligible or force` themselves.
    """
    window: MealWindow
    eligible: bool
    force: bool
    time_remaining: str
    formatted_cutoff: str


def parse_end_time(raw: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    "14:00" -> (14, 0). Single- or double-digit parts are fine.
    Malformed or out-of-range values return None.
    """
    if not isinstance(raw, str):
        return None

    match = _END_TIME_RE.match(raw)
    if not match:
        logger.warning("Malformed meal window end time %r ignored", raw)
        return None

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        logger.warning("Out of range meal window end time %r ignored", raw)
        return None
    return hours, minutes


def _coerce_window(window: Union[MealWindow, str]) -> Optional[MealWindow]:
    return MealWindow.parse(window)


def _coerce_hours(hours: HoursLike) -> Optional[OperatingHours]:
    if hours is None or isinstance(hours, OperatingHours):
        return hours
    return OperatingHours.from_record(hours)


def _cutoff_minutes(window: Union[MealWindow, str], hours: HoursLike) -> Optional[int]:
    meal_window = _coerce_window(window)
    operating_hours = _coerce_hours(hours)
    if meal_window is None or operating_hours is None:
        return None

    end_time = parse_end_time(operating_hours.end_time(meal_window))
    if end_time is None:
        return None
    return end_time[0] * 60 + end_time[1]


def _minute_of_day(now: Clock) -> int:
    return now.hour * 60 + now.minute


def can_dispatch(window: Union[MealWindow, str], hours: HoursLike, now: Clock) -> bool:
    """
    True iff the window has a configured end time and now is at or past it.

    Comparison is minute-of-day only, on the same day as `now`. A window
    ending after midnight reads as "already past" for most of the day.
    """
    cutoff = _cutoff_minutes(window, hours)
    if cutoff is None:
        return False
    return _minute_of_day(now) >= cutoff


def time_until_dispatch(
    window: Union[MealWindow, str],
    hours: HoursLike,
    now: Clock,
    policy: Optional[DispatchPolicy] = None,
) -> str:
    policy = policy or default_policy()

    cutoff = _cutoff_minutes(window, hours)
    if cutoff is None:
        return policy.not_available_text

    minutes_left = cutoff - _minute_of_day(now)
    if minutes_left <= 0:
        return policy.dispatch_now_text

    hours_left, mins_left = divmod(minutes_left, 60)
    if hours_left > 0:
        return f"{hours_left}h {mins_left}m"
    return f"{mins_left}m"


def formatted_end_time(
    window: Union[MealWindow, str],
    hours: HoursLike,
    policy: Optional[DispatchPolicy] = None,
) -> str:
    policy = policy or default_policy()

    cutoff = _cutoff_minutes(window, hours)
    if cutoff is None:
        return policy.not_available_text
    return clock_12h(*divmod(cutoff, 60))


def evaluate_window(
    window: Union[MealWindow, str],
    hours: HoursLike,
    now: Clock,
    *,
    force: bool = False,
    policy: Optional[DispatchPolicy] = None,
) -> Optional[DispatchWindowResult]:
    """
    One-call view for the dispatch panel. Returns None only when `window`
    is not a known meal window.
    """
    meal_window = _coerce_window(window)
    if meal_window is None:
        return None

    return DispatchWindowResult(
        window=meal_window,
        eligible=can_dispatch(meal_window, hours, now),
        force=bool(force),
        time_remaining=time_until_dispatch(meal_window, hours, now, policy),
        formatted_cutoff=formatted_end_time(meal_window, hours, policy),
    )
