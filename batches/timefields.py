"""
Purpose: Single normalization point for optional timestamp fields.
What it does:

- resolve_time(raw) turns an ISO-8601 string / datetime / None into an
  aware datetime or None.
- format_clock(instant) renders "h:mm AM/PM" or the "----" placeholder.

Rule: never raises. "absent" and "unparseable" are the same thing to callers.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional

logger = logging.getLogger(__name__)

TIME_PLACEHOLDER = "----"


def resolve_time(raw: Any) -> Optional[datetime]:
    """
    Parse an optional timestamp field into an absolute (tz-aware) instant.

    Accepts ISO-8601 strings (a trailing 'Z' is treated as UTC) or datetime
    objects. Naive values are taken as UTC. Anything else returns None.
    """
    if raw is None:
        return None

    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable timestamp %r treated as absent", raw)
            return None
    else:
        logger.debug("Non-string timestamp %r treated as absent", raw)
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_clock(
    instant: Optional[datetime],
    tz: Optional[tzinfo] = None,
    placeholder: str = TIME_PLACEHOLDER,
) -> str:
    """
    Render an instant as "h:mm AM/PM" (no leading zero on the hour).
    Missing instants render as the placeholder.
    """
    if instant is None:
        return placeholder

    if tz is not None:
        try:
            instant = instant.astimezone(tz)
        except (ValueError, OverflowError):
            return placeholder

    return clock_12h(instant.hour, instant.minute)


def clock_12h(hours: int, minutes: int) -> str:
    """24-hour clock parts -> "h:mm AM/PM". 0 -> 12 AM, 12 -> 12 PM."""
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"
