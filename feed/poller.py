"""
Purpose: Re-fetch a batch on a fixed tick while it is out for delivery.
What it does:
Fetches a batch detail snapshot, derives the timeline and tracking progress
from it, hands the result to a callback, sleeps, and repeats until the
batch is no longer active (or max_polls is reached).
Each tick is independent: previous results are discarded, never patched.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Callable, List, Optional, Tuple

from batches.models import BatchDetail, BatchStatus
from batches.timefields import TIME_PLACEHOLDER
from batches.timeline import TimelineEvent, build_timeline
from dispatch.policy import DispatchPolicy, default_policy
from dispatch.state_machines.batch_state import is_forward_transition, is_tracking_active
from tracking.progress import StopView, TrackingProgress, build_stop_views, summarize_progress
from .dispatch_client import DispatchFeedClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchSnapshot:
    """
    Everything derived from one fetch of one batch.
    """
    detail: BatchDetail
    timeline: List[TimelineEvent]
    progress: TrackingProgress
    stops: List[StopView]
    fetched_at: datetime
    time_placeholder: str = TIME_PLACEHOLDER

    def timeline_rows(self, tz: Optional[tzinfo] = None) -> List[Tuple[str, str, Optional[str]]]:
        """(display time, title, subtitle) per event, undated ones showing the policy placeholder."""
        return [
            (event.display_time(tz=tz, placeholder=self.time_placeholder), event.title, event.subtitle)
            for event in self.timeline
        ]


def derive_snapshot(
    detail: BatchDetail,
    fetched_at: datetime,
    policy: Optional[DispatchPolicy] = None,
) -> BatchSnapshot:
    policy = policy or default_policy()
    return BatchSnapshot(
        detail=detail,
        timeline=build_timeline(detail.batch, detail.orders, detail.assignments),
        progress=summarize_progress(detail.batch, detail.assignments),
        stops=build_stop_views(detail.orders, detail.assignments, policy),
        fetched_at=fetched_at,
        time_placeholder=policy.time_placeholder,
    )


class BatchPoller:
    """
    Polls one batch every `tracking_poll_interval_seconds` while it is active.
    """
    def __init__(
        self,
        client: DispatchFeedClient,
        policy: Optional[DispatchPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.client = client
        self.policy = policy or default_policy()
        self.sleep = sleep
        self.clock = clock

    def poll(
        self,
        batch_id: str,
        on_snapshot: Callable[[BatchSnapshot], None],
        max_polls: Optional[int] = None,
    ) -> Optional[BatchSnapshot]:
        """
        Runs until the batch leaves DISPATCHED / IN_PROGRESS.
        The first fetch always happens, even for an inactive batch.
        Returns the last snapshot delivered to the callback.
        """
        last: Optional[BatchSnapshot] = None
        previous_status: Optional[BatchStatus] = None
        polls = 0

        while max_polls is None or polls < max_polls:
            detail = self.client.get_batch_details(batch_id)
            polls += 1

            status = detail.batch.status
            if not is_forward_transition(previous_status, status):
                logger.warning(
                    "Batch %s moved backwards: %s -> %s",
                    batch_id,
                    previous_status.value if previous_status else None,
                    status.value if status else None,
                )
            previous_status = status

            last = derive_snapshot(detail, self.clock(), self.policy)
            on_snapshot(last)

            if not is_tracking_active(status):
                logger.debug("Batch %s is %s, polling stopped", batch_id, status)
                break
            if max_polls is not None and polls >= max_polls:
                break

            self.sleep(self.policy.tracking_poll_interval_seconds)

        return last
