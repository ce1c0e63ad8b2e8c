from typing import Any, Optional

from batches.models import BatchStatus, TERMINAL_STATUSES

# Forward order of the lifecycle. CANCELLED can be reached from any non-terminal state.
LIFECYCLE = [
    BatchStatus.COLLECTING,
    BatchStatus.READY_FOR_DISPATCH,
    BatchStatus.DISPATCHED,
    BatchStatus.IN_PROGRESS,
    BatchStatus.COMPLETED,
]

# PARTIAL_COMPLETE sits at the same stage as COMPLETED.
_STAGE = {status: index for index, status in enumerate(LIFECYCLE)}
_STAGE[BatchStatus.PARTIAL_COMPLETE] = _STAGE[BatchStatus.COMPLETED]


def is_terminal(status: Any) -> bool:
    return BatchStatus.parse(status) in TERMINAL_STATUSES


def can_dispatch_to_driver(status: Any) -> bool:
    """
    A batch can be handed to a driver only while it is still being formed.
    """
    return BatchStatus.parse(status) in (BatchStatus.COLLECTING, BatchStatus.READY_FOR_DISPATCH)


def can_reassign(status: Any) -> bool:
    """
    Driver reassignment is only meaningful once a batch is out with a driver.
    """
    return BatchStatus.parse(status) in (BatchStatus.DISPATCHED, BatchStatus.IN_PROGRESS)


def can_cancel(status: Any) -> bool:
    parsed = BatchStatus.parse(status)
    return parsed is not None and parsed not in (BatchStatus.COMPLETED, BatchStatus.CANCELLED)


def is_tracking_active(status: Any) -> bool:
    """
    Live tracking (and polling) runs only while a driver is on the road.
    """
    return BatchStatus.parse(status) in (BatchStatus.DISPATCHED, BatchStatus.IN_PROGRESS)


def is_forward_transition(old: Optional[Any], new: Any) -> bool:
    """
    Transitions happen upstream; this only checks that two snapshots of the
    same batch are consistent. Staying put is fine, moving forward is fine,
    jumping to CANCELLED from a non-terminal state is fine.
    """
    old_status = BatchStatus.parse(old)
    new_status = BatchStatus.parse(new)

    if new_status is None:
        return False
    if old_status is None or old_status == new_status:
        return True
    if old_status in TERMINAL_STATUSES:
        return False
    if new_status == BatchStatus.CANCELLED:
        return True
    return _STAGE[new_status] > _STAGE[old_status]
