import pytest

from batches.models import BatchStatus
from dispatch.state_machines.batch_state import (
    can_cancel,
    can_dispatch_to_driver,
    can_reassign,
    is_forward_transition,
    is_terminal,
    is_tracking_active,
)


@pytest.mark.parametrize(
    "status, dispatch, reassign, cancel, tracking",
    [
        ("COLLECTING", True, False, True, False),
        ("READY_FOR_DISPATCH", True, False, True, False),
        ("DISPATCHED", False, True, True, True),
        ("IN_PROGRESS", False, True, True, True),
        ("PARTIAL_COMPLETE", False, False, True, False),
        ("COMPLETED", False, False, False, False),
        ("CANCELLED", False, False, False, False),
        ("ARCHIVED", False, False, False, False),
        (None, False, False, False, False),
    ],
)
def test_action_gates(status, dispatch, reassign, cancel, tracking):
    assert can_dispatch_to_driver(status) is dispatch
    assert can_reassign(status) is reassign
    assert can_cancel(status) is cancel
    assert is_tracking_active(status) is tracking


def test_terminal_statuses():
    assert is_terminal(BatchStatus.COMPLETED)
    assert is_terminal("partial_complete")
    assert is_terminal("CANCELLED")
    assert not is_terminal("DISPATCHED")
    assert not is_terminal(None)


def test_forward_transitions():
    assert is_forward_transition(None, "COLLECTING")
    assert is_forward_transition("COLLECTING", "COLLECTING")
    assert is_forward_transition("COLLECTING", "DISPATCHED")
    assert is_forward_transition("IN_PROGRESS", "PARTIAL_COMPLETE")
    assert is_forward_transition("DISPATCHED", "CANCELLED")


def test_backward_or_post_terminal_transitions_are_flagged():
    assert not is_forward_transition("IN_PROGRESS", "DISPATCHED")
    assert not is_forward_transition("COMPLETED", "IN_PROGRESS")
    assert not is_forward_transition("COMPLETED", "PARTIAL_COMPLETE")
    assert not is_forward_transition("CANCELLED", "COLLECTING")
    assert not is_forward_transition("COLLECTING", None)
