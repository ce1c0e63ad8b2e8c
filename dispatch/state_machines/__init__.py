from .batch_state import (
    can_cancel,
    can_dispatch_to_driver,
    can_reassign,
    is_forward_transition,
    is_terminal,
    is_tracking_active,
)

__all__ = [
    "can_cancel",
    "can_dispatch_to_driver",
    "can_reassign",
    "is_forward_transition",
    "is_terminal",
    "is_tracking_active",
]
