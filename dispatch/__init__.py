#Expose the dispatch pieces:
#Policy (tunable values)
#Dispatch-window rules (is a meal window allowed out now?)
#Batch action gates (what can an operator do to a batch in this status?)

from .policy import DispatchPolicy, default_policy
from .window import (
    DispatchWindowResult,
    can_dispatch,
    evaluate_window,
    formatted_end_time,
    parse_end_time,
    time_until_dispatch,
)

__all__ = [
    "DispatchPolicy",
    "default_policy",
    "DispatchWindowResult",
    "can_dispatch",
    "evaluate_window",
    "formatted_end_time",
    "parse_end_time",
    "time_until_dispatch",
]
