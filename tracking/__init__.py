#Marks tracking as a package.
#Re-exports the ETA classifier and live progress helpers so callers
#import from tracking without knowing internal file names.
#No business logic.

from .eta import EtaBand, UNKNOWN_BAND, classify_eta
from .progress import (
    StopView,
    TrackingProgress,
    build_stop_views,
    last_seen,
    order_stops,
    summarize_progress,
)

__all__ = [
    "EtaBand",
    "UNKNOWN_BAND",
    "classify_eta",
    "StopView",
    "TrackingProgress",
    "build_stop_views",
    "last_seen",
    "order_stops",
    "summarize_progress",
]
