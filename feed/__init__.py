#Marks feed as a package.
#The only I/O in the project: reads snapshots from the dispatch backend.
#Engine packages (batches, dispatch, tracking, stats) never import feed.

from .dispatch_client import BatchTracking, DispatchFeedClient, DispatchFeedError
from .poller import BatchPoller, BatchSnapshot, derive_snapshot

__all__ = [
    "BatchTracking",
    "DispatchFeedClient",
    "DispatchFeedError",
    "BatchPoller",
    "BatchSnapshot",
    "derive_snapshot",
]
