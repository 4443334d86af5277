"""Queues domain - the todo playlist and the rating buckets.

This domain handles:
- Reading and atomically writing line-delimited playlist files
- The fixed todo + six bucket layout and its save order
"""

from .path_queue import MediaPath, PathQueue
from .queue_set import BUCKET_NAMES, QUEUE_NAMES, TODO, QueueSet, Rating

__all__ = [
    "MediaPath",
    "PathQueue",
    "QueueSet",
    "Rating",
    "TODO",
    "BUCKET_NAMES",
    "QUEUE_NAMES",
]
