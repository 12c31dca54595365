"""Internal simulation-time primitives."""

from .time_queue import PendingCompletion, TimerQueue
from .validation import ensure_delay, ensure_time

__all__ = [
    "PendingCompletion",
    "TimerQueue",
    "ensure_delay",
    "ensure_time",
]
