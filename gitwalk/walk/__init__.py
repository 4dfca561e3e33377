"""Repository discovery and the worker pool that fans the command out."""

from .channel import HandoffChannel
from .producer import DirectoryProducer
from .pool import WorkerPool
from .runner import WalkRunner

__all__ = [
    "HandoffChannel",
    "DirectoryProducer",
    "WorkerPool",
    "WalkRunner",
]
