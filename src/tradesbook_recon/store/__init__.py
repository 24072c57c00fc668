"""Record store backends."""

from .base import RecordStore, Snapshot
from .memory import InMemoryRecordStore

__all__ = [
    "RecordStore",
    "Snapshot",
    "InMemoryRecordStore",
]
