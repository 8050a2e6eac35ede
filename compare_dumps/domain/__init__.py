"""Domain models for storage dumps."""

from .dump import (
    Dump,
    BlockDump,
    StorageOp,
    STATE_ADDED,
    STATE_CHANGED,
    STATE_DELETED,
)

__all__ = [
    "Dump",
    "BlockDump",
    "StorageOp",
    "STATE_ADDED",
    "STATE_CHANGED",
    "STATE_DELETED",
]
