"""
Dump domain model.

A dump is the list of per-block storage changes recorded by one node. Keys and
values stay in their base64 text form; only the normalizer decodes keys.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

STATE_ADDED = "Added"
STATE_CHANGED = "Changed"
STATE_DELETED = "Deleted"


@dataclass
class StorageOp:
    """
    A single key's recorded mutation within a block.

    Attributes:
        state: "Added", "Changed", "Deleted" or any other label the node emits
        key: Base64-encoded storage key
        value: Base64-encoded resulting value, empty when absent
    """

    state: str
    key: str
    value: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageOp":
        """Create StorageOp from a decoded JSON object."""
        return cls(
            state=data["state"],
            key=data["key"],
            value=data.get("value") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk representation, omitting an empty value."""
        data: Dict[str, Any] = {"state": self.state, "key": self.key}
        if self.value:
            data["value"] = self.value
        return data


@dataclass
class BlockDump:
    """
    Storage changes recorded for one block.

    Attributes:
        block: Block number (unsigned 32-bit)
        size: Carried through untouched, never compared
        storage: Storage operations in file order until normalized
    """

    block: int
    size: int
    storage: List[StorageOp] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BlockDump":
        """Create BlockDump from a decoded JSON object."""
        return cls(
            block=data["block"],
            size=data["size"],
            storage=[StorageOp.from_dict(op) for op in data.get("storage") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk representation."""
        return {
            "block": self.block,
            "size": self.size,
            "storage": [op.to_dict() for op in self.storage],
        }


Dump = List[BlockDump]
