"""Block Comparator - Compare two normalized dumps block by block."""

import sys
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, TextIO

from compare_dumps.comparison.exceptions import (
    BlockNumberMismatch,
    KeyMismatch,
    SizeMismatch,
    StateMismatch,
    StorageCountMismatch,
    ValueMismatch,
)
from compare_dumps.domain.dump import BlockDump, Dump
from compare_dumps.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ValueMismatchRecord:
    """One key whose value differs between the two dumps."""

    block: int
    key: str
    value_a: str
    value_b: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def describe(self) -> str:
        return (
            f"block {self.block}: value mismatch for key {self.key}: "
            f"{self.value_a} vs {self.value_b}"
        )


class BlockComparator:
    """
    Compare two normalized dumps.

    Storage lists are compared position by position. Both sides are sorted by
    encoded key, so a difference in key sets surfaces as a KeyMismatch (or a
    StorageCountMismatch) at the first diverging position rather than through
    a separate set comparison.

    Value differences are printed to ``out`` as they are found; the rest of
    the block is still scanned before a single ValueMismatch is raised.
    """

    def __init__(self, out: Optional[TextIO] = None):
        self._out = out

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def compare(self, dump_a: Dump, dump_b: Dump) -> None:
        """
        Verify that two normalized dumps record the same storage changes.

        Raises:
            SizeMismatch: Different number of block records
            BlockNumberMismatch: Block numbers differ at the same index
            StorageCountMismatch: Different number of storage changes in a block
            KeyMismatch: Keys differ at the same position
            StateMismatch: States differ for the same key
            ValueMismatch: One or more values differ within a block
        """
        if len(dump_a) != len(dump_b):
            raise SizeMismatch(len(dump_a), len(dump_b))

        for block_a, block_b in zip(dump_a, dump_b):
            self.compare_block(block_a, block_b)

        logger.debug(
            "Dumps match", operation="compare", context={"blocks": len(dump_a)}
        )

    def compare_block(self, block_a: BlockDump, block_b: BlockDump) -> None:
        """Compare a single pair of block records."""
        if block_a.block != block_b.block:
            raise BlockNumberMismatch(block_a.block, block_b.block)

        if len(block_a.storage) != len(block_b.storage):
            raise StorageCountMismatch(
                block_a.block, len(block_a.storage), len(block_b.storage)
            )

        mismatches: List[ValueMismatchRecord] = []
        for op_a, op_b in zip(block_a.storage, block_b.storage):
            if op_a.key != op_b.key:
                raise KeyMismatch(block_a.block, op_a.key, op_b.key)
            if op_a.state != op_b.state:
                raise StateMismatch(block_a.block, op_a.key, op_a.state, op_b.state)
            if op_a.value != op_b.value:
                record = ValueMismatchRecord(block_a.block, op_a.key, op_a.value, op_b.value)
                print(record.describe(), file=self.out)
                mismatches.append(record)

        if mismatches:
            raise ValueMismatch(block_a.block, mismatches)
