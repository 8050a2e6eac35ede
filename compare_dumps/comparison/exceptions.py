"""
Custom exception hierarchy for dump comparison.

Every failure the tool can report derives from DumpCompareError so the CLI
can turn any of them into a message and a non-zero exit code. There is no
recovery path: the first error aborts the run.
"""

from typing import List, Optional


class DumpCompareError(Exception):
    """
    Base exception for all dump comparison errors.
    """

    pass


class DumpIOError(DumpCompareError):
    """
    Raised when a dump file cannot be opened or read.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"reading file {path}: {reason}")
        self.path = path
        self.reason = reason


class FormatError(DumpCompareError):
    """
    Raised when a dump file is not a JSON array of block records.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"reading file {path}: {reason}")
        self.path = path
        self.reason = reason


class EncodingError(DumpCompareError):
    """
    Raised when a storage key is not valid base64.

    This marks corrupt input and is never recovered from: the entry is not
    skipped and the whole run aborts.
    """

    def __init__(self, block: int, key: str, reason: str):
        super().__init__(f"block {block}: invalid key encoding {key!r}: {reason}")
        self.block = block
        self.key = key
        self.reason = reason


class MismatchError(DumpCompareError):
    """
    Base class for divergences found between two normalized dumps.
    """

    pass


class SizeMismatch(MismatchError):
    """Raised when the dumps hold a different number of block records."""

    def __init__(self, size_a: int, size_b: int):
        super().__init__(f"dump files differ in size: {size_a} vs {size_b}")
        self.size_a = size_a
        self.size_b = size_b


class BlockNumberMismatch(MismatchError):
    """Raised when block records at the same index carry different numbers."""

    def __init__(self, block_a: int, block_b: int):
        super().__init__(f"block number mismatch: {block_a} vs {block_b}")
        self.block_a = block_a
        self.block_b = block_b


class StorageCountMismatch(MismatchError):
    """Raised when a block has a different number of storage changes."""

    def __init__(self, block: int, count_a: int, count_b: int):
        super().__init__(f"block {block}, changes length mismatch: {count_a} vs {count_b}")
        self.block = block
        self.count_a = count_a
        self.count_b = count_b


class KeyMismatch(MismatchError):
    """Raised when encoded keys differ at the same position of a block."""

    def __init__(self, block: int, key_a: str, key_b: str):
        super().__init__(f"block {block}: key mismatch: {key_a} vs {key_b}")
        self.block = block
        self.key_a = key_a
        self.key_b = key_b


class StateMismatch(MismatchError):
    """Raised when state labels differ for a matching key."""

    def __init__(self, block: int, key: str, state_a: str, state_b: str):
        super().__init__(
            f"block {block}: state mismatch for key {key}: {state_a} vs {state_b}"
        )
        self.block = block
        self.key = key
        self.state_a = state_a
        self.state_b = state_b


class ValueMismatch(MismatchError):
    """
    Raised once per block after every value difference in it has been printed.

    The individual differences are available in ``mismatches``.
    """

    def __init__(self, block: int, mismatches: Optional[List] = None):
        self.block = block
        self.mismatches = list(mismatches or [])
        count = len(self.mismatches)
        noun = "mismatch" if count == 1 else "mismatches"
        super().__init__(f"block {block}: {count} value {noun}")


class PairComparisonError(DumpCompareError):
    """
    Raised in directory mode when one file pair fails.

    Wraps the underlying error together with the relative path that failed.
    """

    def __init__(self, relative_path: str, cause: DumpCompareError):
        super().__init__(f"file {relative_path}: {cause}")
        self.relative_path = relative_path
        self.cause = cause


class ModeMismatch(DumpCompareError):
    """Raised when the inputs are not both files or both directories."""

    def __init__(self, message: str = "both parameters must be either dump files or directories"):
        super().__init__(message)


class ArgumentError(DumpCompareError):
    """Raised when the command line is missing required arguments."""

    pass
