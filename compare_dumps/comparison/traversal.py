"""
Traversal Driver - Decide which dump files to compare and run the pipeline

Two regular files are compared directly. Two directories are walked using the
bucketed dump-file naming convention, comparing the same relative path under
each root, strictly in ascending order and stopping at the first failure.
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, TextIO

from compare_dumps.comparison.comparator import BlockComparator
from compare_dumps.comparison.exceptions import (
    DumpCompareError,
    DumpIOError,
    ModeMismatch,
    PairComparisonError,
)
from compare_dumps.comparison.loader import load_dump
from compare_dumps.comparison.normalizer import DumpNormalizer
from compare_dumps.config.settings import Settings, TraversalConfig
from compare_dumps.utils.logger import get_logger, log_operation

logger = get_logger(__name__)

MODE_FILE = "file"
MODE_DIRECTORY = "directory"


@dataclass
class TraversalResult:
    """Progress of a run; filled in as file pairs are compared."""

    mode: str
    path_a: str
    path_b: str
    compared: List[str] = field(default_factory=list)
    failed_path: Optional[str] = None


def iter_buckets(config: TraversalConfig) -> Iterator[int]:
    """Yield bucket numbers 0, bucket_step, ... up to max_block inclusive."""
    return iter(range(0, config.max_block + 1, config.bucket_step))


def iter_bucket_indices(config: TraversalConfig, bucket: int) -> Iterator[int]:
    """Yield the per-block file indices of one bucket in ascending order."""
    for index in range(bucket - config.bucket_span, bucket + 1, config.file_step):
        if index < 0:
            continue
        yield index


def iter_dump_paths(config: TraversalConfig) -> Iterator[str]:
    """
    Yield relative dump file paths in comparison order.

    Buckets 0, bucket_step, ... up to max_block inclusive; within bucket b the
    indices b - bucket_span .. b in file_step increments, negatives skipped.
    """
    for bucket in iter_buckets(config):
        directory = config.bucket_dir(bucket)
        for index in iter_bucket_indices(config, bucket):
            yield f"{directory}/{config.file_name(index)}"


@log_operation("compare_files")
def compare_files(
    path_a: str,
    path_b: str,
    normalizer: DumpNormalizer,
    comparator: BlockComparator,
) -> None:
    """
    Load, normalize and compare one pair of dump files.

    Raises:
        DumpCompareError: The first load, encoding or comparison failure
    """
    dump_a = load_dump(path_a)
    dump_b = load_dump(path_b)
    normalizer.normalize(dump_a)
    normalizer.normalize(dump_b)
    comparator.compare(dump_a, dump_b)


class TraversalDriver:
    """
    Run the comparison pipeline over one file pair or two dump directories.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        comparator: Optional[BlockComparator] = None,
        normalizer: Optional[DumpNormalizer] = None,
        out: Optional[TextIO] = None,
    ):
        self.settings = settings or Settings()
        self._out = out
        self.comparator = comparator or BlockComparator(out=out)
        self.normalizer = normalizer or DumpNormalizer(self.settings.normalizer)
        self.result: Optional[TraversalResult] = None

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def run(self, path_a: str, path_b: str) -> TraversalResult:
        """
        Compare two dump files or two dump directories.

        Raises:
            DumpIOError: If either input does not exist
            ModeMismatch: If the inputs are not both files or both directories
            DumpCompareError: The first comparison failure
        """
        for path in (path_a, path_b):
            if not os.path.exists(path):
                raise DumpIOError(path, "no such file or directory")

        if os.path.isfile(path_a) and os.path.isfile(path_b):
            self.result = TraversalResult(MODE_FILE, path_a, path_b)
            self.compare_pair(path_a, path_b)
            return self.result

        if os.path.isdir(path_a) and os.path.isdir(path_b):
            self.result = TraversalResult(MODE_DIRECTORY, path_a, path_b)
            self.compare_directories(path_a, path_b)
            return self.result

        raise ModeMismatch()

    def compare_pair(self, path_a: str, path_b: str) -> None:
        """Single-pair mode."""
        try:
            compare_files(path_a, path_b, self.normalizer, self.comparator)
        except DumpCompareError:
            if self.result is not None:
                self.result.failed_path = os.path.basename(path_a)
            raise
        if self.result is not None:
            self.result.compared.append(os.path.basename(path_a))

    def compare_directories(self, root_a: str, root_b: str) -> None:
        """
        Directory mode.

        Raises:
            PairComparisonError: Wrapping the first failure with its relative path
        """
        config = self.settings.traversal

        for bucket in iter_buckets(config):
            directory = config.bucket_dir(bucket)
            print(f"Processing directory {directory}", file=self.out)
            logger.debug(
                "Processing bucket",
                operation="compare_directories",
                context={"directory": directory},
            )

            for index in iter_bucket_indices(config, bucket):
                relative_path = f"{directory}/{config.file_name(index)}"
                try:
                    compare_files(
                        os.path.join(root_a, relative_path),
                        os.path.join(root_b, relative_path),
                        self.normalizer,
                        self.comparator,
                    )
                except DumpCompareError as e:
                    if self.result is not None:
                        self.result.failed_path = relative_path
                    raise PairComparisonError(relative_path, e) from e

                if self.result is not None:
                    self.result.compared.append(relative_path)
