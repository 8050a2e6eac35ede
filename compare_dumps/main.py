"""
compare-dumps - Command line entry point

Compares two storage dump files, or two directories of per-block dump files,
and exits non-zero on the first divergence.

Usage:
    compare-dumps dumpDirA dumpDirB [--config settings.yaml] [--report-dir DIR]
"""

import argparse
import sys
from typing import List, Optional

from compare_dumps import __version__
from compare_dumps.comparison.diff_reporter import DiffReporter
from compare_dumps.comparison.exceptions import ArgumentError, DumpCompareError
from compare_dumps.comparison.traversal import TraversalDriver, TraversalResult
from compare_dumps.config.settings import Settings
from compare_dumps.utils.logger import get_logger, log_operation, set_log_level

logger = get_logger(__name__)

PROG = "compare-dumps"
USAGE = "compare-dumps dumpDirA dumpDirB"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage=USAGE,
        description="Compare storage dumps produced by two nodes.",
    )
    parser.add_argument("path_a", nargs="?", default="", help="first dump file or directory")
    parser.add_argument("path_b", nargs="?", default="", help="second dump file or directory")
    parser.add_argument("--config", default=None, help="YAML settings file")
    parser.add_argument(
        "--report-dir", default=None, help="write JSON and Markdown run reports here"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"{PROG} {__version__}")
    return parser


@log_operation("compare_dumps")
def run(args: argparse.Namespace, driver: TraversalDriver) -> TraversalResult:
    """Validate arguments and run the comparison."""
    if not args.path_a:
        raise ArgumentError("no arguments given")
    if not args.path_b:
        raise ArgumentError("missing second argument")
    return driver.run(args.path_a, args.path_b)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line tool.

    Returns:
        Process exit code: 0 when the dumps match, 1 on any failure
    """
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_log_level("DEBUG")

    driver: Optional[TraversalDriver] = None
    settings: Optional[Settings] = None
    error: Optional[DumpCompareError] = None

    try:
        settings = Settings.load(args.config)
        driver = TraversalDriver(settings)
        run(args, driver)
    except DumpCompareError as e:
        error = e
        print(e, file=sys.stderr)
        print(USAGE, file=sys.stderr)

    if args.report_dir:
        reporter = DiffReporter(args.report_dir)
        reporter.write_reports(
            driver.result if driver else None,
            error,
            settings.to_dict() if settings else None,
        )

    return 1 if error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
