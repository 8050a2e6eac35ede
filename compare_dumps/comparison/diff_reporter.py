"""Diff Reporter - Write structured run results and markdown summaries."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from compare_dumps.comparison.comparator import ValueMismatchRecord
from compare_dumps.comparison.exceptions import PairComparisonError, ValueMismatch
from compare_dumps.comparison.traversal import TraversalResult

logger = logging.getLogger(__name__)

REPORT_BASENAME = "compare-report"


def _root_cause(error: BaseException) -> BaseException:
    while isinstance(error, PairComparisonError):
        error = error.cause
    return error


class DiffReporter:
    """Generate run artifacts (JSON + Markdown) for a comparison run."""

    def __init__(self, output_dir: Path | str) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def build_stats(
        self,
        result: Optional[TraversalResult],
        error: Optional[BaseException] = None,
    ) -> Dict[str, Any]:
        stats: Dict[str, Any] = {
            "mode": result.mode if result else None,
            "path_a": result.path_a if result else None,
            "path_b": result.path_b if result else None,
            "files_compared": len(result.compared) if result else 0,
            "failed_path": result.failed_path if result else None,
            "status": "PASS" if error is None else "FAIL",
            "timestamp": datetime.now().isoformat(),
        }

        if error is not None:
            cause = _root_cause(error)
            stats["error_kind"] = type(cause).__name__
            stats["error"] = str(error)

        return stats

    @staticmethod
    def value_mismatches(error: Optional[BaseException]) -> List[ValueMismatchRecord]:
        if error is None:
            return []
        cause = _root_cause(error)
        if isinstance(cause, ValueMismatch):
            return list(cause.mismatches)
        return []

    def generate_json_report(
        self,
        stats: Dict[str, Any],
        mismatches: List[ValueMismatchRecord],
        settings: Optional[Dict[str, Any]] = None,
    ) -> str:
        report: Dict[str, Any] = {
            "metadata": {
                "generated_at": datetime.now().isoformat(),
            },
            "statistics": stats,
            "value_mismatches": [mismatch.to_dict() for mismatch in mismatches],
        }

        if settings is not None:
            report["settings"] = settings

        return json.dumps(report, indent=2, default=str)

    def generate_markdown_summary(
        self,
        stats: Dict[str, Any],
        mismatches: List[ValueMismatchRecord],
    ) -> str:
        md_lines = [
            "# Storage Dump Comparison",
            f"**Generated:** {datetime.now().isoformat()}",
            "",
            "## Summary",
            f"- **Inputs:** `{stats['path_a']}` vs `{stats['path_b']}`",
            f"- **Mode:** {stats['mode']}",
            f"- **Files Compared:** {stats['files_compared']}",
            f"- **Status:** {stats['status']}",
            "",
        ]

        if stats["status"] == "FAIL":
            md_lines.append("## Failure")
            md_lines.append("")
            if stats.get("failed_path"):
                md_lines.append(f"- **File:** `{stats['failed_path']}`")
            md_lines.append(f"- **Kind:** {stats.get('error_kind')}")
            md_lines.append(f"- **Message:** {stats.get('error')}")
            md_lines.append("")

        if mismatches:
            md_lines.append("## Value Mismatches")
            md_lines.append("")
            for mismatch in mismatches:
                md_lines.append(
                    f"- block {mismatch.block}, key `{mismatch.key}`: "
                    f"`{mismatch.value_a}` vs `{mismatch.value_b}`"
                )
        elif stats["status"] == "PASS":
            md_lines.append("All compared dumps match.")

        return "\n".join(md_lines) + "\n"

    def write_reports(
        self,
        result: Optional[TraversalResult],
        error: Optional[BaseException] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Path, Path]:
        stats = self.build_stats(result, error)
        mismatches = self.value_mismatches(error)

        json_path = self.output_dir / f"{REPORT_BASENAME}.json"
        md_path = self.output_dir / f"{REPORT_BASENAME}.md"

        json_path.write_text(
            self.generate_json_report(stats, mismatches, settings), encoding="utf-8"
        )
        md_path.write_text(self.generate_markdown_summary(stats, mismatches), encoding="utf-8")

        logger.info("Wrote comparison reports")
        logger.info("  JSON: %s", json_path)
        logger.info("  Markdown: %s", md_path)

        return json_path, md_path
