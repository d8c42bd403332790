"""JSON output formatter."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ts_validator.analysis.analyzer import AnalysisResult
from ts_validator.config.ignore import Suppression
from ts_validator.models.violation import Violation, ViolationKind
from ts_validator.version import __version__


class JSONFormatter:
    """JSON output formatter for analysis results."""

    def __init__(self, pretty: bool = True):
        self.pretty = pretty

    def format(
        self,
        result: AnalysisResult,
        violations: List[Violation],
        scan_path: str = "",
        suppressed: Optional[List[Suppression]] = None
    ) -> Dict[str, Any]:
        """
        Format analysis results as JSON.

        Args:
            result: Analysis result (file summaries, rule set)
            violations: Violations to report, in order
            scan_path: Path that was scanned
            suppressed: Violations hidden by ignore rules

        Returns:
            JSON-serializable dictionary
        """
        suppressed = suppressed or []
        return {
            "version": __version__,
            "scan_timestamp": datetime.now(timezone.utc).isoformat(),
            "scan_path": scan_path,
            "rules": result.rules.value,
            "summary": self._create_summary(result, violations, suppressed),
            "files": [f.to_dict() for f in result.files],
            "violations": [v.to_dict() for v in violations],
            "suppressed": [
                dict(s.violation.to_dict(), reason=s.reason) for s in suppressed
            ],
        }

    def format_to_string(
        self,
        result: AnalysisResult,
        violations: List[Violation],
        scan_path: str = "",
        suppressed: Optional[List[Suppression]] = None
    ) -> str:
        """Format analysis results as JSON string."""
        data = self.format(result, violations, scan_path, suppressed)
        indent = 2 if self.pretty else None
        return json.dumps(data, indent=indent, ensure_ascii=False)

    def save(
        self,
        result: AnalysisResult,
        violations: List[Violation],
        output_path: Path,
        scan_path: str = "",
        suppressed: Optional[List[Suppression]] = None
    ):
        """Save analysis results as JSON file."""
        json_str = self.format_to_string(result, violations, scan_path, suppressed)
        output_path.write_text(json_str, encoding="utf-8")

    def _create_summary(
        self,
        result: AnalysisResult,
        violations: List[Violation],
        suppressed: List[Suppression]
    ) -> Dict[str, Any]:
        """Create summary statistics."""
        by_kind = {kind.value: 0 for kind in ViolationKind}
        for v in violations:
            by_kind[v.kind.value] += 1

        return {
            "files_analyzed": result.files_analyzed,
            "files_skipped": result.skipped,
            "total": len(violations),
            "suppressed": len(suppressed),
            "by_kind": by_kind,
            "controllers": result.controllers_per_file,
        }


def format_json(
    result: AnalysisResult,
    violations: List[Violation],
    scan_path: str = "",
    suppressed: Optional[List[Suppression]] = None,
    pretty: bool = True
) -> str:
    """Convenience function to format results as JSON."""
    formatter = JSONFormatter(pretty=pretty)
    return formatter.format_to_string(result, violations, scan_path, suppressed)
