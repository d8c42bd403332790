"""SARIF 2.1.0 output formatter for GitHub Code Scanning."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ts_validator.config.ignore import Suppression
from ts_validator.models.violation import Violation, ViolationKind
from ts_validator.version import __version__


class SARIFFormatter:
    """
    SARIF 2.1.0 formatter for GitHub Code Scanning.

    Every violation kind is declared as a rule; each violation becomes a
    result pointing at its line and column.
    """

    SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
    SARIF_VERSION = "2.1.0"

    def __init__(self, tool_name: str = "ts-validator"):
        self.tool_name = tool_name

    def format(
        self,
        violations: List[Violation],
        suppressed: Optional[List[Suppression]] = None
    ) -> Dict[str, Any]:
        """
        Format violations as SARIF.

        Args:
            violations: Violations to report
            suppressed: Violations hidden by ignore rules, emitted with suppressions

        Returns:
            SARIF document as dictionary
        """
        results = [v.to_sarif() for v in violations]
        for item in suppressed or []:
            result = item.violation.to_sarif()
            result["suppressions"] = [{
                "kind": "external",
                "justification": item.reason,
            }]
            results.append(result)

        return {
            "$schema": self.SARIF_SCHEMA,
            "version": self.SARIF_VERSION,
            "runs": [{
                "tool": {
                    "driver": {
                        "name": self.tool_name,
                        "version": __version__,
                        "rules": self._rules()
                    }
                },
                "results": results
            }]
        }

    def format_to_string(
        self,
        violations: List[Violation],
        suppressed: Optional[List[Suppression]] = None,
        indent: int = 2
    ) -> str:
        """Format violations as SARIF JSON string."""
        return json.dumps(self.format(violations, suppressed), indent=indent, ensure_ascii=False)

    def save(
        self,
        violations: List[Violation],
        output_path: Path,
        suppressed: Optional[List[Suppression]] = None
    ):
        """Save violations as SARIF file."""
        output_path.write_text(self.format_to_string(violations, suppressed), encoding="utf-8")

    def _rules(self) -> List[Dict[str, Any]]:
        """Describe one rule per violation kind."""
        return [
            {
                "id": kind.rule_id,
                "name": kind.value,
                "shortDescription": {"text": kind.title},
                "defaultConfiguration": {"level": "warning"},
                "properties": {
                    "tags": ["security", "external/cwe/cwe-20"]
                }
            }
            for kind in ViolationKind
        ]


def format_sarif(
    violations: List[Violation],
    suppressed: Optional[List[Suppression]] = None
) -> str:
    """Convenience function to format violations as SARIF."""
    return SARIFFormatter().format_to_string(violations, suppressed)
