"""Runs handler analysis across parsed modules and aggregates the results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List

from ts_validator.analysis.validation import ValidationRuleSet
from ts_validator.analysis.visitor import count_controllers, visit_module
from ts_validator.models.violation import Violation, ViolationKind
from ts_validator.parsers.typescript import ParsedModule

logger = logging.getLogger(__name__)


def display_name(path: Path) -> str:
    """Short name for status lines: the file and its parent directory."""
    parts = path.parts[-2:]
    return "/".join(parts)


@dataclass
class FileSummary:
    """Per-file analysis summary for reporting."""
    file: str
    controllers: int
    violations: int

    @property
    def status(self) -> str:
        if self.controllers:
            return f"📦 {self.file} — {self.controllers} controllers found"
        if not self.violations:
            return f"✅ {self.file} — No violations found"
        return f"❗ {self.file} — Found {self.violations} violations"

    def to_dict(self) -> Dict[str, object]:
        return {
            "file": self.file,
            "controllers": self.controllers,
            "violations": self.violations,
        }


@dataclass
class AnalysisResult:
    """Violations of an analysis run, in module order then traversal order."""
    rules: ValidationRuleSet
    violations: List[Violation] = field(default_factory=list)
    files: List[FileSummary] = field(default_factory=list)
    skipped: int = 0

    @property
    def files_analyzed(self) -> int:
        return len(self.files)

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def controllers_per_file(self) -> Dict[str, int]:
        return {f.file: f.controllers for f in self.files if f.controllers}

    @property
    def total_controllers(self) -> int:
        return sum(f.controllers for f in self.files)

    def count_by_kind(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in ViolationKind}
        for violation in self.violations:
            counts[violation.kind.value] += 1
        return counts


def analyze_modules(modules: Iterable[ParsedModule], rules: ValidationRuleSet) -> AnalysisResult:
    """
    Analyze parsed modules and collect their violations.

    Violations are concatenated in input order; nothing is sorted,
    deduplicated or filtered here. A module whose tree is too deep to
    traverse is counted in ``skipped`` and contributes nothing.

    Args:
        modules: Parsed modules, in the order they should be reported
        rules: Validation rule set in effect

    Returns:
        AnalysisResult with all violations and one summary per analyzed module
    """
    result = AnalysisResult(rules=rules)

    for parsed in modules:
        try:
            controllers = count_controllers(parsed.module)
            violations = visit_module(parsed.source_map, parsed.module, rules)
        except RecursionError:
            logger.warning(f"Skipping {parsed.path}: syntax tree is nested too deeply")
            result.skipped += 1
            continue

        result.files.append(FileSummary(
            file=display_name(parsed.path),
            controllers=controllers,
            violations=len(violations),
        ))
        result.violations.extend(violations)

    logger.debug(
        f"Analyzed {result.files_analyzed} files: "
        f"{result.total_controllers} controllers, {result.violation_count} violations"
    )
    return result
