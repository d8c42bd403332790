"""Route handler analysis."""

from ts_validator.analysis.analyzer import AnalysisResult, FileSummary, analyze_modules
from ts_validator.analysis.validation import ValidationRuleSet, is_validation_call
from ts_validator.analysis.visitor import count_controllers, visit_module

__all__ = [
    "AnalysisResult",
    "FileSummary",
    "ValidationRuleSet",
    "analyze_modules",
    "count_controllers",
    "is_validation_call",
    "visit_module",
]
