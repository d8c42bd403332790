"""Data models."""

from ts_validator.models.violation import RequestField, Violation, ViolationKind

__all__ = ["RequestField", "Violation", "ViolationKind"]
