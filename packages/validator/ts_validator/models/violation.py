"""Violation model for unvalidated request input."""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class RequestField(Enum):
    """Request input categories that are tracked."""
    BODY = "body"
    PARAMS = "params"
    QUERY = "query"

    @classmethod
    def lookup(cls, name: str):
        """Return the field named ``name``, or None."""
        for field in cls:
            if field.value == name:
                return field
        return None


class ViolationKind(Enum):
    """How unvalidated input was reached."""
    DIRECT_ACCESS = "DirectAccess"      # req.body
    INDIRECT_ACCESS = "IndirectAccess"  # alias.member
    ALIAS = "Alias"                     # bare alias

    @property
    def rule_id(self) -> str:
        return RULE_IDS[self]

    @property
    def title(self) -> str:
        return RULE_TITLES[self]


RULE_IDS: Dict[ViolationKind, str] = {
    ViolationKind.DIRECT_ACCESS: "TSV-001",
    ViolationKind.INDIRECT_ACCESS: "TSV-002",
    ViolationKind.ALIAS: "TSV-003",
}

RULE_TITLES: Dict[ViolationKind, str] = {
    ViolationKind.DIRECT_ACCESS: "Unvalidated direct access to request input",
    ViolationKind.INDIRECT_ACCESS: "Unvalidated member access through a request alias",
    ViolationKind.ALIAS: "Unvalidated use of a request alias",
}


@dataclass(frozen=True)
class Violation:
    """
    A use of request input inside a route handler before any validation call.

    Line and column are 1-based.
    """
    file: str
    line: int
    column: int
    kind: ViolationKind
    message: str

    @property
    def rule_id(self) -> str:
        return self.kind.rule_id

    def fingerprint(self) -> str:
        """Stable fingerprint used for baselines."""
        raw = "|".join([self.rule_id, self.file, str(self.line), self.message])
        return hashlib.sha256(raw.encode()).hexdigest()[:16]

    def format_location(self) -> str:
        return f"[{self.file}:{self.line}:{self.column}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "rule_id": self.rule_id,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "kind": self.kind.value,
            "message": self.message,
        }

    def to_sarif(self) -> Dict[str, Any]:
        """Convert to SARIF 2.1.0 result format."""
        return {
            "ruleId": self.rule_id,
            "level": "warning",
            "message": {"text": self.message},
            "locations": [{
                "physicalLocation": {
                    "artifactLocation": {"uri": self.file},
                    "region": {
                        "startLine": self.line,
                        "startColumn": self.column,
                    }
                }
            }],
            "fingerprints": {
                "primary": self.fingerprint()
            },
        }
