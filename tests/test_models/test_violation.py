"""Tests for the Violation model."""

import pytest

from ts_validator.models.violation import RequestField, Violation, ViolationKind


class TestViolation:
    """Tests for Violation dataclass."""

    @pytest.fixture
    def sample_violation(self) -> Violation:
        return Violation(
            file="src/routes/users.ts",
            line=12,
            column=5,
            kind=ViolationKind.DIRECT_ACCESS,
            message="Unvalidated direct access: req.body",
        )

    def test_rule_ids(self):
        assert ViolationKind.DIRECT_ACCESS.rule_id == "TSV-001"
        assert ViolationKind.INDIRECT_ACCESS.rule_id == "TSV-002"
        assert ViolationKind.ALIAS.rule_id == "TSV-003"

    def test_violation_rule_id(self, sample_violation):
        assert sample_violation.rule_id == "TSV-001"

    def test_format_location(self, sample_violation):
        assert sample_violation.format_location() == (
            "[src/routes/users.ts:12:5] Unvalidated direct access: req.body"
        )

    def test_to_dict(self, sample_violation):
        data = sample_violation.to_dict()

        assert data == {
            "rule_id": "TSV-001",
            "file": "src/routes/users.ts",
            "line": 12,
            "column": 5,
            "kind": "DirectAccess",
            "message": "Unvalidated direct access: req.body",
        }

    def test_to_sarif(self, sample_violation):
        sarif = sample_violation.to_sarif()

        assert sarif["ruleId"] == "TSV-001"
        assert sarif["level"] == "warning"
        assert sarif["message"]["text"] == "Unvalidated direct access: req.body"
        region = sarif["locations"][0]["physicalLocation"]["region"]
        assert region == {"startLine": 12, "startColumn": 5}
        assert sarif["fingerprints"]["primary"] == sample_violation.fingerprint()

    def test_fingerprint_is_stable(self, sample_violation):
        copy = Violation(
            file="src/routes/users.ts",
            line=12,
            column=9,
            kind=ViolationKind.DIRECT_ACCESS,
            message="Unvalidated direct access: req.body",
        )

        fingerprint = sample_violation.fingerprint()
        assert len(fingerprint) == 16
        assert fingerprint == copy.fingerprint()

    def test_fingerprint_depends_on_line(self, sample_violation):
        moved = Violation(
            file=sample_violation.file,
            line=13,
            column=sample_violation.column,
            kind=sample_violation.kind,
            message=sample_violation.message,
        )

        assert moved.fingerprint() != sample_violation.fingerprint()

    def test_violations_are_hashable(self, sample_violation):
        assert len({sample_violation, sample_violation}) == 1


class TestRequestField:
    """Tests for RequestField lookup."""

    @pytest.mark.parametrize("name,expected", [
        ("body", RequestField.BODY),
        ("params", RequestField.PARAMS),
        ("query", RequestField.QUERY),
        ("headers", None),
        ("Body", None),
    ])
    def test_lookup(self, name, expected):
        assert RequestField.lookup(name) is expected
