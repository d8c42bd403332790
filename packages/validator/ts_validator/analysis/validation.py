"""Validation call classification."""

from enum import Enum
from typing import FrozenSet

from ts_validator.parsers.nodes import Call, IdentProp, Member, Node


class ValidationRuleSet(Enum):
    """Selects which method names count as validating request input."""

    ZOD_STRICT = "zod-strict"    # .parse() only
    ZOD_LENIENT = "zod-lenient"  # .parse() or .safeParse()
    CUSTOM = "custom"            # .parse() or .validate()

    @property
    def accepted_names(self) -> FrozenSet[str]:
        return ACCEPTED_CALL_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> "ValidationRuleSet":
        """Look up a rule set by its CLI name, e.g. ``zod-lenient``."""
        normalized = name.strip().lower().replace("_", "-")
        for rules in cls:
            if rules.value == normalized:
                return rules
        raise ValueError(f"Unknown rule set: {name!r}")


ACCEPTED_CALL_NAMES = {
    ValidationRuleSet.ZOD_STRICT: frozenset({"parse"}),
    ValidationRuleSet.ZOD_LENIENT: frozenset({"parse", "safeParse"}),
    ValidationRuleSet.CUSTOM: frozenset({"parse", "validate"}),
}


def is_validation_call(node: Node, rules: ValidationRuleSet) -> bool:
    """
    Check whether ``node`` looks like a validation call, e.g. ``schema.parse(x)``.

    Only the method name matters: the callee must be a property access with a
    plain property name accepted by ``rules``. The receiver is ignored.
    """
    if not isinstance(node, Call):
        return False
    callee = node.callee
    if not isinstance(callee, Member) or not isinstance(callee.prop, IdentProp):
        return False
    return callee.prop.name in rules.accepted_names
