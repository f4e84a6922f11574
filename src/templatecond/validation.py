"""
Validation and linting for condition chains.
"""

from enum import Enum
from typing import Iterator, List, Optional, Sequence, Union
from dataclasses import dataclass

from .conditions import Condition
from .errors import ConditionError
from .operators import OperatorRegistry


class Severity(Enum):
    """Diagnostic severity levels."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class Diagnostic:
    """A validation diagnostic."""
    rule: str
    severity: Severity
    message: str
    condition: Optional[Condition] = None
    fix: Optional[str] = None


def walk_chain(head: Condition) -> Iterator[Condition]:
    """Yield each condition of a chain once, stopping at a repeat."""
    seen = set()
    current: Optional[Condition] = head
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.child_condition


class LintRule:
    """Base class for lint rules."""

    def __init__(self, name: str):
        self.name = name

    def apply(self, branches: List[Condition], registry: OperatorRegistry) -> List[Diagnostic]:
        """Apply the rule to the branch heads and return diagnostics."""
        raise NotImplementedError


class UnknownOperatorRule(LintRule):
    """Every operator must be registered."""

    def __init__(self):
        super().__init__("unknown_operator")

    def apply(self, branches: List[Condition], registry: OperatorRegistry) -> List[Diagnostic]:
        diagnostics = []

        for head in branches:
            for condition in walk_chain(head):
                if condition.is_else() or condition.operator is None:
                    continue
                if condition.operator not in registry:
                    diagnostics.append(Diagnostic(
                        rule=self.name,
                        severity=Severity.ERROR,
                        message=f"Unknown operator '{condition.operator}' in '{condition.describe()}'",
                        condition=condition,
                        fix=f"Use one of: {', '.join(registry.names())}"
                    ))

        return diagnostics


class ChainCycleRule(LintRule):
    """Chains must be finite."""

    def __init__(self):
        super().__init__("chain_cycle")

    def apply(self, branches: List[Condition], registry: OperatorRegistry) -> List[Diagnostic]:
        diagnostics = []

        for head in branches:
            last = None
            for last in walk_chain(head):
                pass
            if last is not None and last.child_condition is not None:
                diagnostics.append(Diagnostic(
                    rule=self.name,
                    severity=Severity.ERROR,
                    message=f"Condition chain starting at '{head.describe()}' loops back to "
                            f"'{last.child_condition.describe()}'",
                    condition=head
                ))

        return diagnostics


class ElseWithChildrenRule(LintRule):
    """Else conditions ignore chained conditions."""

    def __init__(self):
        super().__init__("else_with_children")

    def apply(self, branches: List[Condition], registry: OperatorRegistry) -> List[Diagnostic]:
        diagnostics = []

        for head in branches:
            for condition in walk_chain(head):
                if condition.is_else() and condition.child_condition is not None:
                    diagnostics.append(Diagnostic(
                        rule=self.name,
                        severity=Severity.WARNING,
                        message="Else condition has a chained condition that is never evaluated",
                        condition=condition,
                        fix="Remove the and/or link from the else branch"
                    ))

        return diagnostics


class ElsePositionRule(LintRule):
    """At most one else branch, and it must come last."""

    def __init__(self):
        super().__init__("else_position")

    def apply(self, branches: List[Condition], registry: OperatorRegistry) -> List[Diagnostic]:
        else_indexes = [i for i, branch in enumerate(branches) if branch.is_else()]

        if len(else_indexes) > 1:
            return [Diagnostic(
                rule=self.name,
                severity=Severity.ERROR,
                message=f"Block has {len(else_indexes)} else branches, expected at most 1",
                condition=branches[else_indexes[1]]
            )]

        if else_indexes and else_indexes[0] != len(branches) - 1:
            return [Diagnostic(
                rule=self.name,
                severity=Severity.ERROR,
                message="Else branch must be the last branch",
                condition=branches[else_indexes[0]]
            )]

        return []


# Built-in rules registry
BUILT_IN_RULES = [
    UnknownOperatorRule(),
    ChainCycleRule(),
    ElseWithChildrenRule(),
    ElsePositionRule(),
]


def validate(
    target: Union[Condition, Sequence[Condition]],
    registry: Optional[OperatorRegistry] = None,
    extra_rules: Optional[List[LintRule]] = None,
) -> List[Diagnostic]:
    """Validate a condition chain, or a block's branch heads, and return diagnostics."""
    branches = [target] if isinstance(target, Condition) else list(target)
    if registry is None:
        registry = Condition.operators

    rules = BUILT_IN_RULES.copy()
    if extra_rules:
        rules.extend(extra_rules)

    diagnostics = []
    for rule in rules:
        diagnostics.extend(rule.apply(branches, registry))

    return diagnostics


def validate_or_raise(
    target: Union[Condition, Sequence[Condition]],
    registry: Optional[OperatorRegistry] = None,
    extra_rules: Optional[List[LintRule]] = None,
) -> List[Diagnostic]:
    """Validate and raise ConditionError on errors."""
    diagnostics = validate(target, registry, extra_rules)

    errors = [d for d in diagnostics if d.severity == Severity.ERROR]
    if errors:
        error_messages = [f"{d.rule}: {d.message}" for d in errors]
        raise ConditionError(f"Validation failed with {len(errors)} errors:\n" + "\n".join(error_messages))

    return diagnostics
