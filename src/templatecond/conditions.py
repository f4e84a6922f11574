"""
Condition evaluation for template branching tags.

A Condition holds one comparison and optionally a chained condition joined
by ``and``/``or``. The tag that owns it renders its attachment when the
condition evaluates truthy.

Example:

    c = Condition(1, "==", 1)
    c.evaluate()  # True
"""

from enum import Enum
from typing import Any, Optional, Tuple
import logging

from .errors import UndefinedVariable, UnknownOperator
from .models import Context, is_truthy, to_text
from .operators import DEFAULT_OPERATORS, OperatorRegistry, Rule, invoke_capability, supports_capability

logger = logging.getLogger(__name__)

_BOOLEAN_TEXT = ("true", "false")


class Relation(Enum):
    """Logical relation between a condition and its child."""
    AND = "and"
    OR = "or"


class Condition:
    """A comparison, its chained sibling, and the payload it guards."""

    operators: OperatorRegistry = DEFAULT_OPERATORS

    def __init__(self, left: Any = None, operator: Optional[str] = None, right: Any = None):
        self.left = left
        self.operator = operator
        self.right = right
        self._child_relation: Optional[Relation] = None
        self._child_condition: Optional["Condition"] = None
        self._attachment: Any = None

    @property
    def child_relation(self) -> Optional[Relation]:
        return self._child_relation

    @property
    def child_condition(self) -> Optional["Condition"]:
        return self._child_condition

    @property
    def attachment(self) -> Any:
        return self._attachment

    def evaluate(self, context: Optional[Context] = None) -> Any:
        """Evaluate this condition and its chain against a context.

        Returns the comparison result, or the resolved left operand itself
        when no operator is set. Chained conditions are only evaluated when
        they can change the outcome.
        """
        if context is None:
            context = Context()

        result = self._interpret_condition(context)

        if self._child_relation is Relation.OR:
            return result if is_truthy(result) else self._child_condition.evaluate(context)
        if self._child_relation is Relation.AND:
            return self._child_condition.evaluate(context) if is_truthy(result) else result
        return result

    def or_(self, condition: "Condition") -> "Condition":
        """Chain condition with a logical or, replacing any previous child."""
        self._child_relation = Relation.OR
        self._child_condition = condition
        return self

    def and_(self, condition: "Condition") -> "Condition":
        """Chain condition with a logical and, replacing any previous child."""
        self._child_relation = Relation.AND
        self._child_condition = condition
        return self

    def attach(self, attachment: Any) -> Any:
        """Store the payload rendered when this condition holds."""
        self._attachment = attachment
        return attachment

    def is_else(self) -> bool:
        return False

    def describe(self) -> str:
        """Human-readable form, e.g. ``user.age >= 18``."""
        parts = [self.left, self.operator, self.right]
        return " ".join(to_text(part) for part in parts if part is not None)

    def __repr__(self) -> str:
        return f"<Condition {self.describe()}>"

    def _interpret_condition(self, context: Context) -> Any:
        left = self._resolve(self.left, context)

        # No operator: the condition is a single value, used as-is
        if self.operator is None:
            return left

        right = self._resolve(self.right, context)
        left, right = coerce_operands(left, right)

        rule = self._operation_for(self.operator)

        if callable(rule):
            return rule(self, left, right)

        if supports_capability(left, rule) and supports_capability(right, rule):
            return invoke_capability(rule, left, right)

        logger.debug(
            f"Operator '{self.operator}' unsupported for "
            f"{type(left).__name__} and {type(right).__name__}"
        )
        return None

    def _resolve(self, expression: Any, context: Context) -> Any:
        try:
            return context.evaluate(expression)
        except UndefinedVariable as e:
            logger.debug(f"{e}; treating as nil")
            return None

    def _operation_for(self, operator: str) -> Rule:
        registry = type(self).operators
        registry.freeze()

        rule = registry.lookup(operator)
        if rule is None:
            raise UnknownOperator(operator)
        return rule


class ElseCondition(Condition):
    """Default branch: always holds and ignores any chained condition."""

    def evaluate(self, context: Optional[Context] = None) -> bool:
        return True

    def is_else(self) -> bool:
        return True

    def describe(self) -> str:
        return "else"

    def __repr__(self) -> str:
        return "<ElseCondition>"


def integer_form(value: Any) -> Optional[int]:
    """Integer value of value if its text round-trips through int, else None.

    ``"12"`` and ``12`` qualify; ``"012"``, ``"1.0"``, ``1.0`` and booleans
    do not.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
        round_trips = str(number) == str(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if round_trips else None


def _is_boolean_like(value: Any) -> bool:
    return value is True or value is False or (isinstance(value, str) and value in _BOOLEAN_TEXT)


def _is_string(value: Any) -> bool:
    return isinstance(value, str) and str(value) == value


def coerce_operands(left: Any, right: Any) -> Tuple[Any, Any]:
    """Bring a resolved operand pair to comparable types.

    Integer-like pairs become ints; boolean-like or string pairs become text.
    Anything else is returned unchanged.
    """
    left_int = integer_form(left)
    right_int = integer_form(right)
    if left_int is not None and right_int is not None:
        return left_int, right_int

    if (_is_boolean_like(left) and _is_boolean_like(right)) or (_is_string(left) and _is_string(right)):
        return to_text(left), to_text(right)

    return left, right
