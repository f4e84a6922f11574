"""
Operator registry for condition comparisons.

Each operator name maps to a rule: either a predicate called with
``(condition, left, right)``, or the name of a comparison capability that
is invoked on the left operand with the right operand as argument.
"""

from typing import Any, Callable, Dict, List, Optional, Union
import logging
import operator

from .errors import ArgumentError, RegistryFrozen
from .models import MethodLiteral, is_truthy, to_text

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, Any, Any], Any]
Rule = Union[Predicate, str]

# Dunder capabilities dispatched through the operator module so that
# mismatched operand types raise TypeError instead of returning NotImplemented
ORDERING = {
    "__lt__": operator.lt,
    "__gt__": operator.gt,
    "__le__": operator.le,
    "__ge__": operator.ge,
}


def equal_variables(left: Any, right: Any) -> Any:
    """Equality with method-literal dereference.

    When one side is a MethodLiteral, the accessor it names is invoked on the
    other side and its answer is the result (None when unsupported).
    """
    if isinstance(left, MethodLiteral):
        return left.invoke(right) if left.supported_by(right) else None

    if isinstance(right, MethodLiteral):
        return right.invoke(left) if right.supported_by(left) else None

    # Booleans only ever equal booleans
    if isinstance(left, bool) != isinstance(right, bool):
        return False

    return left == right


def supports_capability(value: Any, name: str) -> bool:
    """Check whether value exposes the named comparison capability."""
    if value is None or isinstance(value, bool):
        return False

    attr = getattr(type(value), name, None)
    if attr is None or not callable(attr):
        return False

    # Every object inherits rich comparisons from object; only overrides count
    if name.startswith("__") and attr is getattr(object, name, None):
        return False

    return True


def invoke_capability(name: str, left: Any, right: Any) -> Any:
    """Invoke left's capability with right, surfacing type mismatches."""
    try:
        if name in ORDERING:
            return ORDERING[name](left, right)
        return getattr(left, name)(right)
    except (TypeError, ValueError) as e:
        raise ArgumentError(str(e)) from e


def _equal(condition: Any, left: Any, right: Any) -> Any:
    return equal_variables(left, right)


def _not_equal(condition: Any, left: Any, right: Any) -> bool:
    return not is_truthy(equal_variables(left, right))


def _contains(condition: Any, left: Any, right: Any) -> bool:
    if not (is_truthy(left) and is_truthy(right)):
        return False
    if not hasattr(type(left), "__contains__"):
        return False

    if isinstance(left, str):
        right = to_text(right)

    try:
        return right in left
    except TypeError as e:
        raise ArgumentError(str(e)) from e


class OperatorRegistry:
    """Registry mapping operator names to evaluation rules.

    Registration is a configuration step: once frozen (the registry bound to
    Condition is frozen by the first evaluation), further changes raise
    RegistryFrozen.
    """

    def __init__(self, rules: Optional[Dict[str, Rule]] = None):
        self.rules: Dict[str, Rule] = {}
        self._frozen = False

        for name, rule in (rules or {}).items():
            self.register(name, rule)

    @classmethod
    def with_builtins(cls) -> "OperatorRegistry":
        """Create an unfrozen registry holding the built-in operators."""
        return cls({
            "==": _equal,
            "!=": _not_equal,
            "<>": _not_equal,
            "<": "__lt__",
            ">": "__gt__",
            ">=": "__ge__",
            "<=": "__le__",
            "contains": _contains,
        })

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self):
        """Make the registry read-only."""
        if not self._frozen:
            logger.debug(f"Freezing operator registry with {len(self.rules)} operators")
        self._frozen = True

    def register(self, name: str, rule: Rule):
        """Register a predicate or capability name under an operator name."""
        if self._frozen:
            raise RegistryFrozen(f"Cannot register operator '{name}': registry is frozen")
        if not name or any(ch.isspace() for ch in name):
            raise ValueError(f"Invalid operator name: {name!r}")
        if not (callable(rule) or isinstance(rule, str)):
            raise ValueError(f"Operator '{name}' rule must be callable or a capability name")

        if name in self.rules:
            logger.info(f"Replacing operator '{name}'")
        self.rules[name] = rule

    def unregister(self, name: str):
        """Remove an operator."""
        if self._frozen:
            raise RegistryFrozen(f"Cannot unregister operator '{name}': registry is frozen")
        self.rules.pop(name, None)

    def lookup(self, name: str) -> Optional[Rule]:
        """Get the rule for an operator, or None if unknown."""
        return self.rules.get(name)

    def names(self) -> List[str]:
        return sorted(self.rules)

    def copy(self) -> "OperatorRegistry":
        """Create an unfrozen copy."""
        return OperatorRegistry(dict(self.rules))

    def __contains__(self, name: object) -> bool:
        return name in self.rules

    def __len__(self) -> int:
        return len(self.rules)


# Process-wide registry used by Condition
DEFAULT_OPERATORS = OperatorRegistry.with_builtins()
