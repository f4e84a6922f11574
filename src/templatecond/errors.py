"""
Exception types raised while building and evaluating conditions.
"""

from typing import Optional


class ConditionError(Exception):
    """Base class for all condition errors."""


class UndefinedVariable(ConditionError):
    """A variable reference could not be resolved by a strict context."""

    def __init__(self, name: str):
        super().__init__(f"Undefined variable '{name}'")
        self.name = name


class UnknownOperator(ConditionError):
    """The requested operator is not registered."""

    def __init__(self, operator: str):
        super().__init__(f"Unknown operator {operator}")
        self.operator = operator


class ArgumentError(ConditionError):
    """An operator was applied to operands of incompatible types."""


class RegistryFrozen(ConditionError):
    """The operator registry was modified after evaluation started."""


class ConditionSyntaxError(ConditionError):
    """Condition markup could not be parsed."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column
