"""
templatecond: boolean condition evaluation for template branching tags.
"""

__version__ = "0.1.0"

from .blocks import ConditionalBlock
from .conditions import Condition, ElseCondition, Relation, coerce_operands
from .errors import (
    ArgumentError,
    ConditionError,
    ConditionSyntaxError,
    RegistryFrozen,
    UndefinedVariable,
    UnknownOperator,
)
from .models import BLANK, EMPTY, Context, Expression, MethodLiteral, VariableLookup, is_truthy
from .operators import DEFAULT_OPERATORS, OperatorRegistry
from .parser import parse_condition, parse_expression

__all__ = [
    "ArgumentError",
    "BLANK",
    "Condition",
    "ConditionError",
    "ConditionSyntaxError",
    "ConditionalBlock",
    "Context",
    "DEFAULT_OPERATORS",
    "EMPTY",
    "ElseCondition",
    "Expression",
    "MethodLiteral",
    "OperatorRegistry",
    "RegistryFrozen",
    "Relation",
    "UndefinedVariable",
    "UnknownOperator",
    "VariableLookup",
    "coerce_operands",
    "is_truthy",
    "parse_condition",
    "parse_expression",
]
