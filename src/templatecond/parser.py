"""
Parser for the markup of conditional tags.

Turns ``user.age >= 18 and user.country == "NZ"`` into a chain of
Condition objects using pyparsing.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Type
import logging

import pyparsing as pp

from .conditions import Condition
from .errors import ConditionSyntaxError
from .models import BLANK, EMPTY, VariableLookup

logger = logging.getLogger(__name__)


@dataclass
class _Operand:
    """Parsed operand; wraps values pyparsing would otherwise drop (None, False)."""
    value: Any


@dataclass
class _Comparison:
    left: Any
    operator: Optional[str] = None
    right: Any = None


def _keyword(word: str, value: Any) -> pp.ParserElement:
    return pp.Keyword(word).set_parse_action(lambda: _Operand(value))


def _build_grammar():
    """Build the (expression, condition) grammar pair."""
    AND = pp.Keyword("and")
    OR = pp.Keyword("or")
    LBRACK, RBRACK, DOT = map(pp.Suppress, "[].")

    string_literal = (
        pp.QuotedString('"', esc_char="\\") | pp.QuotedString("'", esc_char="\\")
    ).set_parse_action(lambda t: _Operand(t[0]))
    float_literal = pp.Regex(r"-?\d+\.\d+").set_parse_action(lambda t: _Operand(float(t[0])))
    int_literal = pp.Regex(r"-?\d+").set_parse_action(lambda t: _Operand(int(t[0])))

    literal = (
        string_literal
        | float_literal
        | int_literal
        | _keyword("true", True)
        | _keyword("false", False)
        | _keyword("nil", None)
        | _keyword("null", None)
        | _keyword("empty", EMPTY)
        | _keyword("blank", BLANK)
    )

    name = pp.Regex(r"[A-Za-z_][\w-]*\??")
    variable = pp.Forward()
    dot_segment = (DOT + name.copy()).set_parse_action(lambda t: _Operand(t[0]))
    bracket_segment = LBRACK + (string_literal | int_literal | variable) + RBRACK
    variable <<= (~(AND | OR) + name + pp.ZeroOrMore(dot_segment | bracket_segment)).set_parse_action(
        lambda t: _Operand(VariableLookup(t[0], tuple(segment.value for segment in t[1:])))
    )

    expression = literal | variable

    # Symbolic runs ("==", "<>", "~~") or bare words ("contains") that are not and/or
    symbolic_operator = pp.Regex(r"[^\s\w\"'\[\]().-]+")
    word_operator = ~(AND | OR) + pp.Regex(r"[A-Za-z_]\w*")
    operator = symbolic_operator | word_operator
    comparison = (expression + pp.Opt(operator + expression)).set_parse_action(
        lambda t: _Comparison(t[0].value, t[1], t[2].value) if len(t) == 3 else _Comparison(t[0].value)
    )
    condition = comparison + pp.ZeroOrMore((AND | OR) + comparison)

    return expression, condition


_EXPRESSION, _CONDITION = _build_grammar()


def _parse(grammar: pp.ParserElement, markup: str) -> List[Any]:
    try:
        return list(grammar.parse_string(markup, parse_all=True))
    except pp.ParseException as e:
        raise ConditionSyntaxError(
            f"Invalid condition '{markup}': {e.msg} at column {e.col}",
            line=e.lineno,
            column=e.col,
        ) from e


def parse_expression(markup: str) -> Any:
    """Parse a single operand: a literal value or a VariableLookup."""
    return _parse(_EXPRESSION, markup)[0].value


def parse_condition(markup: str, condition_class: Type[Condition] = Condition) -> Condition:
    """Parse tag markup into a condition chain and return its head.

    Logical keywords bind right to left: ``a or b and c`` becomes
    ``a.or_(b.and_(c))``.
    """
    tokens = _parse(_CONDITION, markup)

    comparisons = tokens[0::2]
    relations = tokens[1::2]

    condition = _make(condition_class, comparisons[-1])
    for comparison, relation in zip(reversed(comparisons[:-1]), reversed(relations)):
        head = _make(condition_class, comparison)
        if relation == "and":
            head.and_(condition)
        else:
            head.or_(condition)
        condition = head

    logger.debug(f"Parsed '{markup}' into {len(comparisons)} condition(s)")
    return condition


def _make(condition_class: Type[Condition], comparison: _Comparison) -> Condition:
    return condition_class(comparison.left, comparison.operator, comparison.right)
