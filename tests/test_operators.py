"""
Tests for the operator registry.
"""

import pytest

from templatecond.conditions import Condition, coerce_operands, integer_form
from templatecond.errors import RegistryFrozen, UnknownOperator
from templatecond.operators import (
    DEFAULT_OPERATORS,
    OperatorRegistry,
    equal_variables,
    supports_capability,
)


def test_builtin_operator_names():
    registry = OperatorRegistry.with_builtins()

    assert registry.names() == ["!=", "<", "<=", "<>", "==", ">", ">=", "contains"]
    assert "==" in registry
    assert "~~" not in registry
    assert len(registry) == 8
    assert registry.lookup("<") == "__lt__"
    assert registry.lookup("~~") is None
    assert not registry.frozen


def test_register_capability_name():
    registry = OperatorRegistry.with_builtins()
    registry.register("startswith", "startswith")

    class PrefixCondition(Condition):
        operators = registry

    assert PrefixCondition("hello", "startswith", "he").evaluate() is True
    assert PrefixCondition("hello", "startswith", "lo").evaluate() is False
    assert PrefixCondition(5, "startswith", "5").evaluate() is None

    with pytest.raises(UnknownOperator):
        Condition("hello", "startswith", "he").evaluate()


def test_register_predicate():
    registry = OperatorRegistry.with_builtins()
    registry.register("divisible_by", lambda condition, left, right: left % right == 0)

    class ArithmeticCondition(Condition):
        operators = registry

    # "5" is coerced to 5 before the predicate runs
    assert ArithmeticCondition(10, "divisible_by", "5").evaluate() is True
    assert ArithmeticCondition(10, "divisible_by", 3).evaluate() is False


def test_predicate_receives_condition():
    seen = []
    registry = OperatorRegistry()
    registry.register("spy", lambda condition, left, right: seen.append(condition) or True)

    class SpyCondition(Condition):
        operators = registry

    condition = SpyCondition(1, "spy", 2)
    assert condition.evaluate() is True
    assert seen == [condition]


def test_registry_frozen_after_evaluation():
    registry = OperatorRegistry.with_builtins()

    class FrozenCondition(Condition):
        operators = registry

    FrozenCondition(1, "==", 1).evaluate()

    assert registry.frozen
    with pytest.raises(RegistryFrozen):
        registry.register("~~", lambda condition, left, right: True)
    with pytest.raises(RegistryFrozen):
        registry.unregister("==")


def test_default_registry_frozen_after_evaluation():
    Condition(1, "==", 1).evaluate()

    assert DEFAULT_OPERATORS.frozen
    with pytest.raises(RegistryFrozen):
        DEFAULT_OPERATORS.register("~~", lambda condition, left, right: True)


def test_copy_is_unfrozen():
    registry = OperatorRegistry.with_builtins()
    registry.freeze()

    copied = registry.copy()
    copied.register("~~", lambda condition, left, right: True)

    assert "~~" in copied
    assert "~~" not in registry


def test_unregister():
    registry = OperatorRegistry.with_builtins()
    registry.unregister("contains")
    registry.unregister("missing")

    assert "contains" not in registry


@pytest.mark.parametrize("name", ["", "a b", " "])
def test_register_rejects_bad_names(name):
    with pytest.raises(ValueError):
        OperatorRegistry().register(name, "__eq__")


def test_register_rejects_bad_rules():
    with pytest.raises(ValueError):
        OperatorRegistry().register("~~", 5)


def test_equal_variables():
    assert equal_variables(1, 1) is True
    assert equal_variables("a", "b") is False
    assert equal_variables(1, True) is False
    assert equal_variables(True, True) is True
    assert equal_variables(None, None) is True


@pytest.mark.parametrize(
    "value, name, expected",
    [
        (1, "__lt__", True),
        ("a", "__lt__", True),
        (None, "__lt__", False),
        (True, "__lt__", False),
        (object(), "__lt__", False),
        ("a", "startswith", True),
        (1, "startswith", False),
    ],
)
def test_supports_capability(value, name, expected):
    assert supports_capability(value, name) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (12, 12),
        ("12", 12),
        ("-5", -5),
        ("012", None),
        ("1.0", None),
        (1.0, None),
        (True, None),
        (None, None),
        ("abc", None),
        ([1], None),
    ],
)
def test_integer_form(value, expected):
    assert integer_form(value) == expected


@pytest.mark.parametrize(
    "left, right, expected",
    [
        ("1", 1, (1, 1)),
        ("-5", -5, (-5, -5)),
        ("01", 1, ("01", 1)),
        (1.0, 1, (1.0, 1)),
        (True, "false", ("true", "false")),
        (True, False, ("true", "false")),
        ("a", "b", ("a", "b")),
        ("a", 1, ("a", 1)),
        (None, 1, (None, 1)),
    ],
)
def test_coerce_operands(left, right, expected):
    assert coerce_operands(left, right) == expected
