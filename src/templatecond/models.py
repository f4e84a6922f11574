"""
Operand expressions and the variable context conditions resolve them against.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence, Sized
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Tuple
import copy
import logging
import re

from .errors import ArgumentError, UndefinedVariable

logger = logging.getLogger(__name__)

_MISSING = object()

# Lookups answered by the value itself when it has no such key or attribute
COMMAND_LOOKUPS = ("size", "first", "last")

_IDENTIFIER = re.compile(r"^[A-Za-z_][\w-]*\??$")


class Expression(ABC):
    """An operand that must be resolved through a context before use."""

    @abstractmethod
    def evaluate(self, context: "Context") -> Any:
        """Resolve this expression to a concrete value."""
        pass


class VariableLookup(Expression):
    """Reference to a context variable, optionally followed by lookups.

    ``user.tags[0]`` is ``VariableLookup("user", ("tags", 0))``. A lookup
    segment may itself be an expression (``items[index]``), resolved before
    it is applied.
    """

    def __init__(self, name: str, lookups: Tuple[Any, ...] = ()):
        self.name = name
        self.lookups = tuple(lookups)

    @property
    def markup(self) -> str:
        parts = [self.name]
        for segment in self.lookups:
            if isinstance(segment, str) and _IDENTIFIER.match(segment):
                parts.append(f".{segment}")
            elif isinstance(segment, str):
                parts.append(f'["{segment}"]')
            else:
                parts.append(f"[{segment}]")
        return "".join(parts)

    def evaluate(self, context: "Context") -> Any:
        value = context.find_variable(self.name)

        for segment in self.lookups:
            key = context.evaluate(segment)
            value = _lookup(value, key)
            if value is _MISSING:
                if context.strict_variables:
                    raise context.undefined(self.markup)
                logger.debug(f"Lookup '{key}' missing in '{self.markup}', resolving to None")
                return None

        return value

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, VariableLookup):
            return NotImplemented
        return self.name == other.name and self.lookups == other.lookups

    def __hash__(self) -> int:
        return hash((self.name, self.lookups))

    def __repr__(self) -> str:
        return f"VariableLookup({self.markup!r})"

    def __str__(self) -> str:
        return self.markup


def _lookup(value: Any, key: Any) -> Any:
    """Apply one lookup segment, returning _MISSING when it does not resolve."""
    if value is None:
        return _MISSING

    if isinstance(value, Mapping):
        try:
            if key in value:
                return value[key]
        except TypeError:
            return _MISSING
    elif isinstance(value, Sequence) and not isinstance(value, str):
        if isinstance(key, int) and not isinstance(key, bool):
            if -len(value) <= key < len(value):
                return value[key]
            return _MISSING
    if isinstance(key, str) and not key.startswith("_") and not isinstance(value, Mapping):
        attr = getattr(value, key, _MISSING)
        if attr is not _MISSING and not callable(attr):
            return attr

    if key in COMMAND_LOOKUPS:
        if key == "size" and isinstance(value, Sized):
            return len(value)
        if isinstance(value, Sequence) and not isinstance(value, str) and value:
            return value[0] if key == "first" else value[-1]

    return _MISSING


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, str):
        return not value.strip()
    return len(value) == 0


def _applies_to_blank(value: Any) -> bool:
    return value is None or isinstance(value, (bool, str, Sized))


# Accessors available on native values that do not define them as methods
NATIVE_ACCESSORS: Dict[str, Tuple[Callable[[Any], bool], Callable[[Any], Any]]] = {
    "empty": (lambda value: isinstance(value, Sized), lambda value: len(value) == 0),
    "size": (lambda value: isinstance(value, Sized), len),
    "blank": (_applies_to_blank, _is_blank),
}


@dataclass(frozen=True)
class MethodLiteral:
    """Marker operand naming a zero-argument accessor on the other operand.

    ``x == empty`` does not compare ``x`` with a value: it asks ``x`` for its
    ``empty`` accessor and uses the answer as the comparison result.
    """

    method_name: str
    text: str = ""

    def supported_by(self, obj: Any) -> bool:
        """Check whether obj exposes this accessor."""
        if callable(getattr(obj, self.method_name, None)):
            return True
        native = NATIVE_ACCESSORS.get(self.method_name)
        return native is not None and native[0](obj)

    def invoke(self, obj: Any) -> Any:
        """Call the accessor on obj."""
        method = getattr(obj, self.method_name, None)
        if callable(method):
            try:
                return method()
            except TypeError as e:
                raise ArgumentError(str(e)) from e

        native = NATIVE_ACCESSORS.get(self.method_name)
        if native is not None and native[0](obj):
            return native[1](obj)

        raise ArgumentError(f"{type(obj).__name__} does not support '{self.method_name}'")

    def __str__(self) -> str:
        return self.text


EMPTY = MethodLiteral("empty", "empty")
BLANK = MethodLiteral("blank", "blank")


class Context:
    """Thread-safe variable store used to resolve condition operands."""

    def __init__(self, values: Optional[Dict[str, Any]] = None, strict_variables: bool = False):
        self.values: Dict[str, Any] = dict(values or {})
        self.strict_variables = strict_variables
        self.undefined_variables: List[str] = []
        self.lock = RLock()

    def set(self, key: str, value: Any):
        """Set a variable."""
        with self.lock:
            self.values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a variable without strict checks."""
        with self.lock:
            return self.values.get(key, default)

    def update(self, values: Dict[str, Any]):
        """Merge several variables into the context."""
        with self.lock:
            self.values.update(values)

    def snapshot(self) -> Dict[str, Any]:
        """Get a shallow copy of all variables."""
        with self.lock:
            return copy.copy(self.values)

    def clone(self) -> "Context":
        """Create an independent context with the same variables and mode."""
        with self.lock:
            return Context(copy.copy(self.values), strict_variables=self.strict_variables)

    def find_variable(self, name: str) -> Any:
        """Look up a top-level variable.

        Missing names resolve to None, or raise UndefinedVariable when the
        context is strict.
        """
        with self.lock:
            if name in self.values:
                return self.values[name]

        if self.strict_variables:
            raise self.undefined(name)
        return None

    def undefined(self, name: str) -> UndefinedVariable:
        """Record a missing variable and build the error reporting it."""
        with self.lock:
            self.undefined_variables.append(name)
        return UndefinedVariable(name)

    def evaluate(self, expression: Any) -> Any:
        """Resolve an operand; anything but an Expression is a literal."""
        if isinstance(expression, Expression):
            return expression.evaluate(self)
        return expression


def is_truthy(value: Any) -> bool:
    """Template truthiness: only None and False are falsy."""
    return value is not None and value is not False


def to_text(value: Any) -> str:
    """Render a value the way templates print it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
