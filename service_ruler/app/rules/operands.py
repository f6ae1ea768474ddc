"""
Operands: nodes that resolve to a Value given a Context.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from shared.errors import InvalidArgumentError, UndefinedFactError
from .value import Value

_MISSING = object()


class Operand(ABC):
    """Anything that can be resolved to a Value against a Context."""

    __slots__ = ()

    @abstractmethod
    def prepare_value(self, context) -> Value:
        """Resolve this operand to a Value."""


class Variable(Operand):
    """
    A named fact.

    Resolution asks the context for the fact under this name. When the
    context has no such fact the default is used; a variable built without
    a default raises UndefinedFactError instead.
    """

    __slots__ = ("_name", "_default")

    def __init__(self, name: str, default: Any = _MISSING):
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("Variable name must be a non-empty string", {"name": repr(name)})
        self._name = name
        self._default = default if default is _MISSING else Value(default)

    @property
    def name(self) -> str:
        return self._name

    @property
    def has_default(self) -> bool:
        return self._default is not _MISSING

    @property
    def default(self) -> Optional[Value]:
        return self._default if self.has_default else None

    def is_defined(self, context) -> bool:
        """True when the context holds this fact or a non-null default exists."""
        if context.has_fact(self._name):
            return True
        return self.has_default and not self._default.is_null

    def prepare_value(self, context) -> Value:
        if context.has_fact(self._name):
            return Value(context.get_fact(self._name))
        if not self.has_default:
            raise UndefinedFactError(self._name)
        return self._default

    def __repr__(self) -> str:
        if self.has_default:
            return f"Variable({self._name!r}, default={self._default.get_value()!r})"
        return f"Variable({self._name!r})"


class Literal(Operand):
    """A constant; ignores the context."""

    __slots__ = ("_value",)

    def __init__(self, value: Any):
        self._value = Value(value)

    @property
    def value(self) -> Value:
        return self._value

    def prepare_value(self, context) -> Value:
        return self._value

    def __repr__(self) -> str:
        return f"Literal({self._value.get_value()!r})"
