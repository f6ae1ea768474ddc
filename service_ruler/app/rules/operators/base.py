"""
Operator and Proposition base types.

An Operator owns an ordered, fixed tuple of children. How many children an
operator kind takes is declared as data (its ``cardinality``) and checked
once, when the operator is built, so a malformed rule fails before any
evaluation is attempted.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Tuple

from shared.errors import InvalidArgumentError


class Cardinality(Enum):
    """Allowed child counts, as (minimum, maximum or None)."""
    UNARY = (1, 1)
    BINARY = (2, 2)
    MULTIPLE = (1, None)
    VARIADIC = (0, None)

    def __init__(self, minimum: int, maximum: Optional[int]):
        self.minimum = minimum
        self.maximum = maximum

    def accepts(self, count: int) -> bool:
        if count < self.minimum:
            return False
        return self.maximum is None or count <= self.maximum

    def check(self, owner: str, count: int) -> None:
        if self.accepts(count):
            return
        if self.maximum is None:
            expected = f"at least {self.minimum}"
        else:
            expected = f"exactly {self.minimum}"
        raise InvalidArgumentError(
            f"{owner} takes {expected} operand(s), got {count}",
            {"operator": owner, "cardinality": self.name, "count": count}
        )


class Proposition(ABC):
    """A node that evaluates to a boolean given a Context."""

    @abstractmethod
    def evaluate(self, context) -> bool:
        """Evaluate against the context."""

    def __and__(self, other: "Proposition") -> "Proposition":
        from .logical import LogicalAnd
        return LogicalAnd(self, other)

    def __or__(self, other: "Proposition") -> "Proposition":
        from .logical import LogicalOr
        return LogicalOr(self, other)

    def __xor__(self, other: "Proposition") -> "Proposition":
        from .logical import LogicalXor
        return LogicalXor(self, other)

    def __invert__(self) -> "Proposition":
        from .logical import LogicalNot
        return LogicalNot(self)


class Operator:
    """
    Base for every operator.

    Subclasses declare ``cardinality`` and ``child_type``; the constructor
    validates both. Children are stored as a tuple and there is no API to
    add or replace them, so operator trees cannot grow cycles.
    """

    cardinality: Cardinality = Cardinality.MULTIPLE
    child_type: type = object

    def __init__(self, *operands):
        # Accept Operator([a, b]) as well as Operator(a, b)
        if len(operands) == 1 and isinstance(operands[0], (list, tuple)):
            operands = tuple(operands[0])

        owner = type(self).__name__
        self.cardinality.check(owner, len(operands))
        for position, operand in enumerate(operands):
            if not isinstance(operand, self.child_type):
                raise InvalidArgumentError(
                    f"{owner} operand {position} must be a {self.child_type.__name__}, "
                    f"got {type(operand).__name__}",
                    {"operator": owner, "position": position}
                )
        self._operands: Tuple = tuple(operands)

    @property
    def operands(self) -> Tuple:
        return self._operands

    def __repr__(self) -> str:
        inner = ", ".join(repr(operand) for operand in self._operands)
        return f"{type(self).__name__}({inner})"
