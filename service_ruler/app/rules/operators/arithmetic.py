"""
Computed operands.

Arithmetic operators are operands themselves: resolving one resolves its
children, applies the operation on their Values and wraps the number in a
new Value. Non-numeric inputs raise RuleArithmeticError and zero divisors
raise DivisionByZeroError.
"""

from abc import abstractmethod
from decimal import DecimalException
from typing import List

from shared.errors import RuleArithmeticError
from ..operands import Operand
from ..value import Number, Value, ValueKind
from .base import Cardinality, Operator


class ArithmeticOperator(Operator, Operand):
    """Binary computed operand."""

    cardinality = Cardinality.BINARY
    child_type = Operand

    def prepare_value(self, context) -> Value:
        values = [operand.prepare_value(context) for operand in self._operands]
        return Value(self.compute(*values))

    @abstractmethod
    def compute(self, *values: Value) -> Number:
        """Combine the resolved child values into a number."""


class Addition(ArithmeticOperator):
    def compute(self, left: Value, right: Value) -> Number:
        return left.add(right)


class Subtraction(ArithmeticOperator):
    def compute(self, left: Value, right: Value) -> Number:
        return left.subtract(right)


class Multiplication(ArithmeticOperator):
    def compute(self, left: Value, right: Value) -> Number:
        return left.multiply(right)


class Division(ArithmeticOperator):
    def compute(self, left: Value, right: Value) -> Number:
        return left.divide(right)


class Modulo(ArithmeticOperator):
    def compute(self, left: Value, right: Value) -> Number:
        return left.modulo(right)


class Exponentiate(ArithmeticOperator):
    def compute(self, left: Value, right: Value) -> Number:
        return left.exponentiate(right)


class Negation(ArithmeticOperator):
    cardinality = Cardinality.UNARY

    def compute(self, value: Value) -> Number:
        return value.negate()


class Ceil(ArithmeticOperator):
    cardinality = Cardinality.UNARY

    def compute(self, value: Value) -> Number:
        return value.ceil()


class Floor(ArithmeticOperator):
    cardinality = Cardinality.UNARY

    def compute(self, value: Value) -> Number:
        return value.floor()


def _numbers(values) -> List[Number]:
    """Numbers from values, flattening sequence values one level."""
    numbers = []
    for value in values:
        if value.kind is ValueKind.SEQUENCE:
            numbers.extend(Value(item).to_number() for item in value.get_value())
        else:
            numbers.append(value.to_number())
    if not numbers:
        raise RuleArithmeticError("Arithmetic: no values to compare")
    return numbers


def _pick(extreme, values) -> Number:
    try:
        return extreme(_numbers(values))
    except DecimalException as e:
        raise RuleArithmeticError(str(e) or "Arithmetic: values are not ordered") from e


class Min(ArithmeticOperator):
    """Smallest number among the operands."""

    cardinality = Cardinality.MULTIPLE

    def compute(self, *values: Value) -> Number:
        return _pick(min, values)


class Max(ArithmeticOperator):
    """Largest number among the operands."""

    cardinality = Cardinality.MULTIPLE

    def compute(self, *values: Value) -> Number:
        return _pick(max, values)
