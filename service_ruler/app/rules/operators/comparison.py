"""
Comparison operators.

Each resolves its operands to Values through the context, left to right,
and asks one Value method for the answer. Failures raised while resolving
or comparing propagate unchanged.
"""

from typing import List

from ..operands import Operand, Variable
from ..value import Value
from .base import Cardinality, Operator, Proposition


class ComparisonOperator(Operator, Proposition):
    """Binary proposition over two operands."""

    cardinality = Cardinality.BINARY
    child_type = Operand

    def _prepare(self, context) -> List[Value]:
        return [operand.prepare_value(context) for operand in self._operands]


class EqualTo(ComparisonOperator):
    """left == right, with type widening."""

    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.equal_to(right)


class NotEqualTo(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return not left.equal_to(right)


class SameAs(ComparisonOperator):
    """left and right have the same type and value."""

    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.same_as(right)


class NotSameAs(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return not left.same_as(right)


class GreaterThan(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.greater_than(right)


class GreaterThanOrEqualTo(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.greater_than(right) or left.equal_to(right)


class LessThan(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.less_than(right)


class LessThanOrEqualTo(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.less_than(right) or left.equal_to(right)


class In(ComparisonOperator):
    """left is an element (or substring) of right."""

    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.is_in(right)


class NotIn(ComparisonOperator):
    """
    Plain negation of In.

    A right operand that cannot contain anything makes In false, and so
    NotIn true.
    """

    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.is_in(right) is False


class Contains(ComparisonOperator):
    """left holds right as an element (or substring)."""

    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.contains(right)


class NotContains(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return not left.contains(right)


class StartsWith(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.starts_with(right)


class EndsWith(ComparisonOperator):
    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.ends_with(right)


class InIpRange(ComparisonOperator):
    """left is an IPv4 address inside one of the ranges in right."""

    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.in_ip_range(right)


class AfterThan(ComparisonOperator):
    """left is a later instant than right."""

    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.after_than(right)


class BeforeThan(ComparisonOperator):
    """left is an earlier instant than right."""

    def evaluate(self, context) -> bool:
        left, right = self._prepare(context)
        return left.before_than(right)


class Exists(ComparisonOperator):
    """
    The operand is present.

    A Variable exists when the context holds its fact (or it has a non-null
    default); it is not resolved, so a missing fact never raises here. Any
    other operand exists when it resolves to a non-null value.
    """

    cardinality = Cardinality.UNARY

    def evaluate(self, context) -> bool:
        operand = self._operands[0]
        if isinstance(operand, Variable):
            return operand.is_defined(context)
        return not operand.prepare_value(context).is_null
