"""
Logical operators: combine child propositions into one boolean.
"""

from .base import Cardinality, Operator, Proposition


class LogicalOperator(Operator, Proposition):
    """Proposition over child propositions."""

    cardinality = Cardinality.VARIADIC
    child_type = Proposition


class LogicalAnd(LogicalOperator):
    """
    True when every child is true; true with no children.

    Children are evaluated in order and evaluation stops at the first false
    one, so later children are never resolved.
    """

    def evaluate(self, context) -> bool:
        for proposition in self._operands:
            if not proposition.evaluate(context):
                return False
        return True


class LogicalOr(LogicalOperator):
    """
    True when any child is true; false with no children.

    Stops at the first true child.
    """

    def evaluate(self, context) -> bool:
        for proposition in self._operands:
            if proposition.evaluate(context):
                return True
        return False


class LogicalNot(LogicalOperator):
    cardinality = Cardinality.UNARY

    def evaluate(self, context) -> bool:
        return not self._operands[0].evaluate(context)


class LogicalXor(LogicalOperator):
    """True when an odd number of children are true. Evaluates every child."""

    def evaluate(self, context) -> bool:
        true_count = 0
        for proposition in self._operands:
            if proposition.evaluate(context):
                true_count += 1
        return true_count % 2 == 1
