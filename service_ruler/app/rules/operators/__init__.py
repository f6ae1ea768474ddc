"""
Operator tree nodes.

- base: Cardinality, Operator and the Proposition contract
- comparison: propositions comparing two resolved values
- logical: propositions combining child propositions
- arithmetic: computed operands
"""

from .base import Cardinality, Operator, Proposition
from .comparison import (
    ComparisonOperator, EqualTo, NotEqualTo, SameAs, NotSameAs,
    GreaterThan, GreaterThanOrEqualTo, LessThan, LessThanOrEqualTo,
    In, NotIn, Contains, NotContains, StartsWith, EndsWith,
    InIpRange, AfterThan, BeforeThan, Exists
)
from .logical import LogicalOperator, LogicalAnd, LogicalOr, LogicalNot, LogicalXor
from .arithmetic import (
    ArithmeticOperator, Addition, Subtraction, Multiplication, Division,
    Modulo, Exponentiate, Negation, Ceil, Floor, Min, Max
)
