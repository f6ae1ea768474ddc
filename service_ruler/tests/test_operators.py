"""
Unit tests for operands, cardinality and comparison operators.
"""

import pytest
from unittest.mock import MagicMock

from service_ruler.app.rules.context import Context
from service_ruler.app.rules.operands import Variable, Literal
from service_ruler.app.rules.value import Value
from service_ruler.app.rules.operators import (
    Cardinality, EqualTo, NotEqualTo, SameAs, NotSameAs,
    GreaterThan, GreaterThanOrEqualTo, LessThan, LessThanOrEqualTo,
    In, NotIn, Contains, NotContains, StartsWith, EndsWith,
    InIpRange, AfterThan, BeforeThan, Exists, LogicalAnd, LogicalNot, Min,
)
from shared.errors import InvalidArgumentError, UndefinedFactError, TimestampParseError


class TestVariable:
    """Test cases for Variable and Literal resolution."""

    def test_resolves_fact_from_context(self):
        """Test a present fact is wrapped in a Value."""
        roles = ["admin"]
        context = Context(roles=roles)

        value = Variable("roles").prepare_value(context)

        assert isinstance(value, Value)
        assert value.get_value() is roles

    def test_default_used_when_fact_missing(self):
        """Test the default Value stands in for a missing fact."""
        value = Variable("country", "US").prepare_value(Context())

        assert value.get_value() == "US"

    def test_explicit_none_default(self):
        """Test None is a usable default."""
        assert Variable("x", None).prepare_value(Context()).is_null

    def test_missing_fact_without_default_raises(self):
        """Test resolution fails loudly when nothing can be supplied."""
        with pytest.raises(UndefinedFactError) as exc_info:
            Variable("missing").prepare_value(Context())

        assert exc_info.value.name == "missing"

    def test_fact_wins_over_default(self):
        """Test the context fact takes precedence."""
        assert Variable("x", 1).prepare_value(Context(x=2)).get_value() == 2

    def test_context_queried_once_per_resolution(self):
        """Test the variable asks for its fact exactly once."""
        context = MagicMock()
        context.has_fact.return_value = True
        context.get_fact.return_value = 5

        value = Variable("amount").prepare_value(context)

        assert value.get_value() == 5
        context.get_fact.assert_called_once_with("amount")

    @pytest.mark.parametrize("name", ["", None, 3])
    def test_invalid_name(self, name):
        """Test variable names must be non-empty strings."""
        with pytest.raises(InvalidArgumentError):
            Variable(name)

    def test_literal_ignores_context(self):
        """Test a literal resolves to its constant."""
        context = MagicMock()

        assert Literal(7).prepare_value(context).get_value() == 7
        context.has_fact.assert_not_called()


class TestCardinality:
    """Test cases for construction-time arity checks."""

    @pytest.mark.parametrize("cardinality,count,accepted", [
        (Cardinality.UNARY, 0, False),
        (Cardinality.UNARY, 1, True),
        (Cardinality.UNARY, 2, False),
        (Cardinality.BINARY, 1, False),
        (Cardinality.BINARY, 2, True),
        (Cardinality.BINARY, 3, False),
        (Cardinality.MULTIPLE, 0, False),
        (Cardinality.MULTIPLE, 1, True),
        (Cardinality.MULTIPLE, 9, True),
        (Cardinality.VARIADIC, 0, True),
        (Cardinality.VARIADIC, 9, True),
    ])
    def test_accepts(self, cardinality, count, accepted):
        """Test each cardinality class."""
        assert cardinality.accepts(count) is accepted

    def test_binary_operator_rejects_wrong_arity(self):
        """Test comparison operators need exactly two operands."""
        with pytest.raises(InvalidArgumentError):
            EqualTo(Literal(1))
        with pytest.raises(InvalidArgumentError):
            EqualTo(Literal(1), Literal(2), Literal(3))

    def test_unary_operator_rejects_wrong_arity(self):
        """Test unary operators need exactly one operand."""
        with pytest.raises(InvalidArgumentError):
            Exists()
        with pytest.raises(InvalidArgumentError):
            Exists(Variable("a"), Variable("b"))
        with pytest.raises(InvalidArgumentError):
            LogicalNot()

    def test_multiple_operator_needs_one(self):
        """Test MULTIPLE operators need at least one operand."""
        with pytest.raises(InvalidArgumentError):
            Min()

    def test_rejects_non_operand_children(self):
        """Test raw values are not accepted as operands."""
        with pytest.raises(InvalidArgumentError):
            EqualTo(1, 2)

    def test_error_details(self):
        """Test the error names the operator and count."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            GreaterThan(Literal(1))

        assert exc_info.value.code == "INVALID_ARGUMENT"
        assert exc_info.value.details["operator"] == "GreaterThan"
        assert exc_info.value.details["count"] == 1

    def test_list_constructor(self):
        """Test operands can be given as one list."""
        operator = EqualTo([Literal(1), Literal("1")])

        assert len(operator.operands) == 2
        assert operator.evaluate(Context()) is True

    def test_operands_are_immutable(self):
        """Test the operand sequence is a tuple."""
        operator = EqualTo(Literal(1), Literal(2))

        assert isinstance(operator.operands, tuple)


class TestComparisonOperators:
    """Test cases for comparison propositions."""

    @pytest.fixture
    def context(self):
        """Create fact context."""
        return Context({
            "age": "21",
            "score": 7.5,
            "roles": ["user", "analyst"],
            "email": "ada@example.com",
            "ip": "10.1.2.3",
            "signup": "2024-03-01T00:00:00Z",
        })

    @pytest.mark.parametrize("operator,left,right,expected", [
        (EqualTo, Variable("age"), Literal(21), True),
        (NotEqualTo, Variable("age"), Literal(21), False),
        (SameAs, Variable("age"), Literal(21), False),
        (SameAs, Variable("age"), Literal("21"), True),
        (NotSameAs, Variable("age"), Literal(21), True),
        (GreaterThan, Variable("score"), Literal(7), True),
        (GreaterThanOrEqualTo, Variable("score"), Literal("7.5"), True),
        (LessThan, Variable("score"), Literal(7), False),
        (LessThanOrEqualTo, Variable("age"), Literal(21.0), True),
        (In, Literal("analyst"), Variable("roles"), True),
        (NotIn, Literal("admin"), Variable("roles"), True),
        (Contains, Variable("roles"), Literal("user"), True),
        (NotContains, Variable("roles"), Literal("user"), False),
        (Contains, Variable("email"), Literal("@example"), True),
        (StartsWith, Variable("email"), Literal("ada"), True),
        (EndsWith, Variable("email"), Literal(".org"), False),
        (InIpRange, Variable("ip"), Literal(["192.168.0.0/16", "10.0.0.0/8"]), True),
        (AfterThan, Variable("signup"), Literal("2024-01-01T00:00:00Z"), True),
        (BeforeThan, Variable("signup"), Literal("2024-01-01T00:00:00Z"), False),
    ])
    def test_operator(self, context, operator, left, right, expected):
        """Test each comparison operator against the context."""
        assert operator(left, right).evaluate(context) is expected

    @pytest.mark.parametrize("left,right", [
        (Literal(1), Literal(5)),
        (Literal("a"), Literal(None)),
        (Literal([1]), Literal({"k": 2})),
        (Literal(None), Literal(None)),
    ])
    def test_not_in_is_negation_of_in_on_type_mismatch(self, left, right):
        """Test NotIn is true whenever In is false, including unusable containers."""
        context = Context()

        assert In(left, right).evaluate(context) is False
        assert NotIn(left, right).evaluate(context) is True

    @pytest.mark.parametrize("left,right", [
        (Literal(2), Literal([1, 2])),
        (Literal("b"), Literal("abc")),
        (Literal(3), Literal([1, 2])),
    ])
    def test_not_in_always_negates_in(self, left, right):
        """Test NotIn and In never agree."""
        context = Context()

        assert NotIn(left, right).evaluate(context) is (not In(left, right).evaluate(context))

    def test_missing_fact_propagates(self):
        """Test resolution failures are not converted to False."""
        with pytest.raises(UndefinedFactError):
            EqualTo(Variable("missing"), Literal(1)).evaluate(Context())

    def test_timestamp_failure_propagates(self):
        """Test unparseable timestamps propagate from the operator."""
        with pytest.raises(TimestampParseError):
            AfterThan(Literal("soon"), Literal("2024-01-01T00:00:00Z")).evaluate(Context())

    def test_left_resolves_before_right(self):
        """Test a failing left operand stops before the right is resolved."""
        right = MagicMock(spec=Literal)

        with pytest.raises(UndefinedFactError):
            EqualTo(Variable("missing"), right).evaluate(Context())

        right.prepare_value.assert_not_called()


class TestExists:
    """Test cases for the Exists operator."""

    def test_present_fact(self):
        """Test a present fact exists."""
        assert Exists(Variable("a")).evaluate(Context(a=0)) is True

    def test_missing_fact_does_not_raise(self):
        """Test a missing fact with no default simply does not exist."""
        assert Exists(Variable("a")).evaluate(Context()) is False

    def test_defaults(self):
        """Test non-null defaults count as present."""
        assert Exists(Variable("a", "x")).evaluate(Context()) is True
        assert Exists(Variable("a", None)).evaluate(Context()) is False

    def test_literals(self):
        """Test non-variable operands exist when non-null."""
        assert Exists(Literal(0)).evaluate(Context()) is True
        assert Exists(Literal(None)).evaluate(Context()) is False

    def test_combines_with_logic(self):
        """Test guarding a comparison with Exists."""
        rule = LogicalAnd(Exists(Variable("a")), EqualTo(Variable("a"), Literal(1)))

        assert rule.evaluate(Context()) is False
        assert rule.evaluate(Context(a="1")) is True
