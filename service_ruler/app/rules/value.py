"""
Immutable comparable values.

A Value wraps exactly one fact or constant and answers every comparison and
arithmetic question the operators ask of it. Variables and computed operands
resolve to Values by applying the current Context.

Every Value is classified once, at construction, into a ValueKind. The
comparison methods dispatch on the pair of kinds instead of relying on
implicit interpreter coercion:

    equal_to      NULL or BOOLEAN on either side compares truthiness
                  ("" and "0" are falsy); numeric vs numeric compares numbers
                  ("1" == 1.0); TIMESTAMP vs TIMESTAMP compares instants;
                  SEQUENCE and MAPPING compare element-wise, loosely;
                  TEXT vs TEXT compares exactly; anything else is unequal.
    same_as       identical Python type and equal value, recursively.
    greater_than  numeric, TEXT, TIMESTAMP and BOOLEAN pairs are ordered;
    less_than     any other pairing, or a NaN on either side, is unordered
                  and compares false.
"""

import math
import re
from collections.abc import Mapping, Sequence, Set
from datetime import date, datetime, timezone
from decimal import Decimal, DecimalException
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from shared.errors import RuleArithmeticError, DivisionByZeroError, TimestampParseError
from shared.logging import get_logger

logger = get_logger("ruler.value")

Number = Union[int, float, Decimal]

_INTEGER_RE = re.compile(r"[+-]?\d+", re.ASCII)
_NUMERIC_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_OCTET_RE = re.compile(r"\d{1,3}", re.ASCII)
_PREFIX_RE = re.compile(r"\d{1,2}", re.ASCII)

_TIMESTAMP_ADAPTER = TypeAdapter(datetime)

U32_MASK = 0xFFFFFFFF

# Larger integer powers are computed in floating point.
MAX_EXACT_POWER_BITS = 4096


class ValueKind(str, Enum):
    """Closed set of shapes a Value can hold."""
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    NULL = "null"
    OTHER = "other"


def classify(datum: Any) -> ValueKind:
    """Return the ValueKind of a raw datum."""
    if datum is None:
        return ValueKind.NULL
    # bool is an int subclass
    if isinstance(datum, bool):
        return ValueKind.BOOLEAN
    if isinstance(datum, int):
        return ValueKind.INTEGER
    if isinstance(datum, (float, Decimal)):
        return ValueKind.FLOAT
    if isinstance(datum, str):
        return ValueKind.TEXT
    if isinstance(datum, date):
        return ValueKind.TIMESTAMP
    if isinstance(datum, Mapping):
        return ValueKind.MAPPING
    if isinstance(datum, (bytes, bytearray)):
        return ValueKind.OTHER
    if isinstance(datum, (Sequence, Set)):
        return ValueKind.SEQUENCE
    return ValueKind.OTHER


def ip_to_u32(address: Any) -> Optional[int]:
    """
    Convert a dotted-quad IPv4 address to an unsigned 32-bit integer.

    Returns None when the address is not exactly four decimal octets
    in the 0-255 range.
    """
    if not isinstance(address, str):
        return None
    parts = address.strip().split(".")
    if len(parts) != 4:
        return None

    result = 0
    for part in parts:
        if not _OCTET_RE.fullmatch(part):
            return None
        octet = int(part)
        if octet > 255:
            return None
        result = (result << 8) | octet
    return result


def _match_netmask(ip: int, network: str, netmask: str) -> Optional[bool]:
    """Match a.b.c.d/n or a.b.c.d/m.m.m.m; None when the notation is malformed."""
    if "." in netmask:
        mask = ip_to_u32(netmask.replace("*", "0"))
        base = ip_to_u32(network)
    else:
        if not _PREFIX_RE.fullmatch(netmask.strip()):
            return None
        prefix = int(netmask)
        if prefix > 32:
            return None
        octets = network.strip().split(".")
        if len(octets) > 4:
            return None
        octets = [octet or "0" for octet in octets] + ["0"] * (4 - len(octets))
        base = ip_to_u32(".".join(octets))
        mask = ~((1 << (32 - prefix)) - 1) & U32_MASK

    if mask is None or base is None:
        return None
    return (ip & mask) == (base & mask)


def _match_span(ip: int, notation: str) -> Optional[bool]:
    """Match a.b.*.* or lower-upper; None when the notation is malformed."""
    if "*" in notation:
        notation = f"{notation.replace('*', '0')}-{notation.replace('*', '255')}"
    if "-" not in notation:
        return None

    lower, upper = notation.split("-", 1)
    lower_dec = ip_to_u32(lower)
    upper_dec = ip_to_u32(upper)
    if lower_dec is None or upper_dec is None:
        return None
    return lower_dec <= ip <= upper_dec


def ip_in_range(ip: int, notation: str) -> Optional[bool]:
    """
    Match an unsigned IPv4 integer against one range notation.

    Supported notations:
        CIDR          1.2.3.0/24, 1.2.3/24
        netmask       1.2.3.4/255.255.255.0 (a * in the mask reads as 0)
        wildcard      1.2.*.*
        start-end     1.2.3.0-1.2.3.255
    """
    if "/" in notation:
        network, netmask = notation.split("/", 1)
        return _match_netmask(ip, network, netmask)
    return _match_span(ip, notation)


class Value:
    """
    Immutable holder of one fact or constant.

    The wrapped datum is never copied: get_value() returns the very object
    passed in.
    """

    __slots__ = ("_value", "_kind")

    def __init__(self, value: Any = None):
        if isinstance(value, Value):
            value = value.get_value()
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_kind", classify(value))

    def __setattr__(self, name, value):
        raise AttributeError("Value is immutable")

    def __delattr__(self, name):
        raise AttributeError("Value is immutable")

    def __repr__(self) -> str:
        return f"Value({self._value!r})"

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.same_as(other)

    __hash__ = None

    def __bool__(self) -> bool:
        return self.truthy

    def get_value(self) -> Any:
        """Return the wrapped datum."""
        return self._value

    @property
    def kind(self) -> ValueKind:
        return self._kind

    @property
    def is_null(self) -> bool:
        return self._kind is ValueKind.NULL

    @property
    def truthy(self) -> bool:
        kind = self._kind
        if kind is ValueKind.NULL:
            return False
        if kind is ValueKind.TEXT:
            return self._value not in ("", "0")
        if kind is ValueKind.TIMESTAMP:
            return True
        return bool(self._value)

    @property
    def is_numeric(self) -> bool:
        return self._number() is not None

    def _number(self) -> Optional[Number]:
        kind = self._kind
        if kind in (ValueKind.INTEGER, ValueKind.FLOAT):
            return self._value
        if kind is ValueKind.TEXT:
            if _INTEGER_RE.fullmatch(self._value):
                return int(self._value)
            if _NUMERIC_RE.fullmatch(self._value):
                return float(self._value)
        return None

    def to_number(self) -> Number:
        """Return the numeric reading of this value or raise RuleArithmeticError."""
        number = self._number()
        if number is None:
            raise RuleArithmeticError(details={"value": repr(self._value)})
        return number

    def to_timestamp(self) -> datetime:
        """
        Return the absolute instant this value denotes.

        date and datetime are used as-is; text and numbers go through
        pydantic's datetime parsing (ISO 8601 or unix epoch seconds).
        Naive instants are read as UTC.
        """
        datum = self._value
        if isinstance(datum, datetime):
            instant = datum
        elif isinstance(datum, date):
            instant = datetime(datum.year, datum.month, datum.day)
        elif self._kind in (ValueKind.TEXT, ValueKind.INTEGER, ValueKind.FLOAT):
            try:
                instant = _TIMESTAMP_ADAPTER.validate_python(datum)
            except ValidationError as e:
                raise TimestampParseError(datum, {"errors": e.error_count()}) from e
        else:
            raise TimestampParseError(datum)

        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant

    def _as_text(self) -> Optional[str]:
        kind = self._kind
        if kind is ValueKind.TEXT:
            return self._value
        if kind is ValueKind.INTEGER:
            return str(self._value)
        if kind is ValueKind.FLOAT:
            datum = self._value
            if isinstance(datum, float) and datum.is_integer():
                return str(int(datum))
            return str(datum)
        return None

    def _members(self) -> Optional[List[Any]]:
        if self._kind is ValueKind.SEQUENCE:
            return list(self._value)
        if self._kind is ValueKind.MAPPING:
            return list(self._value.values())
        return None

    # -- comparison ---------------------------------------------------------

    def equal_to(self, value: "Value") -> bool:
        """Loose equality with type widening."""
        return _loose_equal(self, value)

    def same_as(self, value: "Value") -> bool:
        """Strict equality: same type and same value."""
        return _strict_equal(self._value, value.get_value())

    def contains(self, value: "Value") -> bool:
        """
        Sequence (or mapping values): any element loosely equals value.
        Text: value's text form occurs as a substring.
        """
        members = self._members()
        if members is not None:
            return any(Value(member).equal_to(value) for member in members)
        if self._kind is ValueKind.TEXT:
            needle = value._as_text()
            return needle is not None and needle in self._value
        return False

    def is_in(self, value: "Value") -> bool:
        """Inverse of contains: this value occurs in value."""
        return value.contains(self)

    def starts_with(self, value: "Value") -> bool:
        needle = value._as_text()
        if self._kind is not ValueKind.TEXT or needle is None:
            return False
        return self._value.startswith(needle)

    def ends_with(self, value: "Value") -> bool:
        needle = value._as_text()
        if self._kind is not ValueKind.TEXT or needle is None:
            return False
        return self._value.endswith(needle)

    def in_ip_range(self, value: "Value") -> bool:
        """
        Check this dotted-quad address against one range notation or a sequence
        of them, stopping at the first match.

        Malformed addresses and range specs never raise; they simply do not
        match.
        """
        if value.kind is ValueKind.TEXT:
            ranges = [value.get_value()]
        elif value.kind is ValueKind.SEQUENCE:
            ranges = list(value.get_value())
        else:
            return False

        ip = ip_to_u32(self._value)
        if ip is None:
            logger.debug("Address is not a dotted-quad IPv4", address=repr(self._value))
            return False

        for notation in ranges:
            matched = ip_in_range(ip, notation) if isinstance(notation, str) else None
            if matched is None:
                logger.debug("Skipping malformed IP range", range=repr(notation))
                continue
            if matched:
                return True
        return False

    def greater_than(self, value: "Value") -> bool:
        return _compare(self, value) == 1

    def less_than(self, value: "Value") -> bool:
        return _compare(self, value) == -1

    def after_than(self, value: "Value") -> bool:
        return self.to_timestamp() > value.to_timestamp()

    def before_than(self, value: "Value") -> bool:
        return self.to_timestamp() < value.to_timestamp()

    # -- arithmetic ---------------------------------------------------------

    def _pair(self, value: "Value") -> Tuple[Number, Number]:
        left = self._number()
        right = value._number()
        if left is None or right is None:
            raise RuleArithmeticError(details={"left": repr(self._value), "right": repr(value.get_value())})
        # Decimal does not mix with float
        if isinstance(left, Decimal) and not isinstance(right, Decimal):
            right = Decimal(str(right))
        elif isinstance(right, Decimal) and not isinstance(left, Decimal):
            left = Decimal(str(left))
        return left, right

    def add(self, value: "Value") -> Number:
        left, right = self._pair(value)
        return _guard(lambda: left + right)

    def subtract(self, value: "Value") -> Number:
        left, right = self._pair(value)
        return _guard(lambda: left - right)

    def multiply(self, value: "Value") -> Number:
        left, right = self._pair(value)
        return _guard(lambda: left * right)

    def divide(self, value: "Value") -> Number:
        left, right = self._pair(value)
        if _is_zero(right):
            raise DivisionByZeroError()
        if isinstance(left, int) and isinstance(right, int) and left % right == 0:
            return left // right
        return _guard(lambda: left / right)

    def modulo(self, value: "Value") -> Number:
        """
        Remainder whose sign follows the dividend.

        Two ints give an int; any fractional operand gives a float (or Decimal)
        remainder, so 5 mod 0.5 is 0.0 rather than a division by zero.
        """
        left, right = self._pair(value)
        if _is_zero(right):
            raise DivisionByZeroError(details={"divisor": repr(value.get_value())})
        if isinstance(left, int) and isinstance(right, int):
            remainder = abs(left) % abs(right)
            return -remainder if left < 0 else remainder
        if isinstance(left, Decimal):
            return _guard(lambda: left % right)
        return _guard(lambda: math.fmod(left, right))

    def exponentiate(self, value: "Value") -> Number:
        left, right = self._pair(value)
        if isinstance(left, int) and isinstance(right, int) and right >= 0:
            if abs(left) <= 1 or abs(left).bit_length() * right <= MAX_EXACT_POWER_BITS:
                return left ** right
            return _guard(lambda: math.pow(float(left), right))
        if isinstance(left, Decimal):
            return _guard(lambda: left ** right)
        return _guard(lambda: math.pow(left, right))

    def negate(self) -> Number:
        number = self.to_number()
        return _guard(lambda: -number)

    def ceil(self) -> int:
        number = self.to_number()
        return _guard(lambda: math.ceil(number))

    def floor(self) -> int:
        number = self.to_number()
        return _guard(lambda: math.floor(number))


def _guard(compute):
    try:
        return compute()
    except (OverflowError, ValueError, DecimalException) as e:
        raise RuleArithmeticError(str(e) or "Arithmetic error") from e


def _is_nan(number: Number) -> bool:
    if isinstance(number, Decimal):
        return number.is_nan()
    return isinstance(number, float) and math.isnan(number)


def _is_zero(number: Number) -> bool:
    return not _is_nan(number) and number == 0


def _loose_equal(left: Value, right: Value) -> bool:
    boolish = (ValueKind.NULL, ValueKind.BOOLEAN)
    if left.kind in boolish or right.kind in boolish:
        return left.truthy == right.truthy

    left_number = left._number()
    right_number = right._number()
    if left_number is not None and right_number is not None:
        if _is_nan(left_number) or _is_nan(right_number):
            return False
        return left_number == right_number

    if left.kind is not right.kind:
        return False

    kind = left.kind
    if kind is ValueKind.TIMESTAMP:
        return left.to_timestamp() == right.to_timestamp()
    if kind is ValueKind.SEQUENCE:
        left_items = list(left.get_value())
        right_items = list(right.get_value())
        return len(left_items) == len(right_items) and all(
            _loose_equal(Value(a), Value(b)) for a, b in zip(left_items, right_items)
        )
    if kind is ValueKind.MAPPING:
        left_map = left.get_value()
        right_map = right.get_value()
        return set(left_map.keys()) == set(right_map.keys()) and all(
            _loose_equal(Value(left_map[key]), Value(right_map[key])) for key in left_map
        )
    if kind is ValueKind.TEXT:
        return left.get_value() == right.get_value()
    return False


def _strict_equal(left: Any, right: Any) -> bool:
    if type(left) is not type(right):
        return False
    if isinstance(left, Mapping):
        return set(left.keys()) == set(right.keys()) and all(
            _strict_equal(left[key], right[key]) for key in left
        )
    if isinstance(left, (list, tuple)):
        return len(left) == len(right) and all(
            _strict_equal(a, b) for a, b in zip(left, right)
        )
    return left == right


def _compare(left: Value, right: Value) -> Optional[int]:
    """Three-way comparison; None when the pair is not ordered."""
    left_number = left._number()
    right_number = right._number()
    if left_number is not None and right_number is not None:
        if _is_nan(left_number) or _is_nan(right_number):
            return None
        a, b = left_number, right_number
    elif left.kind is ValueKind.TEXT and right.kind is ValueKind.TEXT:
        a, b = left.get_value(), right.get_value()
    elif left.kind is ValueKind.TIMESTAMP and right.kind is ValueKind.TIMESTAMP:
        a, b = left.to_timestamp(), right.to_timestamp()
    elif left.kind is ValueKind.BOOLEAN and right.kind is ValueKind.BOOLEAN:
        a, b = int(left.get_value()), int(right.get_value())
    else:
        return None

    if a > b:
        return 1
    if a < b:
        return -1
    return 0
