"""
Shared error handling for the Ruler rule-evaluation engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    evaluation_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class RulerException(Exception):
    """Base exception for the rule engine."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, evaluation_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            evaluation_id=evaluation_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class RuleArithmeticError(RulerException, ArithmeticError):
    """Arithmetic on a value that is not numeric, or outside the math domain."""

    def __init__(self, message: str = "Arithmetic: values must be numeric", details: Optional[Dict[str, Any]] = None):
        super().__init__("ARITHMETIC_ERROR", message, details)


class DivisionByZeroError(RuleArithmeticError, ZeroDivisionError):
    """Divide or modulo with a zero divisor."""

    def __init__(self, message: str = "Division by zero", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "DIVISION_BY_ZERO"


class InvalidArgumentError(RulerException, ValueError):
    """Operator built with the wrong number or kind of operands."""

    def __init__(self, message: str = "Invalid operator arguments", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ARGUMENT", message, details)


class UndefinedFactError(RulerException, KeyError):
    """A fact was requested that the context does not hold."""

    def __init__(self, name: str, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.name = name
        super().__init__(
            "UNDEFINED_FACT",
            message or f"Fact '{name}' is not defined",
            {"name": name, **(details or {})}
        )

    def __str__(self) -> str:
        # KeyError would quote the message
        return self.message


class TimestampParseError(RulerException, ValueError):
    """A value could not be read as a calendar timestamp."""

    def __init__(self, value: Any, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            "TIMESTAMP_PARSE_ERROR",
            f"Cannot parse {value!r} as a timestamp",
            {"value": repr(value), **(details or {})}
        )
