"""Errors raised while evaluating an arithmetic expression."""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Stable, distinguishable kind of evaluation failure."""

    INVALID_CHARACTER = "InvalidCharacter"
    INVALID_TOKEN = "InvalidToken"
    MISMATCHED_PARENTHESES = "MismatchedParentheses"
    DIVISION_BY_ZERO = "DivisionByZero"
    INVALID_EXPRESSION = "InvalidExpression"


class EvaluationError(ValueError):
    """
    Base class of every evaluation failure.

    Each subclass fixes its kind and a default human-readable message.
    """

    kind: ErrorKind
    default_message: str = "Evaluation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message: str = message or self.default_message
        super().__init__(self.message)


class InvalidCharacterError(EvaluationError):
    kind = ErrorKind.INVALID_CHARACTER
    default_message = "Invalid characters in expression"


class InvalidTokenError(EvaluationError):
    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid token"

    def __init__(self, token: str) -> None:
        self.token: str = token
        super().__init__(f"Invalid token: {token}")


class MismatchedParenthesesError(EvaluationError):
    kind = ErrorKind.MISMATCHED_PARENTHESES
    default_message = "Mismatched parentheses"


class DivisionByZeroError(EvaluationError):
    kind = ErrorKind.DIVISION_BY_ZERO
    default_message = "Division by zero"


class InvalidExpressionError(EvaluationError):
    kind = ErrorKind.INVALID_EXPRESSION
    default_message = "Invalid expression"
