"""Tokens and the static operator table used by the expression evaluator."""
from collections.abc import Callable as ABCCallable
from enum import Enum
import math
import operator
from typing import Callable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from expression_calculator.common.errors import DivisionByZeroError


class Associativity(str, Enum):
    """Tie-break direction for operators of equal precedence."""

    LEFT = "L"
    RIGHT = "R"


class TokenKind(str, Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"
    UNKNOWN = "unknown"


def divide(a: float, b: float) -> float:
    """
    Divide a by b.

    :raises DivisionByZeroError: If b equals zero (including -0.0)
    """
    if b == 0:
        raise DivisionByZeroError()
    return a / b


def power(a: float, b: float) -> float:
    """
    Raise a to the power b with IEEE-754 results instead of exceptions.

    math.pow raises where C pow returns a special value: overflow gives +/-inf,
    zero to a negative power gives +/-inf and a negative base with a fractional exponent gives nan.

    :param float a: Base
    :param float b: Exponent

    :return: a ** b as a float, never complex
    :rtype: float
    """
    odd_integer_exponent: bool = math.isfinite(b) and b.is_integer() and int(b) % 2 == 1
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and odd_integer_exponent else math.inf
    except ValueError:
        if a == 0:
            return math.copysign(math.inf, a) if odd_integer_exponent else math.inf
        return math.nan


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]

# Mapping of operator symbols to (precedence, associativity, function)
OPERATORS: dict[str, Tuple[int, Associativity, OperatorFn]] = {
    "+": (1, Associativity.LEFT, operator.add),
    "-": (1, Associativity.LEFT, operator.sub),
    "*": (2, Associativity.LEFT, operator.mul),
    "/": (2, Associativity.LEFT, divide),
    "^": (3, Associativity.RIGHT, power),
}


class Token(BaseModel):
    """
    A single lexeme of a normalized expression.

    Tokens are immutable once produced. Only the fields matching the kind are set:
        - NUMBER: value
        - OPERATOR: precedence and associativity
    """

    model_config = ConfigDict(frozen=True)

    kind: TokenKind = Field(..., description="Tag of the token")
    text: str = Field(..., description="Source text of the token")
    value: Optional[float] = Field(default=None, description="Numeric value of a NUMBER token")
    precedence: Optional[int] = Field(default=None, description="Precedence of an OPERATOR token")
    associativity: Optional[Associativity] = Field(default=None, description="Associativity of an OPERATOR token")

    @classmethod
    def number(cls, text: str) -> "Token":
        return cls(kind=TokenKind.NUMBER, text=text, value=float(text))

    @classmethod
    def operator(cls, symbol: str) -> "Token":
        precedence, associativity, _ = OPERATORS[symbol]
        return cls(kind=TokenKind.OPERATOR, text=symbol, precedence=precedence, associativity=associativity)

    @classmethod
    def left_paren(cls) -> "Token":
        return cls(kind=TokenKind.LEFT_PAREN, text="(")

    @classmethod
    def right_paren(cls) -> "Token":
        return cls(kind=TokenKind.RIGHT_PAREN, text=")")

    @classmethod
    def unknown(cls, text: str) -> "Token":
        return cls(kind=TokenKind.UNKNOWN, text=text)

    @classmethod
    def from_text(cls, text: str) -> "Token":
        """
        Classify a lexeme produced by the tokenizer.

        Lexemes that are not a numeric literal, a known operator or a parenthesis
        (e.g. a lone "-" or "1.2.3") become UNKNOWN tokens, rejected later by the evaluator.

        :param str text: Lexeme

        :return: Typed token
        :rtype: Token
        """
        if text in OPERATORS:
            return cls.operator(text)
        if text == "(":
            return cls.left_paren()
        if text == ")":
            return cls.right_paren()
        try:
            return cls.number(text)
        except ValueError:
            return cls.unknown(text)

    @property
    def apply(self) -> OperatorFn:
        """Binary function of an OPERATOR token."""
        return OPERATORS[self.text][2]
