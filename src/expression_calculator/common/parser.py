"""Parse and evaluate arithmetic expressions safely."""
from typing import List

from expression_calculator.common.errors import (
    InvalidCharacterError,
    InvalidExpressionError,
    InvalidTokenError,
    MismatchedParenthesesError,
)
from expression_calculator.common.logger import logger
from expression_calculator.common.tokens import Associativity, Token, TokenKind


DIGITS: str = "0123456789"
ALLOWED_CHARACTERS: frozenset = frozenset(DIGITS + "+-*/^().")

# A "-" right after one of these characters (or at the start) begins a negative literal
UNARY_MINUS_PREDECESSORS: str = "+-*/(^"


class ExpressionParser:
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Safe, deterministic computation
        - No state shared between evaluations

    Algorithm:
        1. Normalize: drop whitespace, make implicit multiplication explicit, validate characters
        2. Tokenize: numbers (with unary minus folded in), operators and parentheses
        3. Evaluate with the Shunting-yard algorithm, reducing operators as soon as precedence allows

    Instead of emitting Reverse Polish Notation, operators are applied directly on an operand stack
    while they are popped from the operator stack.

    Examples:
        - "2(3)" is normalized to "2*(3)" and evaluates to 6
        - "2^3^2" evaluates to 512, since "^" is right-associative
    """

    @staticmethod
    def normalize(expr: str) -> str:
        """
        Remove whitespace, insert explicit "*" operators and validate the character set.

        A "*" is inserted between two adjacent characters when:
            - a digit or ")" is followed by "("
            - ")" is followed by a digit
            - a digit is followed by a digit

        The rewrite is a single pass over the original characters, so every digit pair is split:
        "234" becomes "2*3*4".

        :param str expr: Raw arithmetic expression

        :return: Normalized expression
        :rtype: str
        :raises InvalidCharacterError: If a character outside "0-9 + - * / ^ ( ) ." remains
        """
        compact: str = "".join(expr.split())

        chars: List[str] = []
        for current, following in zip(compact, compact[1:] + " "):
            chars.append(current)
            current_is_digit = current in DIGITS
            if (
                ((current_is_digit or current == ")") and following == "(")
                or (current == ")" and following in DIGITS)
                or (current_is_digit and following in DIGITS)
            ):
                chars.append("*")
        normalized: str = "".join(chars)

        if any(char not in ALLOWED_CHARACTERS for char in normalized):
            raise InvalidCharacterError()
        return normalized

    @staticmethod
    def tokenize(expr: str) -> List[Token]:
        """
        Split a normalized expression into tokens.

        Digits and "." are accumulated into numeric literals. A "-" at the start of the expression
        or right after "+ - * / ( ^" starts a negative literal instead of becoming an operator.

        A "-" right after another "-" also starts a negative literal, and the previous "-" is not
        kept as an operator between operands: "3--2" gives the adjacent tokens 3 and -2, rejected
        by the evaluator, and a pending lone "-" (as in "3---2") becomes an UNKNOWN token.

        :param str expr: Normalized arithmetic expression

        :return: List of tokens
        :rtype: List[Token]
        """
        tokens: List[Token] = []
        number: str = ""

        for i, char in enumerate(expr):
            if char in DIGITS or char == ".":
                number += char
                continue

            if char == "-" and i > 0 and expr[i - 1] == "-":
                # A run of "-" is never read as chained negation
                if number:
                    tokens.append(Token.unknown(number))
                else:
                    # Drop the binary "-" so the operands end up adjacent
                    tokens.pop()
                number = "-"
                continue

            if number:
                tokens.append(Token.from_text(number))
                number = ""

            if char == "-" and (i == 0 or expr[i - 1] in UNARY_MINUS_PREDECESSORS):
                number = "-"
            else:
                tokens.append(Token.from_text(char))

        if number:
            tokens.append(Token.from_text(number))
        return tokens

    @staticmethod
    def _apply_operator(values: List[float], operators: List[Token]) -> None:
        """
        Pop the top operator and its two operands, then push the result.

        :param List[float] values: Operand stack
        :param List[Token] operators: Operator stack

        :raises InvalidExpressionError: If fewer than two operands are available
        :raises DivisionByZeroError: If the right operand of "/" is zero
        """
        op: Token = operators.pop()
        if len(values) < 2:
            raise InvalidExpressionError()
        b: float = values.pop()
        a: float = values.pop()
        values.append(op.apply(a, b))

    @staticmethod
    def _should_reduce(incoming: Token, top: Token) -> bool:
        """Tell whether the stacked operator must be applied before pushing the incoming one."""
        if top.kind is not TokenKind.OPERATOR:
            return False
        if incoming.associativity is Associativity.LEFT:
            return incoming.precedence <= top.precedence
        return incoming.precedence < top.precedence

    @staticmethod
    def evaluate_tokens(tokens: List[Token]) -> float:
        """
        Evaluate a token sequence with the Shunting-yard algorithm.

        :param List[Token] tokens: Tokens produced by tokenize()

        :return: Computed result as float
        :rtype: float
        :raises InvalidTokenError: If a token is not a number, a known operator or a parenthesis
        :raises MismatchedParenthesesError: If parentheses are unbalanced
        :raises DivisionByZeroError: If a division by zero occurs
        :raises InvalidExpressionError: If the operands and operators do not reduce to a single value
        """
        values: List[float] = []
        operators: List[Token] = []

        for token in tokens:
            if token.kind is TokenKind.NUMBER:
                values.append(token.value)
            elif token.kind is TokenKind.LEFT_PAREN:
                operators.append(token)
            elif token.kind is TokenKind.RIGHT_PAREN:
                while operators and operators[-1].kind is not TokenKind.LEFT_PAREN:
                    ExpressionParser._apply_operator(values, operators)
                if not operators:
                    raise MismatchedParenthesesError()
                # Discard the matching "("
                operators.pop()
            elif token.kind is TokenKind.OPERATOR:
                while operators and ExpressionParser._should_reduce(token, operators[-1]):
                    ExpressionParser._apply_operator(values, operators)
                operators.append(token)
            else:
                raise InvalidTokenError(token.text)

        while operators:
            if operators[-1].kind is not TokenKind.OPERATOR:
                raise MismatchedParenthesesError()
            ExpressionParser._apply_operator(values, operators)

        if len(values) != 1:
            raise InvalidExpressionError()
        return values[0]

    @staticmethod
    def evaluate(expr: str) -> float:
        """
        Evaluate an arithmetic expression safely.

        :param str expr: Arithmetic expression string

        :return: Computed result as float
        :rtype: float
        :raises EvaluationError: If the expression is invalid or cannot be computed
        """
        normalized: str = ExpressionParser.normalize(expr)
        tokens: List[Token] = ExpressionParser.tokenize(normalized)
        result: float = ExpressionParser.evaluate_tokens(tokens)
        logger.debug(f"🧮 {expr!r} normalized to {normalized!r} = {result}")
        return result


evaluate = ExpressionParser.evaluate
