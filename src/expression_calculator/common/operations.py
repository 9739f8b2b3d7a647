"""Pydantic models and dispatch for arithmetic operation requests and results."""
from collections.abc import Callable
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expression_calculator.common.errors import EvaluationError
from expression_calculator.common.parser import ExpressionParser


DEFAULT_FUNCTION: str = "evaluate_expression"
INVALID_FUNCTION_MESSAGE: str = "Please select a valid evaluator function."

# Evaluator functions a request may select by name
EVALUATOR_FUNCTIONS: dict[str, Callable[[str], float]] = {
    DEFAULT_FUNCTION: ExpressionParser.evaluate,
}


def format_result(value: float) -> str:
    """
    Render a numeric result for display.

    Uses up to 14 significant digits, so 0.1 + 0.2 is shown as "0.3" and 14.0 as "14".

    :param float value: Evaluated result

    :return: Display text
    :rtype: str
    """
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return f"{value:.14G}"


class OperationRequest(BaseModel):
    """Represents a single arithmetic operation request sent to the server."""

    expression: str = Field(..., description="Arithmetic expression as a string")
    function: str = Field(default=DEFAULT_FUNCTION, description="Name of the selected evaluator function")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v


class OperationResult(BaseModel):
    """Represents the result of an evaluated arithmetic operation, or why it failed."""

    # Keep inf and nan results when sent as JSON
    model_config = ConfigDict(ser_json_inf_nan="constants")

    expression: str = Field(..., description="Original arithmetic expression")
    result: Optional[float] = Field(default=None, description="Evaluated numeric result of the expression")
    error: Optional[str] = Field(default=None, description="Error message when evaluation failed")
    rejected: bool = Field(default=False, description="True when no valid evaluator function was selected")

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def display(self) -> str:
        """Text shown to the user: the result, or the error prefixed with "Error: "."""
        if self.rejected:
            return self.error
        if self.error is not None:
            return f"Error: {self.error}"
        return format_result(self.result)

    @property
    def summary(self) -> str:
        """One output line: "<expression> = <result>" or "<expression> -> <error>"."""
        separator = "=" if self.succeeded else "->"
        return f"{self.expression} {separator} {self.display}"


def handle_request(request: OperationRequest) -> OperationResult:
    """
    Evaluate a request with its selected evaluator function.

    :param OperationRequest request: Expression and selected function

    :return: Result, or the error message of the failed evaluation
    :rtype: OperationResult
    """
    evaluator: Optional[Callable[[str], float]] = EVALUATOR_FUNCTIONS.get(request.function)
    if evaluator is None:
        return OperationResult(expression=request.expression, error=INVALID_FUNCTION_MESSAGE, rejected=True)

    try:
        return OperationResult(expression=request.expression, result=evaluator(request.expression))
    except EvaluationError as exc:
        return OperationResult(expression=request.expression, error=str(exc))
