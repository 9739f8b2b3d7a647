"""Test classes OperationRequest and OperationResult and the request dispatch."""
import math

from pydantic import ValidationError
import pytest

from expression_calculator.common.operations import (
    DEFAULT_FUNCTION,
    EVALUATOR_FUNCTIONS,
    INVALID_FUNCTION_MESSAGE,
    OperationRequest,
    OperationResult,
    format_result,
    handle_request,
)


def test_operation_request_valid() -> None:
    """Test that a valid OperationRequest can be created with the default function."""
    req = OperationRequest(expression="2 + 2 * 3")
    assert req.expression == "2 + 2 * 3"
    assert req.function == DEFAULT_FUNCTION
    assert DEFAULT_FUNCTION in EVALUATOR_FUNCTIONS

def test_operation_request_invalid_type() -> None:
    """Test that non-string expressions raise a validation error."""
    with pytest.raises(ValidationError):
        # int instead of str
        OperationRequest(expression=123)

def test_operation_result_valid() -> None:
    """Test that a valid OperationResult can be created."""
    res = OperationResult(expression="2 + 2 * 3", result=8.0)
    assert res.expression == "2 + 2 * 3"
    assert res.result == 8.0
    assert res.succeeded
    assert res.display == "8"

def test_operation_result_invalid_result_type() -> None:
    """Test that invalid result type raises a validation error."""
    with pytest.raises(ValidationError):
        OperationResult(expression="2 + 2", result="not a float")

def test_operation_result_error_display() -> None:
    """Failed evaluations are displayed with an "Error: " prefix."""
    res = OperationResult(expression="5/0", error="Division by zero")
    assert not res.succeeded
    assert res.display == "Error: Division by zero"


@pytest.mark.parametrize("value,expected", [
    (14.0, "14"),
    (-2.0, "-2"),
    (3.5, "3.5"),
    (0.1 + 0.2, "0.3"),
    (1 / 3, "0.33333333333333"),
    (1e20, "1E+20"),
    (math.inf, "INF"),
    (-math.inf, "-INF"),
    (math.nan, "NAN"),
])
def test_format_result(value: float, expected: str) -> None:
    """format_result renders up to 14 significant digits."""
    assert format_result(value) == expected


@pytest.mark.parametrize("expr,expected", [
    ("2+3*4", 14.0),
    ("(2+3)(4+5)(6+7)", 585.0),
    ("2^3^2", 512.0),
])
def test_handle_request_success(expr: str, expected: float) -> None:
    """handle_request evaluates the expression with the selected function."""
    res = handle_request(OperationRequest(expression=expr))
    assert res.result == expected
    assert res.error is None


@pytest.mark.parametrize("expr,message", [
    ("5/0", "Division by zero"),
    ("(2+3", "Mismatched parentheses"),
    ("2+", "Invalid expression"),
    ("2@3", "Invalid characters in expression"),
    ("1.2.3", "Invalid token: 1.2.3"),
])
def test_handle_request_failure(expr: str, message: str) -> None:
    """handle_request turns evaluation errors into error results."""
    res = handle_request(OperationRequest(expression=expr))
    assert res.result is None
    assert res.error == message
    assert res.display == f"Error: {message}"


def test_handle_request_unknown_function() -> None:
    """An unknown evaluator function is rejected without evaluating the expression."""
    res = handle_request(OperationRequest(expression="1+1", function="eval"))
    assert res.rejected
    assert res.result is None
    assert res.display == INVALID_FUNCTION_MESSAGE


@pytest.mark.parametrize("expression", ["", "   "])
def test_operation_request_rejects_empty_expression(expression: str) -> None:
    """Requests must carry a non-blank expression."""
    with pytest.raises(ValidationError):
        OperationRequest(expression=expression)


@pytest.mark.parametrize("res,expected", [
    (OperationResult(expression="2(3)", result=6.0), "2(3) = 6"),
    (OperationResult(expression="5/0", error="Division by zero"), "5/0 -> Error: Division by zero"),
    (
        OperationResult(expression="1", error=INVALID_FUNCTION_MESSAGE, rejected=True),
        f"1 -> {INVALID_FUNCTION_MESSAGE}",
    ),
])
def test_operation_result_summary(res: OperationResult, expected: str) -> None:
    """summary joins expression and display with "=" on success and "->" on failure."""
    assert res.summary == expected


@pytest.mark.parametrize("value", [math.inf, -math.inf])
def test_operation_result_json_keeps_infinite_results(value: float) -> None:
    """Infinite results survive a JSON round trip between server and client."""
    res = OperationResult(expression="9^9^9", result=value)
    assert OperationResult.model_validate_json(res.model_dump_json()).result == value
