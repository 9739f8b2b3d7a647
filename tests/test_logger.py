"""Test the shared logger."""
import logging

from expression_calculator.common.logger import LOG_FORMAT, build_logger


def test_build_logger_reuses_handler() -> None:
    """Building the same logger twice does not stack handlers."""
    first = build_logger("expression_calculator.test")
    second = build_logger("expression_calculator.test")
    assert first is second
    assert len(second.handlers) == 1
    assert second.handlers[0].formatter._fmt == LOG_FORMAT


def test_build_logger_level_from_environment(monkeypatch) -> None:
    """The log level is read from EXPRESSION_CALCULATOR_LOG_LEVEL."""
    monkeypatch.setenv("EXPRESSION_CALCULATOR_LOG_LEVEL", "debug")
    assert build_logger("expression_calculator.test_level").level == logging.DEBUG
