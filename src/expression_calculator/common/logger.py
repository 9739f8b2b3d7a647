"""Shared logger for the calculator server, workers and parser."""
import logging
import os


LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_logger(name: str = "expression_calculator") -> logging.Logger:
    """
    Create (or reuse) the package logger.

    The level is read from the EXPRESSION_CALCULATOR_LOG_LEVEL environment variable and defaults to INFO.

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    # Avoid stacking handlers when the module is imported by several processes
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(os.environ.get("EXPRESSION_CALCULATOR_LOG_LEVEL", "INFO").upper())
    return log


logger: logging.Logger = build_logger()
