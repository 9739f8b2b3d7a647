"""Worker process for evaluating arithmetic expressions."""
from multiprocessing.connection import Connection

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expression_calculator.common.logger import logger
from expression_calculator.common.operations import (
    DEFAULT_FUNCTION,
    OperationRequest,
    OperationResult,
    handle_request,
)


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the parent server process
        - Receives one expression only
        - Sends the computed result or error through a Pipe
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to server")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    function: str = Field(default=DEFAULT_FUNCTION, description="Name of the evaluator function to use")
    line_number: int = Field(..., ge=1, description="Line number in the input payload")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def run(self) -> None:
        """
        Evaluate the arithmetic expression and send the result or error through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")

        outcome: OperationResult = handle_request(
            OperationRequest(expression=self.expression, function=self.function)
        )

        try:
            self.conn.send({"line": self.line_number, **outcome.model_dump()})
        finally:
            # Always close the connection
            self.conn.close()

        if outcome.succeeded:
            logger.info(f"👷✅ Worker finished on line {self.line_number}: {outcome.result}")
        else:
            logger.error(
                f"👷❌ Worker failed on line {self.line_number}: {outcome.error}\n"
                f"Could not evaluate arithmetic expression: {self.expression!r}"
            )
