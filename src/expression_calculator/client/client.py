"""TCP client."""
from pathlib import Path
import socket
from typing import List

from pydantic import BaseModel, ConfigDict, Field, FilePath, IPvAnyAddress

from expression_calculator.common.operations import DEFAULT_FUNCTION, OperationRequest, OperationResult


class CalculatorClient(BaseModel):
    """
    TCP client sending expressions to the calculator server.

    Each expression travels as a JSON OperationRequest carrying the selected evaluator function,
    and the server answers with one JSON OperationResult per request, in the same order.
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")

    @staticmethod
    def read_requests(input_file: FilePath, function: str = DEFAULT_FUNCTION) -> List[OperationRequest]:
        """
        Build one request per non-empty line of a text file.

        :param FilePath input_file: File with one expression per line
        :param str function: Evaluator function selected for every expression

        :return: Requests in file order
        :rtype: List[OperationRequest]
        """
        lines: List[str] = input_file.read_text(encoding="utf-8").splitlines()
        return [OperationRequest(expression=line.strip(), function=function) for line in lines if line.strip()]

    def send_requests(self, requests: List[OperationRequest]) -> List[OperationResult]:
        """
        Send requests to the server and wait for all of their results.

        :param List[OperationRequest] requests: Requests to evaluate

        :return: One result per request, in request order
        :rtype: List[OperationResult]
        :raises ValueError: If the server does not answer every request
        """
        payload: bytes = "".join(f"{request.model_dump_json()}\n" for request in requests).encode()

        chunks: List[bytes] = []
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.connect((str(self.host), self.port))
            s.sendall(payload)
            # Signal that no more data will be sent
            s.shutdown(socket.SHUT_WR)

            while True:
                chunk: bytes = s.recv(4096)
                # An empty chunk means the server closed the connection
                if not chunk:
                    break
                chunks.append(chunk)

        lines: List[str] = b"".join(chunks).decode().splitlines()
        results: List[OperationResult] = [OperationResult.model_validate_json(line) for line in lines if line]
        if len(results) != len(requests):
            raise ValueError(f"🔌❌ Expected {len(requests)} result(s), received {len(results)}")
        return results

    def send_file(
        self,
        input_file: FilePath,
        output_file: Path,
        function: str = DEFAULT_FUNCTION,
    ) -> List[OperationResult]:
        """
        Evaluate every expression of a text file and write one summary line per expression.

        :param FilePath input_file: File with one expression per line
        :param Path output_file: Path where "<expression> = <result>" lines are written
        :param str function: Evaluator function selected for every expression

        :return: Results in file order
        :rtype: List[OperationResult]
        """
        results: List[OperationResult] = self.send_requests(self.read_requests(input_file, function))
        with output_file.open("w", encoding="utf-8") as f_out:
            for result in results:
                f_out.write(f"{result.summary}\n")
        return results
