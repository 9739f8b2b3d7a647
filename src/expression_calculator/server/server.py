"""TCP server that evaluates arithmetic expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection
import socket
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress, ValidationError

from expression_calculator.common.logger import logger
from expression_calculator.common.operations import DEFAULT_FUNCTION, OperationRequest, OperationResult
from expression_calculator.server.worker import WorkerProcess


WORKER_LOST_MESSAGE: str = "Worker exited without sending a result"

# (line number, request, worker process, parent end of the pipe)
ActiveWorker = Tuple[int, OperationRequest, Process, Connection]


class CalculatorServer(BaseModel):
    """
    TCP socket server handling arithmetic expressions from clients.

    Protocol:
        - The client sends one request per line: a JSON OperationRequest, or a bare expression
          evaluated with the server's default function.
        - The server answers with one JSON OperationResult per line, in input order.

    Features:
        - Spawns one worker process per expression.
        - Ensures each worker is destroyed immediately after finishing.
        - Handles multiple simultaneous workers up to CPU core count.
    """

    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(arbitrary_types_allowed=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")
    function: str = Field(default=DEFAULT_FUNCTION, description="Evaluator function for bare expression lines")

    def _parse_request(self, line: str) -> OperationRequest:
        """
        Read one request line.

        :param str line: JSON OperationRequest or bare expression

        :return: Parsed request
        :rtype: OperationRequest
        """
        try:
            return OperationRequest.model_validate_json(line)
        except ValidationError:
            return OperationRequest(expression=line, function=self.function)

    def _receive_data(self, conn: socket.socket) -> List[OperationRequest]:
        """
        Receive all data from the client connection and return one request per non-empty line.

        Bytes that are not valid UTF-8 are replaced, so they fail evaluation as invalid characters.

        :param socket.socket conn: Connected client socket

        :return: List of requests
        :rtype: List[OperationRequest]
        """
        # Note: chunks are small pieces of data read from a TCP stream, as data may arrive in multiple packets
        chunks: List[bytes] = []
        while True:
            chunk: bytes = conn.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        data: List[str] = b"".join(chunks).decode(errors="replace").splitlines()
        return [self._parse_request(line.strip()) for line in data if line.strip()]

    def _spawn_worker(self, request: OperationRequest, line_number: int) -> ActiveWorker:
        """
        Spawn a WorkerProcess for the given request.

        :param OperationRequest request: Expression and selected function
        :param int line_number: Line number of the request in the payload

        :return: Tuple of (line number, request, Process, parent_pipe)
        :rtype: ActiveWorker
        """
        parent_conn, child_conn = Pipe()
        worker = WorkerProcess(
            conn=child_conn,
            expression=request.expression,
            function=request.function,
            line_number=line_number,
        )
        process = Process(target=worker.run)
        process.start()
        # The child owns its end now
        child_conn.close()
        return line_number, request, process, parent_conn

    def _collect_finished_workers(
        self, active_workers: List[ActiveWorker], results: Dict[int, OperationResult]
    ) -> None:
        """
        Collect results from all finished workers into the results mapping.

        Finished workers are removed from the active_workers list. A worker that died without
        sending anything is reported as an error for its line.

        :param list active_workers: Workers still being tracked
        :param dict results: Results indexed by line number
        """
        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            line_number, request, proc, pipe_conn = active_workers[i]
            if proc.is_alive():
                continue

            try:
                results[line_number] = OperationResult.model_validate(pipe_conn.recv())
            except EOFError:
                logger.error(f"👷💀 Worker for line {line_number} exited with code {proc.exitcode}")
                results[line_number] = OperationResult(expression=request.expression, error=WORKER_LOST_MESSAGE)
            finally:
                pipe_conn.close()
                proc.join()
                active_workers.pop(i)

    def process_requests(self, requests: List[OperationRequest]) -> List[OperationResult]:
        """
        Evaluate every request in worker processes.

        :param List[OperationRequest] requests: Requests in input order

        :return: One result per request, in input order
        :rtype: List[OperationResult]
        """
        if not requests:
            return []

        # Limit number of active workers to CPU cores or number of requests
        max_workers: int = min(cpu_count(), len(requests))
        active_workers: List[ActiveWorker] = []
        results: Dict[int, OperationResult] = {}

        for line_number, request in enumerate(requests, start=1):
            # Wait until a worker slot is available
            while len(active_workers) >= max_workers:
                self._collect_finished_workers(active_workers, results)

            active_workers.append(self._spawn_worker(request, line_number))

        # Collect remaining active workers
        while active_workers:
            self._collect_finished_workers(active_workers, results)

        return [results[line] for line in sorted(results)]

    @staticmethod
    def encode_results(results: List[OperationResult]) -> bytes:
        """Serialize results as JSON lines."""
        return "".join(f"{result.model_dump_json()}\n" for result in results).encode()

    def start(self) -> None:
        """
        Start the TCP server, accept a client connection, and process arithmetic expressions.

        Steps:
            1. Bind and listen on the specified host and port.
            2. Accept a single client connection.
            3. Receive all requests from the client.
            4. Spawn worker processes for each request, respecting max CPU cores.
            5. Send the results back to the client, in input order.

        :return: None
        """
        logger.info(f"🖥️ Starting server on {self.host}:{self.port}")

        # Create TCP socket
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((str(self.host), self.port))
            s.listen()
            logger.info("🖥️ Server listening")

            # Accept a single client connection
            conn, _ = s.accept()
            with conn:
                requests: List[OperationRequest] = self._receive_data(conn)
                logger.info(f"📥 Received {len(requests)} request(s)")

                results: List[OperationResult] = self.process_requests(requests)

                # Send results back to client
                try:
                    conn.sendall(self.encode_results(results))
                    logger.info("✉️ Results sent to client")
                except OSError as exc:
                    logger.error(f"🔌❌ Client disconnected before receiving results: {exc}")
