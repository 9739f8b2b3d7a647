"""
Command-line runner.

This script:
- Starts the calculator server process
- Launches a client against it
- Sends an expressions file provided as argument and writes the results next to it
"""
import argparse
from multiprocessing import Process
from pathlib import Path
import time
from typing import List, Optional

from pydantic import BaseModel, Field, FilePath, IPvAnyAddress, ValidationError

from expression_calculator.client.client import CalculatorClient
from expression_calculator.common.logger import logger
from expression_calculator.common.operations import DEFAULT_FUNCTION
from expression_calculator.server.server import CalculatorServer


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    file_path : FilePath
        Path to the file containing arithmetic expressions.
    host : IPvAnyAddress
        Address the server binds to and the client connects to.
    port : int
        TCP port shared by server and client.
    function : str
        Evaluator function selected for every expression.
    """

    file_path: FilePath
    host: IPvAnyAddress = "127.0.0.1"
    port: int = Field(default=9000, ge=1, le=65535)
    function: str = DEFAULT_FUNCTION


def run_server(host: str, port: int) -> None:
    """
    Start the calculator server.

    The server runs in its own process and listens
    for incoming socket connections.
    """
    server = CalculatorServer(host=host, port=port)
    server.start()


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments to parse, defaults to sys.argv
    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        description="Arithmetic expression calculator client/server runner"
    )

    parser.add_argument(
        "file_path",
        help="Path to the file containing arithmetic expressions (one per line)",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Server host address")
    parser.add_argument("--port", type=int, default=9000, help="Server TCP port")
    parser.add_argument("--function", default=DEFAULT_FUNCTION, help="Evaluator function to apply")

    args = parser.parse_args(argv)

    try:
        return CliArgs(file_path=args.file_path, host=args.host, port=args.port, function=args.function)
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations_short.txt
    output: resources/operations_short_txt_results.txt

    input: resources/operations.v2.txt
    output: resources/operations_v2_txt_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    name: str = input_path.name
    stem: str = name[: -len("".join(input_path.suffixes))] if input_path.suffixes else name
    suffix_safe: str = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Run the server and the client against the given expressions file.
    """
    cli_args = parse_args(argv)
    input_path: Path = Path(cli_args.file_path)
    output_path: Path = build_output_path(input_path)

    server_process = Process(
        target=run_server, args=(str(cli_args.host), cli_args.port)
    )
    server_process.start()

    # Give the server time to start listening
    time.sleep(1)

    try:
        client = CalculatorClient(host=cli_args.host, port=cli_args.port)
        client.send_file(input_path, output_path, function=cli_args.function)
        logger.info(f"📄 Results written to {output_path}")
    finally:
        # Ensure the server is always stopped
        server_process.terminate()
        server_process.join()


if __name__ == "__main__":
    main()
