"""Test the command-line runner helpers."""
from pathlib import Path

import pytest

from expression_calculator.main import build_output_path, parse_args


@pytest.mark.parametrize("name,expected", [
    ("operations_short.7z", "operations_short_7z_results.txt"),
    ("operations.tar.xz", "operations_tar_xz_results.txt"),
    ("operations.zip", "operations_zip_results.txt"),
    ("operations.txt", "operations_txt_results.txt"),
    ("operations", "operations_results.txt"),
])
def test_build_output_path(name: str, expected: str) -> None:
    """Output files are placed next to the input with a flattened extension."""
    input_path = Path("resources") / name
    assert build_output_path(input_path) == Path("resources") / expected


def test_parse_args_valid(tmp_path) -> None:
    """Valid arguments are turned into a CliArgs model."""
    ops = tmp_path / "ops.txt"
    ops.write_text("1+1\n")

    args = parse_args([str(ops), "--port", "9100"])

    assert args.file_path == ops
    assert args.port == 9100
    assert str(args.host) == "127.0.0.1"
    assert args.function == "evaluate_expression"


def test_parse_args_missing_file(tmp_path) -> None:
    """A file that does not exist makes argparse exit with an error."""
    with pytest.raises(SystemExit):
        parse_args([str(tmp_path / "missing.txt")])


def test_parse_args_invalid_port(tmp_path) -> None:
    """Ports outside the valid range are rejected."""
    ops = tmp_path / "ops.txt"
    ops.write_text("1+1\n")
    with pytest.raises(SystemExit):
        parse_args([str(ops), "--port", "70000"])
