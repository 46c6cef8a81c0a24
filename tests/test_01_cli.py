"""CLI tests for the iloc-fe entry point.

Test cases live in 01_cli/*.tests files. Format:

    === test name
    args: -p FILE
    source code here
    (written to a temporary file; FILE in args is replaced by its path)
    ---
    exit: 0
    stderr: exact stderr content
    stderr-contains: substring
    stderr-empty: true
    stdout-contains: substring
    stdout-lacks: substring
    stdout-empty: true
    ---

The CLI runs with the temporary directory as its working directory.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

CLI_DIR = Path(__file__).parent / "01_cli"
ROOT_DIR = Path(__file__).parent.parent


def parse_cli_test_file(path: Path) -> list[tuple[str, dict]]:
    """Parse a .tests file into (name, spec) tuples.

    Each spec dict has keys: args, source, assertions.
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, dict]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            spec = _parse_spec(input_lines, expected_lines)
            result.append((test_name, spec))
        else:
            i += 1
    return result


def _parse_spec(input_lines: list[str], expected_lines: list[str]) -> dict:
    """Parse input + expected lines into a test spec dict."""
    spec: dict = {
        "args": [],
        "source": "",
        "assertions": [],
    }
    body_start = 0
    if input_lines and input_lines[0].startswith("args:"):
        args_str = input_lines[0][5:].strip()
        spec["args"] = args_str.split() if args_str else []
        body_start = 1
    spec["source"] = "\n".join(input_lines[body_start:])

    for line in expected_lines:
        line = line.strip()
        if not line:
            continue
        if line.startswith("exit:"):
            spec["assertions"].append(("exit", int(line[5:].strip())))
        elif line.startswith("stderr:"):
            spec["assertions"].append(("stderr", line[7:].strip()))
        elif line.startswith("stderr-contains:"):
            spec["assertions"].append(("stderr-contains", line[16:].strip()))
        elif line.startswith("stderr-empty:"):
            spec["assertions"].append(("stderr-empty", None))
        elif line.startswith("stdout-contains:"):
            spec["assertions"].append(("stdout-contains", line[16:].strip()))
        elif line.startswith("stdout-lacks:"):
            spec["assertions"].append(("stdout-lacks", line[13:].strip()))
        elif line.startswith("stdout-empty:"):
            spec["assertions"].append(("stdout-empty", None))
    return spec


def discover_cli_tests() -> list[tuple[str, dict]]:
    """Find all CLI tests across .tests files."""
    results = []
    for test_file in sorted(CLI_DIR.glob("*.tests")):
        tests = parse_cli_test_file(test_file)
        for name, spec in tests:
            test_id = f"{test_file.stem}/{name}"
            results.append((test_id, spec))
    return results


def run_cli(spec: dict, workdir: Path) -> subprocess.CompletedProcess[bytes]:
    """Write the test source to a file and run iloc-fe on it."""
    source_file = workdir / "block.i"
    source_file.write_text(spec["source"])
    args = [str(source_file) if arg == "FILE" else arg for arg in spec["args"]]
    env = dict(os.environ)
    env["PYTHONPATH"] = str(ROOT_DIR)
    cmd = [sys.executable, "-m", "iloc.cli", *args]
    return subprocess.run(cmd, capture_output=True, cwd=workdir, env=env)


def check_assertions(
    result: subprocess.CompletedProcess[bytes], assertions: list[tuple]
) -> None:
    """Check all assertions against a CLI result."""
    stdout = result.stdout.decode(errors="replace")
    stderr = result.stderr.decode(errors="replace")
    for kind, value in assertions:
        if kind == "exit":
            assert result.returncode == value, (
                f"expected exit {value}, got {result.returncode}\nstderr: {stderr}"
            )
        elif kind == "stderr":
            actual = stderr.rstrip("\n")
            assert actual == value, f"expected stderr {value!r}, got {actual!r}"
        elif kind == "stderr-contains":
            assert value in stderr, f"expected stderr to contain {value!r}, got {stderr!r}"
        elif kind == "stderr-empty":
            assert stderr == "", f"expected empty stderr, got {stderr!r}"
        elif kind == "stdout-contains":
            assert value in stdout, f"expected stdout to contain {value!r}, got {stdout!r}"
        elif kind == "stdout-lacks":
            assert value not in stdout, f"expected stdout without {value!r}, got {stdout!r}"
        elif kind == "stdout-empty":
            assert stdout == "", f"expected empty stdout, got {stdout[:200]!r}"


def pytest_generate_tests(metafunc):
    """Parametrize test_cli over all .tests files."""
    if "cli_spec" in metafunc.fixturenames:
        tests = discover_cli_tests()
        params = [pytest.param(spec, id=test_id) for test_id, spec in tests]
        metafunc.parametrize("cli_spec", params)


def test_cli(cli_spec: dict, tmp_path: Path) -> None:
    """Run a single CLI test case from .tests file."""
    result = run_cli(cli_spec, tmp_path)
    check_assertions(result, cli_spec["assertions"])


def test_main_in_process(tmp_path: Path, capsys) -> None:
    from iloc.cli import main

    source_file = tmp_path / "block.i"
    source_file.write_text("loadI 5 => r1\nadd r1, r1 => r2\n")
    assert main(["-r", str(source_file)]) == 0
    captured = capsys.readouterr()
    assert captured.out.split("\n") == ["loadI 5 - 1", "add 1 1 2", ""]
    assert captured.err == ""
