# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

import asyncio
import sys
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.exceptions import CodeRunnerError
from codequiz_eval.models import CodeRunnerOptions
from codequiz_eval.runners import REGISTERED_RUNNERS, CSharpCodeRunner, PythonCodeRunner, build_runners


def make_process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.returncode = returncode
    process.wait = AsyncMock(return_value=returncode)
    return process


@pytest.fixture
def mock_exec() -> Any:
    with patch("codequiz_eval.runners.base.asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock:
        yield mock


@pytest.mark.asyncio
async def test_python_runner_real_interpreter(tmp_path: Path) -> None:
    runner = PythonCodeRunner(tmp_path, interpreter_path=sys.executable, timeout_seconds=30)

    result = await runner.run_code(
        "a = int(input())\nb = int(input())\nprint(a + b)", CodeRunnerOptions(input=["2", "40"])
    )

    assert result.success is True
    assert result.output == "42"
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_python_runner_reports_stderr(tmp_path: Path) -> None:
    runner = PythonCodeRunner(tmp_path, interpreter_path=sys.executable, timeout_seconds=30)

    result = await runner.run_code("raise ValueError('bad input')")

    assert result.success is False
    assert result.output is None
    assert result.error is not None
    assert "ValueError: bad input" in result.error


@pytest.mark.asyncio
async def test_python_runner_command_and_stdin(tmp_path: Path, mock_exec: Any) -> None:
    process = make_process(stdout=b"hello\n")
    mock_exec.return_value = process
    runner = PythonCodeRunner(tmp_path, interpreter_path="python3")

    result = await runner.run_code("print('hello')", CodeRunnerOptions(input=["a", "b"]))

    assert result.success is True
    assert result.output == "hello"
    args, kwargs = mock_exec.call_args
    assert args[0] == "python3"
    assert args[1] == "-u"
    assert args[2].endswith(".py")
    assert kwargs["cwd"] == tmp_path
    process.communicate.assert_awaited_once_with(b"a\nb\n")


@pytest.mark.asyncio
async def test_capture_flags_suppress_output(tmp_path: Path, mock_exec: Any) -> None:
    mock_exec.return_value = make_process(stdout=b"secret")
    runner = PythonCodeRunner(tmp_path)

    result = await runner.run_code("print('secret')", CodeRunnerOptions(contain_output=False))

    assert result.success is True
    assert result.output is None


@pytest.mark.asyncio
async def test_capture_flags_suppress_error(tmp_path: Path, mock_exec: Any) -> None:
    mock_exec.return_value = make_process(stderr=b"Traceback", returncode=1)
    runner = PythonCodeRunner(tmp_path)

    result = await runner.run_code("x", CodeRunnerOptions(contain_error=False))

    assert result.success is False
    assert result.error is None


@pytest.mark.asyncio
async def test_csharp_runner_prefers_stdout_for_errors(tmp_path: Path, mock_exec: Any) -> None:
    mock_exec.return_value = make_process(stdout=b"error CS1002: ; expected", stderr=b"build failed", returncode=1)
    runner = CSharpCodeRunner(tmp_path, compiler_path="dotnet")

    result = await runner.run_code("class A { }")

    assert result.success is False
    assert result.error == "error CS1002: ; expected"
    args, _ = mock_exec.call_args
    assert args[:2] == ("dotnet", "run")
    assert args[2].endswith(".cs")


@pytest.mark.asyncio
async def test_csharp_runner_falls_back_to_stderr(tmp_path: Path, mock_exec: Any) -> None:
    mock_exec.return_value = make_process(stderr=b"Unhandled exception", returncode=1)

    result = await CSharpCodeRunner(tmp_path).run_code("class A { }")

    assert result.error == "Unhandled exception"


def test_csharp_runner_disables_warnings(tmp_path: Path) -> None:
    assert CSharpCodeRunner(tmp_path).prepare_code("int x;") == "#pragma warning disable\nint x;"


@pytest.mark.asyncio
async def test_runner_timeout_kills_process(tmp_path: Path, mock_exec: Any) -> None:
    async def never_finishes(*args: Any) -> tuple[bytes, bytes]:
        await asyncio.sleep(10)
        return b"", b""

    process = make_process()
    process.communicate = AsyncMock(side_effect=never_finishes)
    process.returncode = None
    mock_exec.return_value = process
    runner = PythonCodeRunner(tmp_path, timeout_seconds=0.05)

    result = await runner.run_code("while True: pass")

    assert result.success is False
    assert result.error == "Execution timed out"
    process.kill.assert_called_once()
    process.wait.assert_awaited_once()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_spawn_failure_is_normalized(tmp_path: Path, mock_exec: Any) -> None:
    mock_exec.side_effect = FileNotFoundError("python3")
    runner = PythonCodeRunner(tmp_path)

    with pytest.raises(CodeRunnerError) as exc_info:
        await runner.run_code("print(1)")

    assert exc_info.value.language == "python"
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)
    assert list(tmp_path.iterdir()) == []


def test_build_runners_covers_registry(tmp_path: Path) -> None:
    config = EvaluationConfig(temp_code_path=tmp_path, python_interpreter_path="/usr/bin/python3.12")

    runners = build_runners(config)

    assert [type(r) for r in runners] == list(REGISTERED_RUNNERS)
    python = runners[0]
    assert isinstance(python, PythonCodeRunner)
    assert python.interpreter_path == "/usr/bin/python3.12"
    assert python.timeout_seconds == config.timeout_seconds


@pytest.mark.asyncio
async def test_cancelled_run_kills_child_process(tmp_path: Path) -> None:
    spawned: list[asyncio.subprocess.Process] = []
    real_exec = asyncio.create_subprocess_exec

    async def spawn(*args: Any, **kwargs: Any) -> asyncio.subprocess.Process:
        process = await real_exec(*args, **kwargs)
        spawned.append(process)
        return process

    runner = PythonCodeRunner(tmp_path, interpreter_path=sys.executable, timeout_seconds=60)
    with patch("codequiz_eval.runners.base.asyncio.create_subprocess_exec", side_effect=spawn):
        task = asyncio.create_task(runner.run_code("import time\ntime.sleep(20)"))
        while not spawned:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert spawned[0].returncode is not None
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_finished_process_is_not_killed(tmp_path: Path, mock_exec: Any) -> None:
    process = make_process(stdout=b"ok")
    mock_exec.return_value = process

    await PythonCodeRunner(tmp_path).run_code("print('ok')")

    process.kill.assert_not_called()
