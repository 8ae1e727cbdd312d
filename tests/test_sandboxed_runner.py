# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.exceptions import CodeRunnerError, SandboxError
from codequiz_eval.models import CodeRunnerOptions, CodeRunnerResult, SandboxRequest, SandboxResult
from codequiz_eval.runners import PythonCodeRunner, SandboxedCodeRunner
from codequiz_eval.runtime import SandboxExecutor
from codequiz_eval.utils.audit import ExecutionAuditor


@pytest.fixture
def executor() -> AsyncMock:
    executor = AsyncMock(spec=SandboxExecutor)
    executor.execute.return_value = SandboxResult(success=True, output="3")
    return executor


@pytest.fixture
def inner(tmp_path: Path) -> PythonCodeRunner:
    return PythonCodeRunner(tmp_path / "direct")


@pytest.mark.asyncio
async def test_builds_sandbox_request(config: EvaluationConfig, executor: AsyncMock, inner: PythonCodeRunner) -> None:
    staged: dict[str, str] = {}

    async def capture(request: SandboxRequest) -> SandboxResult:
        staged["code"] = Path(request.code_file_path).read_text()
        return SandboxResult(success=True, output="3")

    executor.execute.side_effect = capture
    runner = SandboxedCodeRunner(inner, executor, config)

    result = await runner.run_code("print(1 + 2)", CodeRunnerOptions(input=["x"]))

    assert result == CodeRunnerResult(success=True, output="3")
    request: SandboxRequest = executor.execute.call_args.args[0]
    assert request.docker_image == "python:3.12-slim"
    assert request.command == "python -u"
    file_name = Path(request.code_file_path).name
    assert file_name.endswith(".py")
    assert request.arguments == [f"/sandbox/{file_name}"]
    assert request.input == ["x"]
    assert request.timeout_seconds == config.timeout_seconds
    assert request.memory_limit_bytes == config.memory_limit_bytes
    assert staged["code"] == "print(1 + 2)"
    # The staged file is removed afterwards.
    assert not Path(request.code_file_path).exists()


@pytest.mark.asyncio
async def test_applies_code_prefix(tmp_path: Path, executor: AsyncMock) -> None:
    config = EvaluationConfig(temp_code_path=tmp_path, enable_audit_logging=False)
    inner = MagicMock()
    inner.language = "csharp"
    inner.extension = ".cs"
    staged: list[str] = []

    async def capture(request: SandboxRequest) -> SandboxResult:
        staged.append(Path(request.code_file_path).read_text())
        return SandboxResult(success=True, output="")

    executor.execute.side_effect = capture

    await SandboxedCodeRunner(inner, executor, config).run_code("class A { }")

    assert staged == ["#pragma warning disable\nclass A { }"]
    request: SandboxRequest = executor.execute.call_args.args[0]
    assert request.arguments[0] == "run"


@pytest.mark.asyncio
async def test_language_delegates_to_inner(
    config: EvaluationConfig, executor: AsyncMock, inner: PythonCodeRunner
) -> None:
    runner = SandboxedCodeRunner(inner, executor, config)

    assert runner.language == inner.language == "python"
    assert runner.extension == ".py"
    assert runner is not inner


@pytest.mark.asyncio
async def test_timeout_without_error_text(
    config: EvaluationConfig, executor: AsyncMock, inner: PythonCodeRunner
) -> None:
    executor.execute.return_value = SandboxResult(success=False, timed_out=True)

    result = await SandboxedCodeRunner(inner, executor, config).run_code("while True: pass")

    assert result.success is False
    assert result.error == "Execution timed out"


@pytest.mark.asyncio
async def test_failure_passes_error_through(
    config: EvaluationConfig, executor: AsyncMock, inner: PythonCodeRunner
) -> None:
    executor.execute.return_value = SandboxResult(success=False, error="NameError: name 'x' is not defined")

    result = await SandboxedCodeRunner(inner, executor, config).run_code("x")

    assert result == CodeRunnerResult(success=False, error="NameError: name 'x' is not defined")


@pytest.mark.asyncio
async def test_fallback_matches_inner_runner(tmp_path: Path, executor: AsyncMock) -> None:
    config = EvaluationConfig(temp_code_path=tmp_path, language_configs={})
    expected = CodeRunnerResult(success=True, output="direct")
    inner = MagicMock()
    inner.language = "python"
    inner.run_code = AsyncMock(return_value=expected)
    options = CodeRunnerOptions(input=["1"])

    result = await SandboxedCodeRunner(inner, executor, config).run_code("print(1)", options)

    assert result == expected
    inner.run_code.assert_awaited_once_with("print(1)", options)
    executor.execute.assert_not_called()


@pytest.mark.asyncio
async def test_executor_failure_is_normalized(
    config: EvaluationConfig, executor: AsyncMock, inner: PythonCodeRunner
) -> None:
    executor.execute.side_effect = SandboxError("Docker is not available")

    with pytest.raises(CodeRunnerError, match="Failed to execute python code"):
        await SandboxedCodeRunner(inner, executor, config).run_code("print(1)")

    assert list(config.temp_code_path.iterdir()) == []


@pytest.mark.asyncio
async def test_audits_each_execution(config: EvaluationConfig, executor: AsyncMock, inner: PythonCodeRunner) -> None:
    audit = MagicMock(spec=ExecutionAuditor)

    await SandboxedCodeRunner(inner, executor, config, audit=audit).run_code("print(1)")

    audit.log_pre_execution.assert_called_once_with("print(1)", "python")
