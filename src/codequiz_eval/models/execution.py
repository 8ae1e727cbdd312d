# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

"""Data models for code execution and test-case evaluation."""

from pydantic import BaseModel, ConfigDict, Field


class TestCase(BaseModel):
    """An authored test case: stdin lines and the exact expected stdout."""

    __test__ = False  # not a pytest class

    model_config = ConfigDict(frozen=True)

    test_case_number: int
    input: list[str] = Field(default_factory=list)
    expected_output: str


class CodeRunnerOptions(BaseModel):
    """Per-execution options for a code runner.

    Attributes:
        contain_output: Whether captured stdout is returned on success.
        contain_error: Whether captured error text is returned on failure.
        input: Lines written to the process's standard input.
    """

    contain_output: bool = True
    contain_error: bool = True
    input: list[str] = Field(default_factory=list)


class CodeRunnerResult(BaseModel):
    """The outcome of a single execution."""

    model_config = ConfigDict(frozen=True)

    success: bool
    output: str | None = None
    error: str | None = None


class EvaluationResult(BaseModel):
    """The judgement of one solution against one test case."""

    test_case: TestCase
    output: str
    is_successful: bool
    error: str | None = None

    @classmethod
    def judge(cls, test_case: TestCase, result: CodeRunnerResult) -> "EvaluationResult":
        """Compare a runner result with the test case's expected output.

        A test case passes only if the run succeeded and the trimmed output is
        identical to the trimmed expected output.
        """
        is_successful = (
            result.success
            and result.output is not None
            and result.output.strip() == test_case.expected_output.strip()
        )
        return cls(
            test_case=test_case,
            output=result.output or "",
            is_successful=is_successful,
            error=result.error,
        )


class SupportedLanguage(BaseModel):
    name: str
    extension: str


class SandboxRequest(BaseModel):
    """What a sandbox executor needs to run one staged code file.

    Attributes:
        docker_image: The image providing the language toolchain.
        command: The compiler/interpreter invocation, e.g. ``python -u``.
        arguments: Arguments appended to the command.
        code_file_path: Host path of the staged code file.
        container_work_dir: Directory the code file is mounted into.
        input: Lines fed to standard input.
        timeout_seconds: Execution time limit, excluding start-up grace.
        memory_limit_bytes: Hard memory ceiling.
        cpu_quota: CPU quota in microseconds per CPU period.
    """

    docker_image: str
    command: str
    arguments: list[str]
    code_file_path: str
    container_work_dir: str = "/sandbox"
    input: list[str] = Field(default_factory=list)
    timeout_seconds: int = 10
    memory_limit_bytes: int = 128 * 1024 * 1024
    cpu_quota: int = 50000


class SandboxResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    output: str | None = None
    error: str | None = None
    timed_out: bool = False
