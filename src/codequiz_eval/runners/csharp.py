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

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.runners.base import ProcessCodeRunner

PRAGMA_PREFIX = "#pragma warning disable\n"


class CSharpCodeRunner(ProcessCodeRunner):
    """Runs C# file-based programs with ``dotnet run``.

    Compiler warnings are suppressed so they do not pollute program output.
    The compiler reports build errors on stdout, so stdout is preferred as the
    error text.
    """

    def __init__(
        self, code_files_path: Path, compiler_path: str = "dotnet", timeout_seconds: float | None = None
    ):
        super().__init__(code_files_path, timeout_seconds)
        self.compiler_path = compiler_path

    @property
    def language(self) -> str:
        return "csharp"

    @property
    def extension(self) -> str:
        return ".cs"

    @classmethod
    def from_config(cls, config: EvaluationConfig) -> "CSharpCodeRunner":
        return cls(
            config.temp_code_path,
            compiler_path=config.csharp_compiler_path,
            timeout_seconds=config.timeout_seconds,
        )

    def prepare_code(self, code: str) -> str:
        return PRAGMA_PREFIX + code

    def build_command(self, file_path: Path) -> list[str]:
        return [self.compiler_path, "run", str(file_path)]

    def select_error(self, stdout: str, stderr: str) -> str:
        return stdout or stderr
