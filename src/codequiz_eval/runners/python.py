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


class PythonCodeRunner(ProcessCodeRunner):
    """Runs Python source with a local interpreter."""

    def __init__(
        self, code_files_path: Path, interpreter_path: str = "python3", timeout_seconds: float | None = None
    ):
        super().__init__(code_files_path, timeout_seconds)
        self.interpreter_path = interpreter_path

    @property
    def language(self) -> str:
        return "python"

    @property
    def extension(self) -> str:
        return ".py"

    @classmethod
    def from_config(cls, config: EvaluationConfig) -> "PythonCodeRunner":
        return cls(
            config.temp_code_path,
            interpreter_path=config.python_interpreter_path,
            timeout_seconds=config.timeout_seconds,
        )

    def build_command(self, file_path: Path) -> list[str]:
        return [self.interpreter_path, "-u", str(file_path)]
