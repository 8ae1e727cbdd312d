# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.runners.base import CodeRunner, ProcessCodeRunner
from codequiz_eval.runners.csharp import CSharpCodeRunner
from codequiz_eval.runners.python import PythonCodeRunner
from codequiz_eval.runners.sandboxed import SandboxedCodeRunner

REGISTERED_RUNNERS: tuple[type[ProcessCodeRunner], ...] = (PythonCodeRunner, CSharpCodeRunner)


def build_runners(config: EvaluationConfig) -> list[CodeRunner]:
    """Instantiate every registered language runner from configuration."""
    return [runner_cls.from_config(config) for runner_cls in REGISTERED_RUNNERS]


__all__ = [
    "REGISTERED_RUNNERS",
    "CSharpCodeRunner",
    "CodeRunner",
    "ProcessCodeRunner",
    "PythonCodeRunner",
    "SandboxedCodeRunner",
    "build_runners",
]
