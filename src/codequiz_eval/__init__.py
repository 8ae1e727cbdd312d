# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

"""
Sandboxed execution and grading of code quiz submissions.
"""

__version__ = "0.1.0"
__author__ = "CoReason, Inc."

from .config import EvaluationConfig, LanguageSandboxConfig
from .evaluator import Evaluator
from .exceptions import CodeQuizError, CodeRunnerError, SandboxError, UnsupportedLanguageError
from .factory import RunnerFactory, get_runner_factory
from .queue import EvaluationQueue
from .service import EvaluationService
from .worker import EvaluationWorker

__all__ = [
    "CodeQuizError",
    "CodeRunnerError",
    "EvaluationConfig",
    "EvaluationQueue",
    "EvaluationService",
    "EvaluationWorker",
    "Evaluator",
    "LanguageSandboxConfig",
    "RunnerFactory",
    "SandboxError",
    "UnsupportedLanguageError",
    "get_runner_factory",
]
