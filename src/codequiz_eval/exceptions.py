# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

"""Exception types raised by the execution and evaluation pipeline."""


class CodeQuizError(Exception):
    """Base class for all pipeline errors."""


class UnsupportedLanguageError(CodeQuizError):
    """Raised when no runner is registered for the requested language."""

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"The programming language '{language}' is not currently supported.")


class CodeRunnerError(CodeQuizError):
    """Raised when a runner could not execute code.

    Covers process spawn failures, sandbox infrastructure faults and any other
    error that is not an expected outcome of running the submitted code.
    """

    def __init__(self, message: str = "Failed to execute code", language: str | None = None):
        self.language = language
        super().__init__(message)


class SandboxError(CodeQuizError):
    """Raised by a sandbox executor when the isolation infrastructure fails."""
