# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from abc import ABC, abstractmethod

from codequiz_eval.models import SandboxRequest, SandboxResult

TIMEOUT_MESSAGE = "Execution timed out"


class SandboxExecutor(ABC):
    """
    Abstract base class for isolated execution environments (e.g., Docker).
    Follows the Strategy Pattern.
    """

    @abstractmethod
    async def execute(self, request: SandboxRequest) -> SandboxResult:
        """Run one staged code file in an isolated, resource-capped environment.

        Normal failure modes of the submitted code (non-zero exit, timeout)
        are reported in the result, never raised.

        Args:
            request: Image, command, staged file, input and limits.

        Returns:
            SandboxResult: Success flag, captured output or error, and whether
            the deadline elapsed.

        Raises:
            SandboxError: If the isolation infrastructure itself fails.
        """
        pass  # pragma: no cover
