# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

import hashlib

from loguru import logger


class ExecutionAuditor:
    """Audit trail for untrusted code sent to the sandbox.

    Records a SHA-256 digest of every submission instead of the code itself,
    so the log can be correlated with stored solutions without leaking them.
    """

    def __init__(self, enabled: bool = True):
        """Initializes the ExecutionAuditor.

        Args:
            enabled: Whether to emit audit records.
        """
        self.enabled = enabled

    def log_pre_execution(self, code: str, language: str) -> str:
        """Log an execution attempt.

        Args:
            code: The code about to be executed.
            language: The language the code is written in.

        Returns:
            str: The SHA-256 hash of the code.
        """
        code_hash = hashlib.sha256(code.encode("utf-8")).hexdigest()
        if self.enabled:
            logger.info(f"AUDIT: Executing {language} code. Hash: {code_hash}, Length: {len(code)}")
        return code_hash
