# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

import os

from loguru import logger

SECRET_ENV_PREFIX = "CODEQUIZ_"


class VaultIntegrator:
    """Resolves secrets for the evaluation service.

    Reads from environment variables, trying the bare key first and the
    service-prefixed key second.
    """

    def __init__(self, environ: dict[str, str] | None = None):
        self._environ = environ

    def get_secret(self, key: str) -> str | None:
        """Fetch a secret by key.

        Args:
            key: The secret name, e.g. ``AI_API_KEY``.

        Returns:
            The secret value, or None if it is not set.
        """
        environ = self._environ if self._environ is not None else os.environ
        val = environ.get(key) or environ.get(f"{SECRET_ENV_PREFIX}{key}")
        if not val:
            logger.debug(f"Secret {key} not found in environment.")
            return None
        return val
