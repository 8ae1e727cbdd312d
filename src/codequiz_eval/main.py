# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

import anyio

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.repository import AttemptRepository, InMemoryAttemptRepository
from codequiz_eval.service import EvaluationService
from codequiz_eval.utils.logger import logger


async def serve(config: EvaluationConfig, repository: AttemptRepository) -> None:
    async with EvaluationService.from_config(config, repository):
        await anyio.sleep_forever()


def main() -> None:
    """
    Run the evaluation service until interrupted.
    """
    config = EvaluationConfig()
    try:
        anyio.run(serve, config, InMemoryAttemptRepository())
    except KeyboardInterrupt:
        logger.info("Evaluation service interrupted")


if __name__ == "__main__":  # pragma: no cover
    main()
