# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

import asyncio

from loguru import logger

from codequiz_eval.models import EvaluationJob


class EvaluationQueue:
    """
    Unbounded FIFO of evaluation jobs shared by producers and the worker.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[EvaluationJob] = asyncio.Queue()

    async def enqueue(self, job: EvaluationJob) -> None:
        await self._queue.put(job)
        logger.info(f"Queued evaluation of attempt {job.attempt_id}")

    def queue_ai_reassessment(self, job: EvaluationJob) -> None:
        """Queue a job without waiting. Intended for AI-only reassessments."""
        self._queue.put_nowait(job)
        logger.info(f"Queued AI reassessment of solution {job.specific_solution_id} (attempt {job.attempt_id})")

    async def dequeue(self) -> EvaluationJob:
        """Wait for the next job. Cancelling the wait loses no job."""
        return await self._queue.get()

    def __len__(self) -> int:
        return self._queue.qsize()
