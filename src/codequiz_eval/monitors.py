# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

"""Periodic background checks: expired attempts and ended quizzes."""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from loguru import logger

from codequiz_eval.models import Attempt, EvaluationJob, ExamineeAttempt, Quiz, QuizEndStatistics, utcnow
from codequiz_eval.notifications import ATTEMPT_AUTO_SUBMITTED, NotificationSink, examiner_group, user_group
from codequiz_eval.queue import EvaluationQueue
from codequiz_eval.repository import AttemptRepository
from codequiz_eval.services import MailService

PASS_THRESHOLD = 0.6


class PollingMonitor(ABC):
    """Runs ``tick`` every ``interval`` seconds in a background task.

    A failing tick is logged and the loop carries on with the next one.
    """

    name = "monitor"

    def __init__(self, interval: float):
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @abstractmethod
    async def tick(self) -> None:
        pass  # pragma: no cover

    async def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop(), name=self.name)

    async def shutdown(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def _loop(self) -> None:
        logger.info(f"{self.name} started (interval {self.interval}s)")
        try:
            while True:
                try:
                    await self.tick()
                except Exception as e:
                    logger.exception(f"{self.name} check failed: {e}")
                await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            logger.info(f"{self.name} stopping")


class AttemptExpiryMonitor(PollingMonitor):
    """
    Auto-submits attempts whose time ran out.

    An attempt expires at the earlier of its start time plus the quiz duration
    and the quiz end date. It is only closed once a grace period has also
    passed, so that submissions sent at the last moment still get through.
    The recorded end time is the deadline itself, not the time of the sweep.
    """

    name = "Attempt expiry monitor"

    def __init__(
        self,
        repository: AttemptRepository,
        queue: EvaluationQueue,
        notifier: NotificationSink,
        interval: float = 10.0,
        grace_seconds: float = 30.0,
    ):
        super().__init__(interval)
        self.repository = repository
        self.queue = queue
        self.notifier = notifier
        self.grace = timedelta(seconds=grace_seconds)

    async def tick(self) -> None:
        await self.check_expired_attempts()

    async def check_expired_attempts(self, now: datetime | None = None) -> list[Attempt]:
        now = now or utcnow()
        attempts = await self.repository.list_unsubmitted_attempts()
        expired = [a for a in attempts if now > a.deadline + self.grace]
        if not expired:
            return []

        logger.info(f"Found {len(expired)} expired attempts to auto-submit")
        for attempt in expired:
            attempt.end_time = attempt.deadline
            payload = ExamineeAttempt.from_entity(attempt)
            try:
                await self.notifier.publish(user_group(attempt.examinee_id), ATTEMPT_AUTO_SUBMITTED, payload)
                await self.notifier.publish(
                    examiner_group(attempt.quiz.examiner_id), ATTEMPT_AUTO_SUBMITTED, payload
                )
            except Exception as e:
                logger.warning(f"Failed to announce auto-submission of attempt {attempt.id}: {e}")
            logger.info(
                f"Auto-submitted attempt {attempt.id} for quiz {attempt.quiz_id}. "
                f"End time set to {attempt.end_time:%Y-%m-%d %H:%M:%S}"
            )

        # End times must be saved before any job is queued.
        await self.repository.save_changes()

        for attempt in expired:
            await self.queue.enqueue(
                EvaluationJob(
                    attempt_id=attempt.id,
                    examinee_id=attempt.examinee_id,
                    examiner_id=attempt.quiz.examiner_id,
                    quiz_id=attempt.quiz_id,
                )
            )
        return expired


class QuizEndMonitor(PollingMonitor):
    """Mails each examiner a results summary once their quiz has ended."""

    name = "Quiz end monitor"

    def __init__(
        self,
        repository: AttemptRepository,
        mail: MailService,
        interval: float = 60.0,
        email_delay: float = 120.0,
    ):
        super().__init__(interval)
        self.repository = repository
        self.mail = mail
        self.email_delay = timedelta(seconds=email_delay)

    async def tick(self) -> None:
        await self.check_ended_quizzes()

    async def check_ended_quizzes(self, now: datetime | None = None) -> list[Quiz]:
        cutoff = (now or utcnow()) - self.email_delay
        quizzes = await self.repository.list_quizzes_pending_summary(cutoff)

        summarized: list[Quiz] = []
        for quiz in quizzes:
            try:
                stats = compute_quiz_statistics(quiz)
                await self.mail.send_quiz_end_summary(quiz.examiner.email, quiz.examiner.first_name, stats)
                quiz.end_summary_email_sent = True
                await self.repository.save_changes()
                summarized.append(quiz)
                logger.info(f"Sent quiz end summary for quiz {quiz.id} ({quiz.title}) to {quiz.examiner.email}")
            except Exception as e:
                logger.error(f"Failed to send quiz end summary for quiz {quiz.id}: {e}")
        return summarized


def compute_quiz_statistics(quiz: Quiz) -> QuizEndStatistics:
    """Summarize a quiz's attempts. Ungraded solutions count as zero points."""
    submitted = [a for a in quiz.attempts if a.is_submitted]
    total_points = quiz.total_points
    stats = QuizEndStatistics(
        quiz_title=quiz.title,
        start_date=quiz.start_date,
        end_date=quiz.end_date,
        total_attempts=len(quiz.attempts),
        submitted_attempts=len(submitted),
        in_progress_attempts=len(quiz.attempts) - len(submitted),
        total_points=total_points,
    )

    if submitted:
        grades = [sum(s.received_grade or 0.0 for s in a.solutions) for a in submitted]
        threshold = total_points * PASS_THRESHOLD
        stats.average_grade = sum(grades) / len(grades)
        stats.highest_grade = max(grades)
        stats.lowest_grade = min(grades)
        stats.pass_rate = sum(1 for g in grades if g >= threshold) / len(grades) * 100

    assessments = [s.ai_assessment for a in submitted for s in a.solutions if s.ai_assessment is not None]
    stats.total_ai_assessments = len(assessments)
    stats.flagged_solutions = sum(1 for a in assessments if not a.is_valid or a.flags)
    return stats
