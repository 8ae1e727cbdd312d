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

from codequiz_eval.evaluator import Evaluator
from codequiz_eval.models import (
    SYSTEM_EVALUATOR,
    Attempt,
    EvaluationJob,
    EvaluationResult,
    EvaluationStatusPayload,
    ExamineeAttempt,
    ExaminerAttempt,
    ExaminerQuiz,
    Solution,
    utcnow,
)
from codequiz_eval.notifications import (
    AI_ASSESSMENT_COMPLETE,
    EVALUATION_FAILED,
    EVALUATION_STARTED,
    QUIZ_UPDATED,
    SYSTEM_GRADING_COMPLETE,
    NotificationSink,
    examiner_group,
    user_group,
)
from codequiz_eval.queue import EvaluationQueue
from codequiz_eval.repository import AttemptRepository
from codequiz_eval.services import AssessmentService, MailService


class EvaluationWorker:
    """Consumes evaluation jobs and grades the attempts they name.

    Every job goes through system grading (test cases) and then a best-effort
    AI assessment, reporting progress to the examinee's and the examiner's
    notification groups. A failing job is reported and skipped; the consumer
    loop keeps running.
    """

    def __init__(
        self,
        queue: EvaluationQueue,
        repository: AttemptRepository,
        evaluator: Evaluator,
        notifier: NotificationSink,
        mail: MailService,
        assessor: AssessmentService | None = None,
        consumers: int = 1,
    ):
        """Initializes the EvaluationWorker.

        Args:
            queue: Source of evaluation jobs.
            repository: Loads attempts and persists grading results.
            evaluator: Runs one solution against one test case.
            notifier: Receives progress events.
            mail: Sends feedback once an attempt is fully graded.
            assessor: Optional AI assessment service. AI assessment is skipped without one.
            consumers: Number of concurrent consumer loops. Jobs stay FIFO only with one.
        """
        self.queue = queue
        self.repository = repository
        self.evaluator = evaluator
        self.notifier = notifier
        self.mail = mail
        self.assessor = assessor
        self.consumers = consumers
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def start(self) -> None:
        if self.running:
            return
        self._tasks = [asyncio.create_task(self.run(), name=f"evaluation-worker-{i}") for i in range(self.consumers)]

    async def shutdown(self) -> None:
        """Stop all consumer loops. The job in progress, if any, is abandoned."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []

    async def run(self) -> None:
        """Consumer loop: dequeue and process jobs until cancelled."""
        logger.info("Evaluation worker started")
        try:
            while True:
                job = await self.queue.dequeue()
                try:
                    await self.process_job(job)
                except Exception as e:
                    logger.error(f"Error processing evaluation job for attempt {job.attempt_id}: {e}")
        except asyncio.CancelledError:
            logger.info("Evaluation worker stopping")

    async def process_job(self, job: EvaluationJob) -> None:
        logger.info(f"Processing evaluation job for attempt {job.attempt_id}")
        await self._notify(job, EVALUATION_STARTED)

        try:
            attempt = await self.repository.get_attempt(job.attempt_id)
            if attempt is None:
                logger.warning(f"Attempt {job.attempt_id} not found for evaluation")
                await self._notify(job, EVALUATION_FAILED, "Attempt not found")
                return
            if not attempt.is_submitted:
                logger.warning(f"Attempt {job.attempt_id} has not been submitted yet")
                await self._notify(job, EVALUATION_FAILED, "Attempt not submitted")
                return

            if job.specific_solution_id is not None:
                await self._reassess_solution(attempt, job.specific_solution_id)
                await self.repository.save_changes()
                await self._notify(job, AI_ASSESSMENT_COMPLETE, attempt=attempt)
                await self._publish_quiz_statistics(job)
                logger.info(f"AI reassessment complete for solution {job.specific_solution_id}")
                return

            logger.info(f"Starting system grading for attempt {job.attempt_id}")
            await self._grade_attempt(attempt)
            await self.repository.save_changes()
            await self._notify(job, SYSTEM_GRADING_COMPLETE, attempt=attempt)

            logger.info(f"Starting AI assessment for attempt {job.attempt_id}")
            await self._assess_attempt(attempt)
            await self.repository.save_changes()
            await self._notify(job, AI_ASSESSMENT_COMPLETE, attempt=attempt)

            if all(s.received_grade is not None for s in attempt.solutions):
                await self._send_feedback(attempt)

            await self._publish_quiz_statistics(job)
            logger.info(f"Evaluation complete for attempt {job.attempt_id}")

        except Exception as e:
            logger.exception(f"Evaluation failed for attempt {job.attempt_id}: {e}")
            await self._notify(job, EVALUATION_FAILED, str(e))

    async def _grade_attempt(self, attempt: Attempt) -> None:
        quiz = attempt.quiz
        for solution in attempt.solutions:
            question = quiz.get_question(solution.question_id)
            if not question.test_cases:
                continue

            language = quiz.configuration_for(question).language
            results: list[EvaluationResult] = []
            # Authored order; results are stored in the same order.
            for test_case in question.test_cases:
                results.append(await self.evaluator.evaluate(language, solution.code, test_case))

            passed = sum(1 for r in results if r.is_successful)
            solution.evaluation_results = results
            solution.received_grade = (passed / len(results)) * question.points
            solution.evaluated_by = SYSTEM_EVALUATOR
            logger.debug(f"Solution {solution.id}: {passed}/{len(results)} test cases passed")

    async def _assess_attempt(self, attempt: Attempt) -> None:
        if self.assessor is None:
            logger.debug("No AI assessment service configured; skipping AI assessment")
            return
        for solution in attempt.solutions:
            if solution.evaluation_results:
                await self._assess_solution(self.assessor, attempt, solution)

    async def _reassess_solution(self, attempt: Attempt, solution_id: int) -> None:
        solution = next((s for s in attempt.solutions if s.id == solution_id), None)
        if solution is None:
            raise LookupError(f"Solution {solution_id} does not belong to attempt {attempt.id}")
        if self.assessor is None:
            logger.warning(f"AI reassessment of solution {solution_id} requested but no assessor is configured")
            return
        await self._assess_solution(self.assessor, attempt, solution)

    async def _assess_solution(self, assessor: AssessmentService, attempt: Attempt, solution: Solution) -> None:
        question = attempt.quiz.get_question(solution.question_id)
        try:
            assessment = await assessor.assess_solution(
                solution, question, attempt.quiz.configuration_for(question)
            )
            assessment = assessment.model_copy(update={"solution_id": solution.id})
            await self.repository.add_assessment(assessment)
            solution.ai_assessment = assessment
        except Exception as e:
            logger.warning(f"AI assessment failed for solution {solution.id}: {e}")

    async def _send_feedback(self, attempt: Attempt) -> None:
        quiz = attempt.quiz
        await self.mail.send_attempt_feedback(
            attempt.examinee.email,
            attempt.examinee.first_name,
            quiz.title,
            attempt.grade or 0.0,
            quiz.total_points,
            attempt.start_time,
            utcnow(),
        )

    async def _publish_quiz_statistics(self, job: EvaluationJob) -> None:
        quiz = await self.repository.get_quiz(job.quiz_id)
        if quiz is None:
            return
        await self.notifier.publish(examiner_group(job.examiner_id), QUIZ_UPDATED, ExaminerQuiz.from_entity(quiz))

    async def _notify(
        self,
        job: EvaluationJob,
        event: str,
        error_message: str | None = None,
        attempt: Attempt | None = None,
    ) -> None:
        payload = EvaluationStatusPayload(
            attempt_id=job.attempt_id,
            quiz_id=job.quiz_id,
            status=event,
            error_message=error_message,
            examiner_attempt=ExaminerAttempt.from_entity(attempt) if attempt else None,
            examinee_attempt=ExamineeAttempt.from_entity(attempt) if attempt else None,
            timestamp=utcnow(),
        )
        await self.notifier.publish(user_group(job.examinee_id), event, payload)
        await self.notifier.publish(examiner_group(job.examiner_id), event, payload)
