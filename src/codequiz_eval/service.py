# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from typing import Any

from loguru import logger

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.evaluator import Evaluator
from codequiz_eval.factory import RunnerFactory, get_runner_factory
from codequiz_eval.models import Attempt, EvaluationJob, utcnow
from codequiz_eval.monitors import AttemptExpiryMonitor, QuizEndMonitor
from codequiz_eval.notifications import InMemoryNotificationSink, NotificationSink, WebhookNotificationSink
from codequiz_eval.queue import EvaluationQueue
from codequiz_eval.repository import AttemptRepository
from codequiz_eval.runtime import SandboxExecutor
from codequiz_eval.services import AssessmentService, HttpAssessmentService, LoggingMailService, MailService
from codequiz_eval.worker import EvaluationWorker


class EvaluationService:
    """The evaluation pipeline: queue, worker and background monitors.

    Use as an async context manager to run the background tasks for the
    lifetime of the block.
    """

    def __init__(
        self,
        config: EvaluationConfig,
        repository: AttemptRepository,
        factory: RunnerFactory,
        notifier: NotificationSink,
        mail: MailService,
        assessor: AssessmentService | None = None,
    ):
        self.config = config
        self.repository = repository
        self.factory = factory
        self.notifier = notifier
        self.mail = mail
        self.assessor = assessor

        self.queue = EvaluationQueue()
        self.evaluator = Evaluator(factory)
        self.worker = EvaluationWorker(
            self.queue,
            repository,
            self.evaluator,
            notifier,
            mail,
            assessor=assessor,
            consumers=config.worker_consumers,
        )
        self.expiry_monitor = AttemptExpiryMonitor(
            repository,
            self.queue,
            notifier,
            interval=config.expiry_check_interval,
            grace_seconds=config.expiry_grace_seconds,
        )
        self.quiz_end_monitor = QuizEndMonitor(
            repository,
            mail,
            interval=config.quiz_end_check_interval,
            email_delay=config.quiz_end_email_delay,
        )

    @classmethod
    def from_config(
        cls,
        config: EvaluationConfig,
        repository: AttemptRepository,
        executor: SandboxExecutor | None = None,
        notifier: NotificationSink | None = None,
        mail: MailService | None = None,
        assessor: AssessmentService | None = None,
    ) -> "EvaluationService":
        """Build the service, creating default collaborators from configuration."""
        if notifier is None:
            if config.notification_webhook_url:
                notifier = WebhookNotificationSink(
                    config.notification_webhook_url,
                    token=config.notification_token,
                    timeout=config.http_timeout,
                )
            else:
                notifier = InMemoryNotificationSink()
        if assessor is None and config.ai_assessment_url:
            assessor = HttpAssessmentService(
                config.ai_assessment_url,
                api_key=config.ai_api_key,
                model=config.ai_model,
                timeout=config.http_timeout,
            )
        return cls(
            config,
            repository,
            get_runner_factory(config, executor),
            notifier,
            mail or LoggingMailService(),
            assessor=assessor,
        )

    async def __aenter__(self) -> "EvaluationService":
        await self.start()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.shutdown()

    async def start(self) -> None:
        logger.info(
            f"Starting evaluation service. Languages: {[lang.name for lang in self.factory.get_supported_languages()]}"
        )
        await self.worker.start()
        await self.expiry_monitor.start()
        await self.quiz_end_monitor.start()

    async def shutdown(self) -> None:
        logger.info(f"Shutting down evaluation service. {len(self.queue)} queued jobs will be dropped.")
        await self.expiry_monitor.shutdown()
        await self.quiz_end_monitor.shutdown()
        await self.worker.shutdown()
        for collaborator in (self.notifier, self.assessor):
            aclose: Any = getattr(collaborator, "aclose", None)
            if aclose is not None:
                await aclose()

    async def submit_attempt(self, attempt: Attempt) -> EvaluationJob:
        """
        Close an attempt on the examinee's request and queue it for grading.

        An attempt that is already closed keeps its end time.
        """
        if attempt.end_time is None:
            attempt.end_time = min(utcnow(), attempt.deadline)
            await self.repository.save_changes()
        job = EvaluationJob(
            attempt_id=attempt.id,
            examinee_id=attempt.examinee_id,
            examiner_id=attempt.quiz.examiner_id,
            quiz_id=attempt.quiz_id,
        )
        await self.queue.enqueue(job)
        return job

    def request_ai_reassessment(self, attempt: Attempt, solution_id: int) -> EvaluationJob:
        """Queue an AI-only reassessment of one solution of a submitted attempt."""
        job = EvaluationJob(
            attempt_id=attempt.id,
            examinee_id=attempt.examinee_id,
            examiner_id=attempt.quiz.examiner_id,
            quiz_id=attempt.quiz_id,
            specific_solution_id=solution_id,
        )
        self.queue.queue_ai_reassessment(job)
        return job
