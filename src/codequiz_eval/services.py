# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

"""Mail and AI assessment collaborators of the evaluation worker."""

from datetime import datetime
from typing import Any, Protocol

import httpx
from loguru import logger

from codequiz_eval.models import (
    AiAssessment,
    Question,
    QuestionConfiguration,
    QuizEndStatistics,
    Solution,
    utcnow,
)


class MailService(Protocol):
    async def send_attempt_feedback(
        self,
        email: str,
        name: str,
        quiz_title: str,
        grade: float,
        total_grade: float,
        start: datetime,
        finish: datetime,
    ) -> None: ...

    async def send_quiz_end_summary(self, email: str, name: str, stats: QuizEndStatistics) -> None: ...


class LoggingMailService:
    """Writes outgoing mail to the log instead of delivering it."""

    async def send_attempt_feedback(
        self,
        email: str,
        name: str,
        quiz_title: str,
        grade: float,
        total_grade: float,
        start: datetime,
        finish: datetime,
    ) -> None:
        logger.info(
            f"MAIL to {email}: Hi {name}, your attempt at '{quiz_title}' "
            f"({start:%Y-%m-%d %H:%M} - {finish:%H:%M} UTC) scored {grade:.2f}/{total_grade:.2f}"
        )

    async def send_quiz_end_summary(self, email: str, name: str, stats: QuizEndStatistics) -> None:
        logger.info(
            f"MAIL to {email}: Hi {name}, '{stats.quiz_title}' has ended. "
            f"{stats.submitted_attempts}/{stats.total_attempts} attempts submitted, "
            f"average {stats.average_grade:.2f}/{stats.total_points:.2f}, pass rate {stats.pass_rate:.1f}%"
        )


class AssessmentService(Protocol):
    async def assess_solution(
        self, solution: Solution, question: Question, question_config: QuestionConfiguration
    ) -> AiAssessment:
        """Judge whether a solution genuinely solves its question.

        Raises:
            Exception: Any failure; callers treat it as a per-solution failure.
        """
        ...


class HttpAssessmentService:
    """
    Delegates solution assessment to an HTTP endpoint.

    The endpoint receives the question, its editor configuration, the code and
    its test-case results, and answers with an assessment object.
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        model: str = "",
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.model = model
        self._headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._internal_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def assess_solution(
        self, solution: Solution, question: Question, question_config: QuestionConfiguration
    ) -> AiAssessment:
        logger.info(f"Assessing solution {solution.id} for question {question.id}")
        response = await self._client.post(
            self.url,
            json=self._build_request(solution, question, question_config),
            headers=self._headers,
        )
        response.raise_for_status()

        assessment = AiAssessment.model_validate(response.json())
        assessment = assessment.model_copy(
            update={
                "solution_id": solution.id,
                "model": assessment.model or self.model,
                "assessed_at": assessment.assessed_at or utcnow(),
            }
        )
        logger.info(
            f"Assessment complete for solution {solution.id}: "
            f"is_valid={assessment.is_valid}, confidence={assessment.confidence_score}"
        )
        return assessment

    def _build_request(
        self, solution: Solution, question: Question, question_config: QuestionConfiguration
    ) -> dict[str, Any]:
        return {
            "model": self.model,
            "question": {"id": question.id, "statement": question.statement, "points": question.points},
            "configuration": {
                "language": question_config.language,
                "allow_execution": question_config.allow_execution,
                "show_output": question_config.show_output,
                "show_error": question_config.show_error,
            },
            "solution": {
                "id": solution.id,
                "code": solution.code,
                "evaluation_results": [r.model_dump(mode="json") for r in solution.evaluation_results],
            },
        }

    async def aclose(self) -> None:
        if self._internal_client:
            await self._client.aclose()
