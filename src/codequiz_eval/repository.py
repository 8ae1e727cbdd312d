# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from datetime import datetime
from typing import Protocol

from loguru import logger

from codequiz_eval.models import AiAssessment, Attempt, Quiz


class AttemptRepository(Protocol):
    """Persistence boundary used by the worker and the monitors.

    Loaded entities come with their related quiz, questions, test cases and
    solutions. Mutations become durable on ``save_changes``.
    """

    async def get_attempt(self, attempt_id: int) -> Attempt | None: ...

    async def list_unsubmitted_attempts(self) -> list[Attempt]: ...

    async def get_quiz(self, quiz_id: int) -> Quiz | None: ...

    async def list_quizzes_pending_summary(self, ended_before: datetime) -> list[Quiz]: ...

    async def add_assessment(self, assessment: AiAssessment) -> None: ...

    async def save_changes(self) -> None: ...


class InMemoryAttemptRepository:
    """Keeps quizzes and their attempts in process memory."""

    def __init__(self, quizzes: list[Quiz] | None = None):
        self.quizzes: dict[int, Quiz] = {}
        self.assessments: list[AiAssessment] = []
        self.save_count = 0
        for quiz in quizzes or []:
            self.add_quiz(quiz)

    def add_quiz(self, quiz: Quiz) -> None:
        self.quizzes[quiz.id] = quiz

    def add_attempt(self, attempt: Attempt) -> None:
        quiz = attempt.quiz
        self.quizzes.setdefault(quiz.id, quiz)
        if attempt not in quiz.attempts:
            quiz.attempts.append(attempt)

    async def get_attempt(self, attempt_id: int) -> Attempt | None:
        for quiz in self.quizzes.values():
            for attempt in quiz.attempts:
                if attempt.id == attempt_id:
                    return attempt
        return None

    async def list_unsubmitted_attempts(self) -> list[Attempt]:
        return [a for q in self.quizzes.values() for a in q.attempts if a.end_time is None]

    async def get_quiz(self, quiz_id: int) -> Quiz | None:
        return self.quizzes.get(quiz_id)

    async def list_quizzes_pending_summary(self, ended_before: datetime) -> list[Quiz]:
        return [q for q in self.quizzes.values() if not q.end_summary_email_sent and q.end_date <= ended_before]

    async def add_assessment(self, assessment: AiAssessment) -> None:
        # Replace any earlier assessment of the same solution.
        self.assessments = [a for a in self.assessments if a.solution_id != assessment.solution_id]
        self.assessments.append(assessment)

    async def save_changes(self) -> None:
        self.save_count += 1
        logger.debug(f"Saved changes ({self.save_count})")
