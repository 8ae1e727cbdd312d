# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

"""Persistence-owned quiz entities.

These are mutable and reference each other (an attempt points at its quiz, a
quiz lists its attempts), so they are plain dataclasses rather than pydantic
models. Use the projections in ``codequiz_eval.models.views`` to serialize.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from codequiz_eval.models.execution import EvaluationResult, TestCase

SYSTEM_EVALUATOR = "System"


class AiAssessment(BaseModel):
    """AI verdict on a solution beyond its test-case results.

    Attributes:
        is_valid: False flags hardcoded outputs, gamed test cases and similar.
        confidence_score: 0.0 to 1.0.
        suggested_grade: Fraction (0.0 to 1.0) of the question's points.
    """

    solution_id: int | None = None
    is_valid: bool
    confidence_score: float = Field(ge=0.0, le=1.0)
    reasoning: str
    flags: list[str] = Field(default_factory=list)
    suggested_grade: float | None = None
    model: str = ""
    assessed_at: datetime | None = None


@dataclass(eq=False)
class User:
    id: str
    email: str
    first_name: str
    last_name: str = ""


@dataclass(eq=False)
class QuestionConfiguration:
    language: str
    allow_execution: bool = True
    show_output: bool = True
    show_error: bool = True


@dataclass(eq=False)
class Question:
    id: int
    statement: str
    points: float
    order: int = 0
    test_cases: list[TestCase] = field(default_factory=list)
    question_configuration: QuestionConfiguration | None = None


@dataclass(eq=False)
class Solution:
    id: int
    question_id: int
    attempt_id: int
    code: str
    evaluation_results: list[EvaluationResult] = field(default_factory=list)
    received_grade: float | None = None
    evaluated_by: str | None = None
    ai_assessment: AiAssessment | None = None


@dataclass(eq=False)
class Quiz:
    id: int
    title: str
    start_date: datetime
    end_date: datetime
    duration: timedelta
    examiner: User
    global_question_configuration: QuestionConfiguration
    questions: list[Question] = field(default_factory=list)
    attempts: list["Attempt"] = field(default_factory=list)
    show_ai_feedback_to_students: bool = False
    end_summary_email_sent: bool = False

    @property
    def examiner_id(self) -> str:
        return self.examiner.id

    @property
    def total_points(self) -> float:
        return sum(q.points for q in self.questions)

    def get_question(self, question_id: int) -> Question:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise LookupError(f"Question {question_id} does not belong to quiz {self.id}")

    def configuration_for(self, question: Question) -> QuestionConfiguration:
        return question.question_configuration or self.global_question_configuration


@dataclass(eq=False)
class Attempt:
    id: int
    quiz: Quiz
    examinee: User
    start_time: datetime
    end_time: datetime | None = None
    solutions: list[Solution] = field(default_factory=list)

    @property
    def quiz_id(self) -> int:
        return self.quiz.id

    @property
    def examinee_id(self) -> str:
        return self.examinee.id

    @property
    def is_submitted(self) -> bool:
        return self.end_time is not None

    @property
    def deadline(self) -> datetime:
        """The moment the attempt should end: duration elapsed or quiz closed."""
        return min(self.start_time + self.quiz.duration, self.quiz.end_date)

    @property
    def grade(self) -> float | None:
        """Total received grade, or None while any solution is ungraded."""
        if any(s.received_grade is None for s in self.solutions):
            return None
        return sum(s.received_grade or 0.0 for s in self.solutions)
