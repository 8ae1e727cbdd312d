# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

"""Serializable, role-specific projections of quiz entities."""

from datetime import datetime, timedelta

from pydantic import BaseModel

from codequiz_eval.models.execution import EvaluationResult, TestCase
from codequiz_eval.models.quiz import AiAssessment, Attempt, Question, Quiz, Solution, User


class UserView(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str

    @classmethod
    def from_entity(cls, user: User) -> "UserView":
        return cls(id=user.id, email=user.email, first_name=user.first_name, last_name=user.last_name)


class QuestionView(BaseModel):
    id: int
    statement: str
    points: float
    order: int
    language: str
    test_cases: list[TestCase]

    @classmethod
    def from_entity(cls, question: Question, quiz: Quiz) -> "QuestionView":
        return cls(
            id=question.id,
            statement=question.statement,
            points=question.points,
            order=question.order,
            language=quiz.configuration_for(question).language,
            test_cases=question.test_cases,
        )


class SolutionView(BaseModel):
    id: int
    question_id: int
    attempt_id: int
    code: str
    evaluation_results: list[EvaluationResult]
    received_grade: float | None
    evaluated_by: str | None
    ai_assessment: AiAssessment | None = None

    @classmethod
    def from_entity(cls, solution: Solution, include_assessment: bool = True) -> "SolutionView":
        return cls(
            id=solution.id,
            question_id=solution.question_id,
            attempt_id=solution.attempt_id,
            code=solution.code,
            evaluation_results=list(solution.evaluation_results),
            received_grade=solution.received_grade,
            evaluated_by=solution.evaluated_by,
            ai_assessment=solution.ai_assessment if include_assessment else None,
        )


class ExamineeQuiz(BaseModel):
    id: int
    title: str
    start_date: datetime
    end_date: datetime
    duration: timedelta
    examiner: UserView
    questions: list[QuestionView]
    total_points: float
    show_ai_feedback_to_students: bool

    @classmethod
    def from_entity(cls, quiz: Quiz) -> "ExamineeQuiz":
        return cls(
            id=quiz.id,
            title=quiz.title,
            start_date=quiz.start_date,
            end_date=quiz.end_date,
            duration=quiz.duration,
            examiner=UserView.from_entity(quiz.examiner),
            questions=[QuestionView.from_entity(q, quiz) for q in quiz.questions],
            total_points=quiz.total_points,
            show_ai_feedback_to_students=quiz.show_ai_feedback_to_students,
        )


class ExaminerQuiz(BaseModel):
    """Examiner-facing quiz view with live attempt statistics."""

    id: int
    title: str
    start_date: datetime
    end_date: datetime
    duration: timedelta
    examiner_id: str
    questions: list[QuestionView]
    questions_count: int
    total_points: float
    attempts_count: int
    submitted_attempts_count: int
    average_attempt_score: float

    @classmethod
    def from_entity(cls, quiz: Quiz) -> "ExaminerQuiz":
        # Only fully graded attempts contribute to the average.
        graded = [a.grade for a in quiz.attempts if a.grade is not None]
        return cls(
            id=quiz.id,
            title=quiz.title,
            start_date=quiz.start_date,
            end_date=quiz.end_date,
            duration=quiz.duration,
            examiner_id=quiz.examiner_id,
            questions=[QuestionView.from_entity(q, quiz) for q in quiz.questions],
            questions_count=len(quiz.questions),
            total_points=quiz.total_points,
            attempts_count=len(quiz.attempts),
            submitted_attempts_count=sum(1 for a in quiz.attempts if a.is_submitted),
            average_attempt_score=sum(graded) / len(graded) if graded else 0.0,
        )


class ExaminerAttempt(BaseModel):
    id: int
    quiz_id: int
    examinee_id: str
    start_time: datetime
    end_time: datetime | None
    grade: float | None
    examinee: UserView
    solutions: list[SolutionView]

    @classmethod
    def from_entity(cls, attempt: Attempt) -> "ExaminerAttempt":
        return cls(
            id=attempt.id,
            quiz_id=attempt.quiz_id,
            examinee_id=attempt.examinee_id,
            start_time=attempt.start_time,
            end_time=attempt.end_time,
            grade=attempt.grade,
            examinee=UserView.from_entity(attempt.examinee),
            solutions=[SolutionView.from_entity(s) for s in attempt.solutions],
        )


class ExamineeAttempt(BaseModel):
    """Examinee-facing attempt view.

    AI assessments are hidden unless the quiz shares AI feedback with students.
    """

    id: int
    quiz_id: int
    examinee_id: str
    start_time: datetime
    end_time: datetime | None
    max_end_time: datetime
    grade: float | None
    grade_percentage: float | None
    quiz: ExamineeQuiz
    solutions: list[SolutionView]

    @classmethod
    def from_entity(cls, attempt: Attempt) -> "ExamineeAttempt":
        quiz = attempt.quiz
        grade = attempt.grade
        total = quiz.total_points
        return cls(
            id=attempt.id,
            quiz_id=attempt.quiz_id,
            examinee_id=attempt.examinee_id,
            start_time=attempt.start_time,
            end_time=attempt.end_time,
            max_end_time=attempt.deadline,
            grade=grade,
            grade_percentage=(grade / total) * 100 if grade is not None and total else None,
            quiz=ExamineeQuiz.from_entity(quiz),
            solutions=[
                SolutionView.from_entity(s, include_assessment=quiz.show_ai_feedback_to_students)
                for s in attempt.solutions
            ],
        )


class EvaluationStatusPayload(BaseModel):
    """Body of every evaluation status event sent to the notification sink."""

    attempt_id: int
    quiz_id: int
    status: str
    error_message: str | None = None
    examiner_attempt: ExaminerAttempt | None = None
    examinee_attempt: ExamineeAttempt | None = None
    timestamp: datetime


class QuizEndStatistics(BaseModel):
    quiz_title: str
    start_date: datetime
    end_date: datetime
    total_attempts: int
    submitted_attempts: int
    in_progress_attempts: int
    average_grade: float = 0.0
    highest_grade: float = 0.0
    lowest_grade: float = 0.0
    pass_rate: float = 0.0
    total_ai_assessments: int = 0
    flagged_solutions: int = 0
    total_points: float = 0.0
