# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from .execution import (
    CodeRunnerOptions,
    CodeRunnerResult,
    EvaluationResult,
    SandboxRequest,
    SandboxResult,
    SupportedLanguage,
    TestCase,
)
from .jobs import EvaluationJob, utcnow
from .quiz import SYSTEM_EVALUATOR, AiAssessment, Attempt, Question, QuestionConfiguration, Quiz, Solution, User
from .views import (
    EvaluationStatusPayload,
    ExamineeAttempt,
    ExamineeQuiz,
    ExaminerAttempt,
    ExaminerQuiz,
    QuizEndStatistics,
    SolutionView,
)

__all__ = [
    "SYSTEM_EVALUATOR",
    "AiAssessment",
    "Attempt",
    "CodeRunnerOptions",
    "CodeRunnerResult",
    "EvaluationJob",
    "EvaluationResult",
    "EvaluationStatusPayload",
    "ExamineeAttempt",
    "ExamineeQuiz",
    "ExaminerAttempt",
    "ExaminerQuiz",
    "Question",
    "QuestionConfiguration",
    "Quiz",
    "QuizEndStatistics",
    "SandboxRequest",
    "SandboxResult",
    "Solution",
    "SolutionView",
    "SupportedLanguage",
    "TestCase",
    "User",
    "utcnow",
]
