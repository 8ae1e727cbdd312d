# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from codequiz_eval.config import EvaluationConfig
from codequiz_eval.models import (
    Attempt,
    Question,
    QuestionConfiguration,
    Quiz,
    Solution,
    TestCase,
    User,
)
from codequiz_eval.notifications import InMemoryNotificationSink
from codequiz_eval.repository import InMemoryAttemptRepository
from codequiz_eval.services import LoggingMailService

NOW = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config(tmp_path: Path) -> EvaluationConfig:
    return EvaluationConfig(temp_code_path=tmp_path / "code", enable_audit_logging=False)


@pytest.fixture
def examiner() -> User:
    return User(id="examiner-1", email="examiner@example.com", first_name="Ada", last_name="Lovelace")


@pytest.fixture
def examinee() -> User:
    return User(id="student-1", email="student@example.com", first_name="Alan", last_name="Turing")


@pytest.fixture
def quiz(examiner: User) -> Quiz:
    return Quiz(
        id=1,
        title="Intro to Python",
        start_date=NOW - timedelta(hours=2),
        end_date=NOW + timedelta(hours=2),
        duration=timedelta(minutes=60),
        examiner=examiner,
        global_question_configuration=QuestionConfiguration(language="python"),
        questions=[
            Question(
                id=10,
                statement="Print the sum of two numbers.",
                points=10.0,
                order=1,
                test_cases=[
                    TestCase(test_case_number=1, input=["1", "2"], expected_output="3"),
                    TestCase(test_case_number=2, input=["5", "5"], expected_output="10"),
                ],
            ),
            Question(
                id=20,
                statement="Print Hello World.",
                points=5.0,
                order=2,
                test_cases=[TestCase(test_case_number=1, expected_output="Hello World")],
            ),
        ],
    )


@pytest.fixture
def attempt(quiz: Quiz, examinee: User) -> Attempt:
    attempt = Attempt(
        id=100,
        quiz=quiz,
        examinee=examinee,
        start_time=NOW - timedelta(minutes=30),
        end_time=NOW - timedelta(minutes=5),
    )
    attempt.solutions = [
        Solution(id=1000, question_id=10, attempt_id=100, code="print(int(input()) + int(input()))"),
        Solution(id=1001, question_id=20, attempt_id=100, code="print('Hello World')"),
    ]
    quiz.attempts.append(attempt)
    return attempt


@pytest.fixture
def repository(quiz: Quiz) -> InMemoryAttemptRepository:
    return InMemoryAttemptRepository(quizzes=[quiz])


@pytest.fixture
def notifier() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def mail() -> AsyncMock:
    return AsyncMock(spec=LoggingMailService)
