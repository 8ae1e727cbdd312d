# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from datetime import timedelta

from codequiz_eval.models import (
    AiAssessment,
    Attempt,
    CodeRunnerResult,
    EvaluationJob,
    EvaluationResult,
    ExamineeAttempt,
    ExaminerAttempt,
    ExaminerQuiz,
    Quiz,
    TestCase,
)

HELLO = TestCase(test_case_number=1, input=[], expected_output="Hello World")


def test_judge_exact_match() -> None:
    result = EvaluationResult.judge(HELLO, CodeRunnerResult(success=True, output="Hello World"))

    assert result.is_successful is True
    assert result.output == "Hello World"


def test_judge_case_mismatch() -> None:
    result = EvaluationResult.judge(HELLO, CodeRunnerResult(success=True, output="hello world"))

    assert result.is_successful is False
    assert result.output == "hello world"


def test_judge_trims_whitespace() -> None:
    test_case = TestCase(test_case_number=1, expected_output="  Hello World\n")
    result = EvaluationResult.judge(test_case, CodeRunnerResult(success=True, output="Hello World  \n\n"))

    assert result.is_successful is True


def test_judge_failed_run_never_passes() -> None:
    result = EvaluationResult.judge(
        HELLO, CodeRunnerResult(success=False, output="Hello World", error="Segmentation fault")
    )

    assert result.is_successful is False
    assert result.error == "Segmentation fault"


def test_judge_missing_output() -> None:
    result = EvaluationResult.judge(TestCase(test_case_number=1, expected_output=""), CodeRunnerResult(success=True))

    assert result.is_successful is False
    assert result.output == ""


def test_deadline_is_duration_end(attempt: Attempt) -> None:
    assert attempt.deadline == attempt.start_time + attempt.quiz.duration


def test_deadline_is_quiz_end(attempt: Attempt, quiz: Quiz) -> None:
    quiz.end_date = attempt.start_time + timedelta(minutes=10)

    assert attempt.deadline == quiz.end_date


def test_grade_requires_every_solution(attempt: Attempt) -> None:
    attempt.solutions[0].received_grade = 10.0
    assert attempt.grade is None

    attempt.solutions[1].received_grade = 2.5
    assert attempt.grade == 12.5


def test_examinee_view_hides_ai_feedback(attempt: Attempt, quiz: Quiz) -> None:
    attempt.solutions[0].ai_assessment = AiAssessment(is_valid=False, confidence_score=0.9, reasoning="Hardcoded")

    hidden = ExamineeAttempt.from_entity(attempt)
    assert hidden.solutions[0].ai_assessment is None

    quiz.show_ai_feedback_to_students = True
    shown = ExamineeAttempt.from_entity(attempt)
    assert shown.solutions[0].ai_assessment is not None

    examiner_view = ExaminerAttempt.from_entity(attempt)
    assert examiner_view.solutions[0].ai_assessment is not None


def test_examinee_view_grade_percentage(attempt: Attempt) -> None:
    attempt.solutions[0].received_grade = 10.0
    attempt.solutions[1].received_grade = 5.0

    view = ExamineeAttempt.from_entity(attempt)

    assert view.grade == 15.0
    assert view.grade_percentage == 100.0
    assert view.max_end_time == attempt.deadline
    assert view.quiz.total_points == 15.0


def test_examiner_quiz_statistics(attempt: Attempt, quiz: Quiz) -> None:
    attempt.solutions[0].received_grade = 5.0
    attempt.solutions[1].received_grade = 5.0
    ungraded = Attempt(id=101, quiz=quiz, examinee=attempt.examinee, start_time=attempt.start_time)
    quiz.attempts.append(ungraded)

    view = ExaminerQuiz.from_entity(quiz)

    assert view.attempts_count == 2
    assert view.submitted_attempts_count == 1
    assert view.questions_count == 2
    # The in-progress attempt has no solutions, so it counts as graded with zero.
    assert view.average_attempt_score == 5.0


def test_examiner_view_serializes(attempt: Attempt) -> None:
    data = ExaminerAttempt.from_entity(attempt).model_dump(mode="json")

    assert data["examinee"]["email"] == "student@example.com"
    assert data["solutions"][0]["code"].startswith("print")


def test_evaluation_job_reassessment_flag() -> None:
    job = EvaluationJob(attempt_id=1, examinee_id="a", examiner_id="b", quiz_id=2)
    assert job.is_ai_reassessment_only is False
    assert job.enqueued_at.tzinfo is not None

    reassess = job.model_copy(update={"specific_solution_id": 7})
    assert reassess.is_ai_reassessment_only is True
