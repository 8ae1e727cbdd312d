# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EvaluationJob(BaseModel):
    """A request to grade one submitted attempt.

    Attributes:
        attempt_id: The attempt to grade.
        examinee_id: Owner of the attempt; receives status events.
        examiner_id: Owner of the quiz; receives status events and statistics.
        quiz_id: The quiz the attempt belongs to.
        enqueued_at: When the job was created.
        specific_solution_id: If set, only this solution is re-assessed by AI
            and system grading is skipped.
    """

    model_config = ConfigDict(frozen=True)

    attempt_id: int
    examinee_id: str
    examiner_id: str
    quiz_id: int
    enqueued_at: datetime = Field(default_factory=utcnow)
    specific_solution_id: int | None = None

    @property
    def is_ai_reassessment_only(self) -> bool:
        return self.specific_solution_id is not None
