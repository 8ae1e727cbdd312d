# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

"""Real-time notification sinks for evaluation progress events."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

import httpx
from loguru import logger
from pydantic import BaseModel

from codequiz_eval.models import utcnow

EVALUATION_STARTED = "EvaluationStarted"
SYSTEM_GRADING_COMPLETE = "SystemGradingComplete"
AI_ASSESSMENT_COMPLETE = "AiAssessmentComplete"
EVALUATION_FAILED = "EvaluationFailed"
ATTEMPT_AUTO_SUBMITTED = "AttemptAutoSubmitted"
QUIZ_UPDATED = "QuizUpdated"


def user_group(user_id: str) -> str:
    return f"user_{user_id}"


def examiner_group(examiner_id: str) -> str:
    return f"examiner_{examiner_id}"


class NotificationSink(Protocol):
    async def publish(self, group: str, event: str, payload: BaseModel) -> None:
        """Deliver ``event`` with ``payload`` to every subscriber of ``group``."""
        ...


@dataclass(frozen=True)
class PublishedEvent:
    group: str
    event: str
    payload: BaseModel
    published_at: datetime


class InMemoryNotificationSink:
    """Records published events. Used by default and in tests."""

    def __init__(self) -> None:
        self.events: list[PublishedEvent] = []

    async def publish(self, group: str, event: str, payload: BaseModel) -> None:
        self.events.append(PublishedEvent(group=group, event=event, payload=payload, published_at=utcnow()))
        logger.debug(f"Published {event} to {group}")

    def events_for(self, group: str) -> list[PublishedEvent]:
        return [e for e in self.events if e.group == group]

    def names_for(self, group: str) -> list[str]:
        return [e.event for e in self.events_for(group)]


class WebhookNotificationSink:
    """
    Forwards events to a pub/sub hub over HTTP.

    Each event is POSTed as ``{"group", "event", "payload"}``. Delivery is
    best-effort: HTTP failures are logged and never raised into the pipeline.
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._internal_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def publish(self, group: str, event: str, payload: BaseModel) -> None:
        body: dict[str, Any] = {"group": group, "event": event, "payload": payload.model_dump(mode="json")}
        try:
            response = await self._client.post(self.url, json=body, headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to deliver {event} to {group}: {e}")

    async def aclose(self) -> None:
        if self._internal_client:
            await self._client.aclose()
