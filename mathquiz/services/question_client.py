"""Client for a remote question-generation endpoint.

Nothing in this package serves `POST /api/generate-question`. The client
talks to an outside deployment of that route: the request body is
`QuestionRequest.to_wire()` (camelCase keys) and a 200 reply is one
`QuestionRecord` as JSON. A non-2xx status is a failed request.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError

from mathquiz.config import settings
from mathquiz.errors import QuestionGenerationError
from mathquiz.models import QuestionRecord, QuestionRequest

log = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate-question"


class QuestionSource(Protocol):
    def generate_question(self, request: QuestionRequest) -> QuestionRecord: ...


class QuestionServiceClient:
    """POSTs generation requests to `QUESTION_SERVICE_URL`."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        base = (base_url or settings.QUESTION_SERVICE_URL or "").strip().rstrip("/")
        if not base:
            raise ValueError("QUESTION_SERVICE_URL is not set")
        self.base = base
        self.client = httpx.Client(
            base_url=base,
            headers={"content-type": "application/json"},
            timeout=timeout or settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    def generate_question(self, request: QuestionRequest) -> QuestionRecord:
        try:
            r = self.client.post(GENERATE_PATH, json=request.to_wire())
            r.raise_for_status()
            return QuestionRecord(**r.json())
        except httpx.HTTPError as e:
            log.error(f"Question service request failed: {e}")
            raise QuestionGenerationError() from e
        except (ValueError, TypeError, ValidationError) as e:
            # ValueError covers an unparsable body from r.json().
            log.error(f"Question service sent an unreadable body: {e}")
            raise QuestionGenerationError() from e

    def close(self) -> None:
        self.client.close()


def default_question_source() -> QuestionSource:
    """Remote client when a service URL is configured, otherwise OpenAI directly."""
    if settings.QUESTION_SERVICE_URL:
        return QuestionServiceClient()
    from mathquiz.services.llm import LLMService

    return LLMService()
