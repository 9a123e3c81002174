"""OpenAI-backed question generation."""

import json
import logging
import re
from typing import Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from mathquiz.config import settings
from mathquiz.difficulty import descriptor_from_request, select_next
from mathquiz.errors import QuestionGenerationError
from mathquiz.models import QuestionRecord, QuestionRequest
from mathquiz.prompts import USER_MESSAGE

log = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def parse_json_reply(raw_text: Optional[str]) -> dict:
    """Decode the model's JSON reply, unwrapping a Markdown code fence if present.

    Every failure raises the generic QuestionGenerationError; the reason is logged.
    """
    if not raw_text:
        log.error("Empty response from the model")
        raise QuestionGenerationError()
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as e:
        fenced = _CODE_FENCE.search(raw_text)
        if not fenced:
            log.error(f"Model response was not JSON: {e}")
            raise QuestionGenerationError() from e
        try:
            data = json.loads(fenced.group(1))
        except json.JSONDecodeError as fenced_error:
            log.error(f"Fenced model response was not JSON: {fenced_error}")
            raise QuestionGenerationError() from fenced_error
    if not isinstance(data, dict):
        log.error(f"Model response was not a JSON object: {type(data).__name__}")
        raise QuestionGenerationError()
    return data


class LLMService:
    """Generates one question per request through the chat completions API."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        # No client-side retries: a failed request is surfaced to the learner, who retries.
        self.client = client or OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            max_retries=0,
        )
        self.model = model or settings.OPENAI_MODEL

    def build_prompt(self, request: QuestionRequest) -> str:
        descriptor = descriptor_from_request(request)
        selection = select_next(descriptor, request.outcome, request.correct_streak)
        log.debug(
            f"Prompting for {selection.target!r} "
            f"(current={selection.current!r}, previous={request.previous_answer})"
        )
        return selection.prompt

    def generate_question(self, request: QuestionRequest) -> QuestionRecord:
        """Ask the model for the next question and validate its reply."""
        prompt = self.build_prompt(request)
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": USER_MESSAGE},
                ],
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            log.error(f"Error generating question: {e}")
            raise QuestionGenerationError() from e

        try:
            content = completion.choices[0].message.content
        except (IndexError, AttributeError, TypeError) as e:
            log.error(f"Model reply had no message: {e}")
            raise QuestionGenerationError() from e

        data = parse_json_reply(content)
        try:
            return QuestionRecord(**data)
        except ValidationError as e:
            log.error(f"Model returned an incomplete question: {e}")
            raise QuestionGenerationError() from e
