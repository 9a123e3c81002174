"""Tests for OpenAI-backed question generation."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from mathquiz.errors import QuestionGenerationError
from mathquiz.models import QuestionRequest, SessionPhase, SkillListDifficulty
from mathquiz.services.llm import LLMService, parse_json_reply
from mathquiz.session import QuizController
from mathquiz.timer import Timer

QUESTION = {
    "question": "What is 6 x 7?",
    "answer": "42",
    "difficulty": "multiplication to 9",
    "explanation": "Six groups of seven.",
    "steps": ["Step 1: Count by sevens", "Step 2: Stop at six groups", "Step 3: 42"],
}


class FakeCompletions:
    def __init__(
        self,
        content: str | None = None,
        error: Exception | None = None,
        choices: list | None = None,
    ):
        self.content = content
        self.error = error
        self.choices = choices
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        if self.choices is not None:
            return SimpleNamespace(choices=self.choices)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """OpenAI client stub exposing chat.completions.create."""

    def __init__(self, **kwargs) -> None:
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)


def _request(**overrides) -> QuestionRequest:
    body = {
        "previousAnswer": "correct",
        "correctStreak": 2,
        "currentDifficulty": "B",
        "useSkillsList": True,
        "skillsList": ["A", "B", "C", "D"],
    }
    body.update(overrides)
    return QuestionRequest.model_validate(body)


def test_generate_question_returns_record():
    client = FakeOpenAI(content=json.dumps(QUESTION))
    service = LLMService(client=client, model="test-model")

    record = service.generate_question(_request())

    assert record.answer == "42"
    assert len(record.steps) == 3
    call = client.completions.calls[0]
    assert call["model"] == "test-model"
    assert call["response_format"] == {"type": "json_object"}
    assert call["messages"][0]["role"] == "system"
    assert "Next skill to test: D" in call["messages"][0]["content"]
    assert call["messages"][1] == {
        "role": "user",
        "content": "Generate a math question based on the criteria above.",
    }


def test_bounded_request_prompt_carries_bounds():
    client = FakeOpenAI(content=json.dumps(QUESTION))
    service = LLMService(client=client)

    service.generate_question(
        _request(
            previousAnswer="incorrect",
            useSkillsList=False,
            lowerBoundDifficulty="counting",
            upperBoundDifficulty="fractions",
        )
    )

    prompt = client.completions.calls[0]["messages"][0]["content"]
    assert "between counting and fractions" in prompt
    assert "half a level easier" in prompt


def test_numeric_answer_and_missing_steps_are_accepted():
    data = dict(QUESTION, answer=42)
    del data["steps"]
    service = LLMService(client=FakeOpenAI(content=json.dumps(data)))

    record = service.generate_question(_request())

    assert record.answer == "42"
    assert record.steps == []


def test_fenced_reply_is_unwrapped():
    raw = "Here you go:\n```json\n" + json.dumps(QUESTION) + "\n```"

    assert parse_json_reply(raw)["answer"] == "42"


@pytest.mark.parametrize("content", [None, "", "not json", "[1, 2]", "```json\n{oops\n```"])
def test_unreadable_reply_raises_generic_error(content):
    service = LLMService(client=FakeOpenAI(content=content))

    with pytest.raises(QuestionGenerationError) as excinfo:
        service.generate_question(_request())

    assert str(excinfo.value) == "Failed to generate question"


@pytest.mark.parametrize("choices", [[], [SimpleNamespace()]])
def test_reply_without_message_raises_generic_error(choices):
    service = LLMService(client=FakeOpenAI(choices=choices))

    with pytest.raises(QuestionGenerationError, match="Failed to generate question"):
        service.generate_question(_request())


def test_incomplete_question_raises():
    data = dict(QUESTION)
    del data["explanation"]
    service = LLMService(client=FakeOpenAI(content=json.dumps(data)))

    with pytest.raises(QuestionGenerationError):
        service.generate_question(_request())


def test_api_error_raises_generation_error():
    service = LLMService(client=FakeOpenAI(error=OpenAIError("rate limited")))

    with pytest.raises(QuestionGenerationError, match="Failed to generate question"):
        service.generate_question(_request())


@pytest.mark.parametrize("reply", [{"content": "not json"}, {"choices": []}])
def test_bad_reply_leaves_session_retryable(reply):
    controller = QuizController(
        LLMService(client=FakeOpenAI(**reply)), Timer(clock=lambda: 0.0, interval=None)
    )

    session = controller.start(SkillListDifficulty(skills=["A", "B"]))

    assert session.phase is SessionPhase.AWAITING_FIRST_QUESTION
    assert session.error == "Failed to generate question"
    assert not session.loading
