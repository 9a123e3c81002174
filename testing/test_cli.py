"""Tests for the terminal quiz loop."""

from __future__ import annotations

import pytest

from mathquiz.errors import QuestionGenerationError
from mathquiz.main import load_skills, main, run_quiz
from mathquiz.models import QuestionRecord, SkillListDifficulty
from mathquiz.session import QuizController
from mathquiz.timer import Timer


class FakeSource:
    """Question source stub; every answer is 4."""

    def __init__(self, failures: int = 0) -> None:
        self.requests = []
        self.failures = failures

    def generate_question(self, request):
        self.requests.append(request)
        if self.failures:
            self.failures -= 1
            raise QuestionGenerationError()
        return QuestionRecord(
            question=f"Question {len(self.requests)}",
            answer="4",
            difficulty=request.current_difficulty,
            explanation="Two and two.",
            steps=["Take two", "Add two"],
        )


def _scripted(*answers: str):
    replies = iter(answers)
    return lambda prompt="": next(replies)


def _controller(source: FakeSource) -> QuizController:
    return QuizController(source, Timer(clock=lambda: 0.0, interval=None))


def test_run_quiz_walks_through_questions():
    source = FakeSource()
    output: list[str] = []
    descriptor = SkillListDifficulty(skills=["A", "B", "C"])

    streak = run_quiz(
        _controller(source),
        descriptor,
        read=_scripted("4", "s", "", "?", "q"),
        output=output.append,
    )

    assert streak == 0
    assert "Correct!" in output
    assert "Streak: 3 correct in a row!" in output
    assert "  Step 1: Take two" in output
    assert "Question: Question 2" in output
    assert "Don't worry, let's try an easier one" in output
    assert [r.previous_answer for r in source.requests] == [None, "correct", "dontknow"]


def test_run_quiz_stops_after_max_questions():
    source = FakeSource()
    output: list[str] = []

    streak = run_quiz(
        _controller(source),
        SkillListDifficulty(skills=["A", "B"]),
        read=_scripted("4"),
        output=output.append,
        max_questions=1,
    )

    assert streak == 3
    assert len(source.requests) == 2


def test_run_quiz_retries_failed_prefetch():
    source = FakeSource()
    controller = _controller(source)
    output: list[str] = []
    reads = _scripted("4", "", "r", "", "q")

    def read(prompt=""):
        reply = reads(prompt)
        if reply == "4":
            source.failures = 1
        return reply

    run_quiz(controller, SkillListDifficulty(skills=["A"]), read=read, output=output.append)

    assert "The next question is not ready yet." in output
    assert "Question: Question 3" in output


def test_run_quiz_gives_up_when_first_question_fails():
    source = FakeSource(failures=1)
    output: list[str] = []

    streak = run_quiz(
        _controller(source),
        SkillListDifficulty(skills=["A"]),
        read=_scripted("n"),
        output=output.append,
    )

    assert streak == 0
    assert output == ["Error: Failed to generate question"]


def test_run_quiz_reads_from_stdin_by_default(monkeypatch):
    monkeypatch.setattr("builtins.input", _scripted("q"))
    printed: list[str] = []
    monkeypatch.setattr("builtins.print", lambda *args: printed.append(" ".join(args)))

    run_quiz(_controller(FakeSource()), SkillListDifficulty(skills=["A"]))

    assert "Question: Question 1" in printed


def test_load_skills_from_file(tmp_path):
    path = tmp_path / "skills.txt"
    path.write_text("addition\nsubtraction\n")

    class Args:
        skills_file = str(path)
        skills = None

    assert load_skills(Args()) == "addition\nsubtraction\n"


def test_main_rejects_empty_skills():
    with pytest.raises(SystemExit):
        main(source=FakeSource(), argv=["--skills", ",,"])
