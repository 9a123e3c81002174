"""Helpers shared by the terminal and Streamlit front-ends."""

from __future__ import annotations

from typing import Iterable

from mathquiz.models import (
    AnswerEvent,
    BoundedDifficulty,
    DifficultyDescriptor,
    Outcome,
    QuestionRecord,
    SkillListDifficulty,
)
from mathquiz.streak import SLOW_RESET_MULTIPLIER


def parse_skills(text: str) -> list[str]:
    """One skill per line, easiest first; blank lines dropped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def build_descriptor(
    use_skills_list: bool, skills_text: str, lower: str, upper: str
) -> DifficultyDescriptor | None:
    """Descriptor for the settings form, or None while the form is incomplete."""
    if use_skills_list:
        skills = parse_skills(skills_text)
        if not skills:
            return None
        return SkillListDifficulty(skills=skills, current_index=0)
    lower, upper = lower.strip(), upper.strip()
    if not lower or not upper:
        return None
    return BoundedDifficulty(lower=lower, upper=upper, current=lower)


def feedback_message(outcome: Outcome, question: QuestionRecord) -> str:
    if outcome is Outcome.CORRECT:
        return "Correct!"
    if outcome is Outcome.UNKNOWN:
        return "Don't worry, let's try an easier one"
    if outcome is Outcome.INCORRECT:
        return f"Incorrect. The correct answer is {question.answer}"
    return ""


def multiplier_message(multiplier: float | None, seconds: int | None) -> str:
    """Describe the speed bonus of the last correct answer."""
    if multiplier is None:
        return ""
    if multiplier == SLOW_RESET_MULTIPLIER:
        return f"Answered in {seconds}s: too slow for a bonus, streak reset to 1"
    if multiplier > 1:
        return f"Answered in {seconds}s: x{multiplier:g} speed bonus!"
    return f"Answered in {seconds}s"


def streak_message(streak: int) -> str:
    if streak <= 0:
        return ""
    return f"Streak: {streak} correct in a row!"


def format_elapsed(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes}:{secs:02d}"


def numbered_steps(steps: Iterable[str]) -> list[str]:
    """Prefix steps with their position unless the model already did."""
    lines: list[str] = []
    for idx, step in enumerate(steps, 1):
        text = step.strip()
        if not text:
            continue
        if text.lower().startswith("step "):
            lines.append(text)
        else:
            lines.append(f"Step {idx}: {text}")
    return lines


def history_series(history: Iterable[AnswerEvent]) -> list[dict[str, float | str]]:
    """Rows for the streak/response-time chart."""
    return [
        {
            "question": float(event.number),
            "streak": float(event.streak),
            "seconds": float(event.seconds),
            "outcome": event.outcome.value,
        }
        for event in history
    ]
