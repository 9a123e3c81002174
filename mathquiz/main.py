#!/usr/bin/env python3
"""Adaptive math quiz - terminal front-end.

Usage:
    python -m mathquiz.main                                   # Bounded range from .env defaults
    python -m mathquiz.main --lower "addition" --upper "long division"
    python -m mathquiz.main --skills "addition,subtraction,multiplication"
    python -m mathquiz.main --skills-file skills.txt          # One skill per line
    python -m mathquiz.main --max-questions 10

While answering: type the answer, or "?" for "I don't know".
After feedback: Enter for the next question, "s" for the step-by-step
solution, "r" to retry a failed request, "q" to go back.
"""

import argparse
import logging
from pathlib import Path
from typing import Callable

from mathquiz.config import settings
from mathquiz.errors import InvalidTransition
from mathquiz.models import DifficultyDescriptor, SessionPhase
from mathquiz.services.question_client import QuestionSource, default_question_source
from mathquiz.session import QuizController
from mathquiz.ui_utils import (
    build_descriptor,
    feedback_message,
    multiplier_message,
    numbered_steps,
    streak_message,
)

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s: %(message)s")
log = logging.getLogger(__name__)

DONT_KNOW = "?"
QUIT = "q"


def _show_question(controller: QuizController, output: Callable[[str], None]) -> None:
    question = controller.session.current_question
    output("")
    output(f"Question: {question.question}")
    output(f"Difficulty: {question.difficulty}")


def _show_feedback(controller: QuizController, output: Callable[[str], None]) -> None:
    session = controller.session
    question = session.current_question
    output(feedback_message(session.outcome, question))
    output(question.explanation)
    bonus = multiplier_message(session.multiplier, session.response_seconds)
    if bonus:
        output(bonus)
    streak = streak_message(session.streak)
    if streak:
        output(streak)


def _wait_for_next(
    controller: QuizController,
    read: Callable[[str], str],
    output: Callable[[str], None],
) -> bool:
    """Handle the feedback screen. Returns False when the learner quits."""
    while True:
        if controller.session.error:
            output(f"Error: {controller.session.error}. Press r to retry.")
        choice = read("[Enter] next, [s] steps, [r] retry, [q] quit > ").strip().lower()
        if choice == QUIT:
            return False
        if choice == "s":
            if controller.toggle_steps():
                for line in numbered_steps(controller.session.current_question.steps):
                    output(f"  {line}")
            continue
        if choice == "r":
            if controller.session.error:
                controller.retry()
            continue
        if controller.can_advance:
            controller.advance()
            return True
        output("The next question is not ready yet.")


def run_quiz(
    controller: QuizController,
    descriptor: DifficultyDescriptor,
    read: Callable[[str], str] | None = None,
    output: Callable[[str], None] | None = None,
    max_questions: int = 0,
) -> int:
    """Run one test in the terminal. Returns the final streak."""
    read = read or input
    output = output or print
    controller.start(descriptor)
    while controller.phase is SessionPhase.AWAITING_FIRST_QUESTION:
        output(f"Error: {controller.session.error}")
        if read("Retry? [Y/n] > ").strip().lower() == "n":
            controller.return_to_settings()
            return 0
        controller.retry()

    answered = 0
    try:
        while True:
            _show_question(controller, output)
            answer = read("Your answer > ")
            if answer.strip().lower() == QUIT:
                break
            if answer.strip() == DONT_KNOW:
                controller.dont_know()
            elif not answer.strip():
                continue
            else:
                controller.submit_answer(answer)
            answered += 1
            _show_feedback(controller, output)

            if max_questions and answered >= max_questions:
                break
            if not _wait_for_next(controller, read, output):
                break
    except (EOFError, KeyboardInterrupt):
        output("")
    except InvalidTransition as e:
        log.error(f"Quiz stopped: {e}")

    final_streak = controller.session.streak
    log.info(f"=== Test finished: answered={answered}, streak={final_streak} ===")
    controller.return_to_settings()
    return final_streak


def load_skills(args: argparse.Namespace) -> str | None:
    if args.skills_file:
        return Path(args.skills_file).read_text()
    if args.skills:
        return "\n".join(args.skills.split(","))
    return None


def main(source: QuestionSource | None = None, argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Adaptive math quiz")
    parser.add_argument("--lower", type=str, default=settings.DEFAULT_LOWER_BOUND)
    parser.add_argument("--upper", type=str, default=settings.DEFAULT_UPPER_BOUND)
    parser.add_argument(
        "--skills",
        type=str,
        default=None,
        help="Comma-separated skills, easiest first (switches to skills-list mode)",
    )
    parser.add_argument("--skills-file", type=str, default=None)
    parser.add_argument(
        "--max-questions",
        type=int,
        default=0,
        help="Stop after this many answers (0 = until quit)",
    )
    args = parser.parse_args(argv)

    skills_text = load_skills(args)
    descriptor = build_descriptor(
        use_skills_list=skills_text is not None,
        skills_text=skills_text or "",
        lower=args.lower,
        upper=args.upper,
    )
    if descriptor is None:
        parser.error("difficulty bounds or skills list must not be empty")

    log.info(f"Config: mode={descriptor.kind}, model={settings.OPENAI_MODEL}")
    controller = QuizController(source or default_question_source())
    run_quiz(controller, descriptor, max_questions=args.max_questions)


if __name__ == "__main__":
    main()
