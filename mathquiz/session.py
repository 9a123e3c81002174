"""Quiz session state machine.

Idle -> AwaitingFirstQuestion -> Presenting -> Evaluating -> Presenting ... -> Idle

The transition functions below take a Session and return a new one; the
QuizController wires them to the timer and the question source. Each
submission pre-fetches the next question into `pending_question`, which the
learner consumes with an explicit advance.
"""

from __future__ import annotations

import logging
from typing import Optional

from mathquiz import streak as streak_rules
from mathquiz.difficulty import build_request, follow_question, select_next
from mathquiz.errors import InvalidTransition, QuestionGenerationError
from mathquiz.models import (
    AnswerEvent,
    DifficultyDescriptor,
    Outcome,
    QuestionRecord,
    Session,
    SessionPhase,
)
from mathquiz.services.question_client import QuestionSource
from mathquiz.timer import Timer

log = logging.getLogger(__name__)


def grade(submitted: Optional[str], expected: str, dont_know: bool = False) -> Outcome:
    """Exact match after trimming; no numeric normalisation."""
    if dont_know or submitted is None:
        return Outcome.UNKNOWN
    if submitted.strip() == expected.strip():
        return Outcome.CORRECT
    return Outcome.INCORRECT


# ========== TRANSITIONS ==========


def begin(descriptor: DifficultyDescriptor) -> Session:
    """Idle -> AwaitingFirstQuestion."""
    selection = select_next(descriptor, Outcome.NONE, 0)
    return Session(
        phase=SessionPhase.AWAITING_FIRST_QUESTION,
        descriptor=descriptor,
        streak=0,
        outcome=Outcome.NONE,
        pending_question=None,
        target_difficulty=selection.target,
        target_index=selection.target_index,
        last_request=build_request(descriptor, Outcome.NONE, 0),
    )


def present_first(session: Session, question: QuestionRecord) -> Session:
    """AwaitingFirstQuestion -> Presenting."""
    return session.model_copy(
        update={
            "phase": SessionPhase.PRESENTING,
            "current_question": question,
            "descriptor": follow_question(session.descriptor, question, session.target_index),
            "elapsed_seconds": 0,
            "error": None,
        }
    )


def evaluate_submission(
    session: Session,
    submitted: Optional[str],
    response_seconds: int,
    dont_know: bool = False,
) -> Session:
    """Presenting -> Evaluating: grade, update the streak, choose the next level."""
    question = session.current_question
    outcome = grade(submitted, question.answer, dont_know)
    result = streak_rules.evaluate(outcome, response_seconds, session.streak)
    selection = select_next(session.descriptor, outcome, result.streak)
    event = AnswerEvent(
        number=len(session.history) + 1,
        outcome=outcome,
        seconds=response_seconds,
        streak=result.streak,
        multiplier=result.multiplier,
        difficulty=question.difficulty,
    )
    return session.model_copy(
        update={
            "phase": SessionPhase.EVALUATING,
            "outcome": outcome,
            "streak": result.streak,
            "multiplier": result.multiplier,
            "response_seconds": response_seconds,
            "elapsed_seconds": response_seconds,
            "submitted_answer": None if dont_know else submitted,
            "target_difficulty": selection.target,
            "target_index": selection.target_index,
            "pending_question": None,
            "show_explanation": True,
            "show_steps": False,
            "last_request": build_request(session.descriptor, outcome, result.streak),
            "history": [*session.history, event],
        }
    )


def store_pending(session: Session, question: QuestionRecord) -> Session:
    return session.model_copy(update={"pending_question": question, "error": None})


def advance_session(session: Session) -> Session:
    """Evaluating -> Presenting, consuming the pending question."""
    question = session.pending_question
    return session.model_copy(
        update={
            "phase": SessionPhase.PRESENTING,
            "current_question": question,
            "pending_question": None,
            "descriptor": follow_question(session.descriptor, question, session.target_index),
            "outcome": Outcome.NONE,
            "submitted_answer": None,
            "elapsed_seconds": 0,
            "show_explanation": False,
            "show_steps": False,
            "error": None,
        }
    )


# ========== CONTROLLER ==========


class QuizController:
    """Drives one learner's session against a question source."""

    def __init__(self, source: QuestionSource, timer: Optional[Timer] = None):
        self.source = source
        self.timer = timer or Timer()
        self.session = Session()

    @property
    def phase(self) -> SessionPhase:
        return self.session.phase

    def _require(self, *phases: SessionPhase) -> None:
        if self.session.phase not in phases:
            raise InvalidTransition(
                f"Not allowed while {self.session.phase.value} "
                f"(expected {', '.join(p.value for p in phases)})"
            )
        if self.session.loading:
            raise InvalidTransition("A question request is still in flight")

    def _fetch(self) -> Optional[QuestionRecord]:
        """Issue the session's last request; on failure record the error and keep state."""
        request = self.session.last_request
        self.session.loading = True
        self.session.error = None
        try:
            return self.source.generate_question(request)
        except QuestionGenerationError as e:
            log.warning(f"Question request failed ({request.previous_answer}): {e}")
            self.session.error = str(e)
            return None
        finally:
            self.session.loading = False

    def _receive(self, question: QuestionRecord) -> None:
        if self.session.phase is SessionPhase.AWAITING_FIRST_QUESTION:
            self.session = present_first(self.session, question)
            self.timer.start()
            log.info(f"First question ready at {question.difficulty!r}")
        else:
            self.session = store_pending(self.session, question)
            log.info(f"Next question ready at {question.difficulty!r}")

    def start(self, descriptor: DifficultyDescriptor) -> Session:
        """Start a new test, discarding any previous session."""
        if self.session.loading:
            raise InvalidTransition("A question request is still in flight")
        self.timer.stop()
        self.session = begin(descriptor)
        log.info(f"Test started ({descriptor.kind}, target={self.session.target_difficulty!r})")
        question = self._fetch()
        if question is not None:
            self._receive(question)
        return self.session

    def submit_answer(self, answer: str) -> Session:
        return self._submit(answer, dont_know=False)

    def dont_know(self) -> Session:
        return self._submit(None, dont_know=True)

    def _submit(self, answer: Optional[str], dont_know: bool) -> Session:
        self._require(SessionPhase.PRESENTING)
        seconds = self.timer.stop()
        self.session = evaluate_submission(self.session, answer, seconds, dont_know)
        log.info(
            f"Answer {self.session.outcome.value} in {seconds}s: "
            f"streak={self.session.streak} multiplier={self.session.multiplier} "
            f"-> {self.session.target_difficulty!r}"
        )
        question = self._fetch()
        if question is not None:
            self._receive(question)
        return self.session

    def retry(self) -> Session:
        """Re-issue the request that last failed."""
        self._require(SessionPhase.AWAITING_FIRST_QUESTION, SessionPhase.EVALUATING)
        if self.session.error is None:
            raise InvalidTransition("Nothing to retry")
        question = self._fetch()
        if question is not None:
            self._receive(question)
        return self.session

    def advance(self) -> Session:
        self._require(SessionPhase.EVALUATING)
        if self.session.pending_question is None:
            raise InvalidTransition("The next question has not arrived yet")
        self.session = advance_session(self.session)
        self.timer.start()
        return self.session

    def toggle_steps(self) -> bool:
        self._require(SessionPhase.EVALUATING)
        self.session.show_steps = not self.session.show_steps
        return self.session.show_steps

    def elapsed(self) -> int:
        """Seconds on the clock for the question being presented."""
        if self.session.phase is SessionPhase.PRESENTING:
            self.session.elapsed_seconds = self.timer.read()
        return self.session.elapsed_seconds

    def return_to_settings(self) -> Session:
        self.timer.stop()
        self.session = Session()
        log.info("Returned to settings")
        return self.session

    @property
    def can_advance(self) -> bool:
        return (
            self.session.phase is SessionPhase.EVALUATING
            and self.session.pending_question is not None
            and not self.session.loading
        )
